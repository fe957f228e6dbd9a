import importlib
import os
import sys
import unittest


class ReportsApiTestCase(unittest.TestCase):
    def setUp(self):
        os.environ["DATABASE_URL"] = "sqlite:///:memory:"
        if "app" in sys.modules:
            self.app_module = importlib.reload(sys.modules["app"])
        else:
            self.app_module = importlib.import_module("app")

        self.app = self.app_module.create_app()
        self.app.testing = True
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.app_module.db.create_all()

        self.client = self.app.test_client()
        User = self.app_module.User
        RoleEnum = self.app_module.RoleEnum

        self.user = User(name="Clerk", email="clerk@example.com", role=RoleEnum.staff)
        self.user.set_password("Password!1")
        self.app_module.db.session.add(self.user)
        self.app_module.db.session.commit()

        self.token = self._login()
        self.product_id = self._seed_product()

    def tearDown(self):
        self.app_module.db.session.remove()
        self.app_module.db.drop_all()
        self.ctx.pop()
        os.environ.pop("DATABASE_URL", None)
        if "app" in sys.modules:
            del sys.modules["app"]

    def _login(self):
        response = self.client.post(
            "/api/auth/login",
            json={"email": "clerk@example.com", "password": "Password!1"},
        )
        self.assertEqual(response.status_code, 200)
        return response.get_json()["access_token"]

    def _auth_headers(self):
        return {"Authorization": f"Bearer {self.token}"}

    def _seed_product(self):
        from models import Product

        product = Product(name="Block", unit_price=1000)
        self.app_module.db.session.add(product)
        self.app_module.db.session.commit()
        return product.id

    def _post(self, url, payload):
        response = self.client.post(url, json=payload, headers=self._auth_headers())
        self.assertIn(response.status_code, (200, 201), response.get_json())
        return response.get_json()

    def _seed_month(self):
        self._post(
            "/api/production",
            {"product_id": self.product_id, "quantity": 100, "date": "1404/10/05"},
        )
        invoice = self._post(
            "/api/invoices",
            {
                "customer_name": "Customer",
                "date": "1404/10/05",
                "items": [{"product_id": self.product_id, "quantity": 30}],
            },
        )
        self._post(f"/api/invoices/{invoice['id']}/approve", {})
        self._post(f"/api/invoices/{invoice['id']}/pay", {"paid_date": "1404/10/06"})
        self._post(
            "/api/costs",
            {
                "type": "electricity",
                "amount": 50000,
                "period_type": "monthly",
                "period_value": "1404/10",
            },
        )

    def test_monthly_report_matches_ledger(self):
        self._seed_month()

        response = self.client.get(
            "/api/reports/monthly?year=1404&month=10", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 200)
        report = response.get_json()
        self.assertEqual(report["production"]["total_quantity"], 100)
        self.assertEqual(report["sales"]["total_amount"], 30000.0)
        self.assertEqual(report["costs"]["total_amount"], 50000.0)
        self.assertEqual(report["profit"], -20000.0)
        self.assertEqual(report["profit_by_product"][0]["cost"], 50000.0)

        stock = self.client.get("/api/stock", headers=self._auth_headers()).get_json()
        self.assertEqual(stock[0]["remaining_stock"], 70)

    def test_monthly_report_accepts_persian_digits(self):
        self._seed_month()
        response = self.client.get(
            "/api/reports/monthly", query_string={"year": "۱۴۰۴", "month": "۱۰"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["month"], "10")

    def test_daily_report_includes_monthly_cost(self):
        self._seed_month()
        response = self.client.get(
            "/api/reports/daily?date=1404/10/06", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 200)
        report = response.get_json()
        self.assertEqual(report["sales"]["total_amount"], 30000.0)
        self.assertEqual(report["costs"]["total_amount"], 50000.0)
        self.assertEqual(report["production"]["total_quantity"], 0)

    def test_custom_report_rejects_bad_range(self):
        response = self.client.get(
            "/api/reports/custom?start=1404/10/10&end=1404/10/01", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.get(
            "/api/reports/custom?start=yesterday&end=1404/10/01", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.get("/api/reports/weekly", headers=self._auth_headers())
        self.assertEqual(response.status_code, 404)

    def test_monthly_report_export_returns_workbook(self):
        self._seed_month()
        response = self.client.get(
            "/api/reports/monthly/export?year=1404&month=10", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.mimetype,
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        self.assertIn("monthly-report-1404-10.xlsx", response.headers["Content-Disposition"])
        response.close()

    def test_cost_validation_and_period_filter(self):
        response = self.client.post(
            "/api/costs",
            json={"type": "fuel", "amount": -1, "period_type": "monthly", "period_value": "1404/10"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 422)
        errors = response.get_json()["errors"]
        self.assertIn("type", errors)
        self.assertIn("amount", errors)

        response = self.client.post(
            "/api/costs",
            json={"type": "water", "amount": 10, "period_type": "daily", "period_value": "1404/10"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 422)
        self.assertIn("period_value", response.get_json()["errors"])

        cost = self._post(
            "/api/costs",
            {"type": "water", "amount": "۲۵۰", "period_type": "daily", "period_value": "۱۴۰۴/۱۰/۲"},
        )
        self.assertEqual(cost["period_value"], "1404/10/02")
        self.assertEqual(cost["date"], "1404/10/02")
        self.assertEqual(cost["amount"], 250.0)

        filtered = self.client.get(
            "/api/costs?start=1404/10/01&end=1404/10/30", headers=self._auth_headers()
        ).get_json()
        self.assertEqual(filtered["total_amount"], 250.0)

        outside = self.client.get(
            "/api/costs?start=1404/11/01&end=1404/11/30", headers=self._auth_headers()
        ).get_json()
        self.assertEqual(outside["costs"], [])

    def test_production_rejects_bad_date_and_quantity(self):
        response = self.client.post(
            "/api/production",
            json={"product_id": self.product_id, "quantity": 0, "date": "1404-10"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 422)
        errors = response.get_json()["errors"]
        self.assertIn("quantity", errors)
        self.assertIn("date", errors)

    def test_staff_cannot_create_products(self):
        response = self.client.post(
            "/api/products",
            json={"name": "Curb", "unit_price": 10},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 403)


if __name__ == "__main__":
    unittest.main()
