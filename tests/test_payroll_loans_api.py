import importlib
import os
import sys
import unittest


class PayrollAndLoansApiTestCase(unittest.TestCase):
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

        self.user = User(name="Owner", email="owner@example.com", role=RoleEnum.admin)
        self.user.set_password("Password!1")
        self.app_module.db.session.add(self.user)
        self.app_module.db.session.commit()

        response = self.client.post(
            "/api/auth/login",
            json={"email": "owner@example.com", "password": "Password!1"},
        )
        self.assertEqual(response.status_code, 200)
        self.token = response.get_json()["access_token"]

    def tearDown(self):
        self.app_module.db.session.remove()
        self.app_module.db.drop_all()
        self.ctx.pop()
        os.environ.pop("DATABASE_URL", None)
        if "app" in sys.modules:
            del sys.modules["app"]

    def _auth_headers(self):
        return {"Authorization": f"Bearer {self.token}"}

    def _post(self, url, payload, expected=201):
        response = self.client.post(url, json=payload, headers=self._auth_headers())
        self.assertEqual(response.status_code, expected, response.get_json())
        return response.get_json()

    def test_salary_summary_for_month(self):
        employee = self._post("/api/employees", {"name": "Ali"})
        self._post(
            "/api/salary-payments",
            {
                "employee_id": employee["id"],
                "month": "۱۴۰۴/۱۰",
                "payment_date": "1404/10/10",
                "daily_salary": 500000,
                "days_worked": 10,
                "amount": 3000000,
            },
        )
        self._post(
            "/api/salary-payments",
            {
                "employee_id": employee["id"],
                "month": "1404/10",
                "payment_date": "1404/10/20",
                "daily_salary": 500000,
                "days_worked": 4,
                "amount": 2000000,
                "payment_method": "transfer",
            },
        )

        response = self.client.get(
            "/api/salary-payments/summary?month=1404/10", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 200)
        payload = response.get_json()
        self.assertEqual(len(payload["summaries"]), 1)
        summary = payload["summaries"][0]
        self.assertEqual(summary["employee_name"], "Ali")
        self.assertEqual(summary["total_days_worked"], 14)
        self.assertEqual(summary["expected_salary"], 7000000.0)
        self.assertEqual(summary["total_paid"], 5000000.0)
        self.assertEqual(summary["remaining"], 2000000.0)

        total = self.client.get(
            "/api/salary-payments/total?start=1404/10/01&end=1404/10/30",
            headers=self._auth_headers(),
        ).get_json()
        self.assertEqual(total["total"], 5000000.0)

    def test_salary_payment_validation(self):
        response = self.client.post(
            "/api/salary-payments",
            json={"employee_id": 99, "month": "1404/10/01", "payment_date": "1404/10/01",
                  "daily_salary": 1, "days_worked": 1, "amount": 1},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 422)
        self.assertIn("month", response.get_json()["errors"])

        response = self.client.post(
            "/api/salary-payments",
            json={"employee_id": 99, "month": "1404/10", "payment_date": "1404/10/01",
                  "daily_salary": 1, "days_worked": 1, "amount": 1},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 404)

        response = self.client.get("/api/salary-payments/summary", headers=self._auth_headers())
        self.assertEqual(response.status_code, 400)

    def test_loan_balances_are_signed(self):
        person = self._post("/api/people", {"name": "Hasan"})
        self._post(
            "/api/loans",
            {"person_id": person["id"], "transaction_type": "lend", "amount": 5000,
             "transaction_date": "1404/08/01"},
        )
        borrowed = self._post(
            "/api/loans",
            {"person_id": person["id"], "transaction_type": "borrow", "amount": "۲۰۰۰",
             "transaction_date": "1404/09/01"},
        )
        self.assertEqual(borrowed["amount"], -2000.0)

        summary = self.client.get("/api/loans/summary", headers=self._auth_headers()).get_json()
        self.assertEqual(summary["total_balance"], 3000.0)
        self.assertEqual(summary["total_lent"], 5000.0)
        self.assertEqual(summary["total_borrowed"], 2000.0)
        self.assertEqual(summary["summaries"][0]["person_name"], "Hasan")

        detail = self.client.get(
            f"/api/people/{person['id']}/loans", headers=self._auth_headers()
        ).get_json()
        self.assertEqual(detail["total_balance"], 3000.0)
        self.assertEqual(detail["transactions"][0]["transaction_date"], "1404/09/01")

    def test_employee_and_salary_payment_item_endpoints(self):
        employee = self._post("/api/employees", {"name": "Reza"})
        other = self._post("/api/employees", {"name": "Sara"})
        payment = self._post(
            "/api/salary-payments",
            {
                "employee_id": employee["id"],
                "month": "1404/10",
                "payment_date": "1404/10/10",
                "daily_salary": 1000,
                "days_worked": 5,
                "amount": 3000,
            },
        )

        response = self.client.get(f"/api/employees/{employee['id']}", headers=self._auth_headers())
        self.assertEqual(response.get_json()["name"], "Reza")

        response = self.client.patch(
            f"/api/employees/{employee['id']}",
            json={"phone": "۰۹۱۲۰۰۰۰۰۰۰", "is_active": False},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["phone"], "09120000000")
        self.assertFalse(response.get_json()["is_active"])

        response = self.client.patch(
            f"/api/salary-payments/{payment['id']}",
            json={"employee_id": other["id"], "amount": 5000},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 200)
        updated = response.get_json()
        self.assertEqual(updated["employee_name"], "Sara")
        self.assertEqual(updated["amount"], 5000.0)
        self.assertEqual(updated["month"], "1404/10")

        response = self.client.patch(
            f"/api/salary-payments/{payment['id']}",
            json={"month": "1404"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 422)

        response = self.client.delete(
            f"/api/salary-payments/{payment['id']}", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 200)
        response = self.client.get(
            f"/api/salary-payments/{payment['id']}", headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 404)

    def test_deleting_employee_removes_their_payments(self):
        employee = self._post("/api/employees", {"name": "Reza"})
        self._post(
            "/api/salary-payments",
            {
                "employee_id": employee["id"],
                "month": "1404/10",
                "payment_date": "1404/10/10",
                "daily_salary": 1000,
                "days_worked": 5,
                "amount": 3000,
            },
        )

        response = self.client.delete(f"/api/employees/{employee['id']}", headers=self._auth_headers())
        self.assertEqual(response.status_code, 200)
        payments = self.client.get("/api/salary-payments", headers=self._auth_headers()).get_json()
        self.assertEqual(payments, [])
        response = self.client.get(f"/api/employees/{employee['id']}", headers=self._auth_headers())
        self.assertEqual(response.status_code, 404)

    def test_loan_update_keeps_sign_in_step_with_type(self):
        person = self._post("/api/people", {"name": "Hasan"})
        loan = self._post(
            "/api/loans",
            {"person_id": person["id"], "transaction_type": "lend", "amount": 5000,
             "transaction_date": "1404/08/01"},
        )

        response = self.client.patch(
            f"/api/loans/{loan['id']}",
            json={"transaction_type": "borrow"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["amount"], -5000.0)

        response = self.client.patch(
            f"/api/loans/{loan['id']}",
            json={"amount": 1200, "description": "partial"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.get_json()["amount"], -1200.0)
        self.assertEqual(response.get_json()["description"], "partial")

        summary = self.client.get("/api/loans/summary", headers=self._auth_headers()).get_json()
        self.assertEqual(summary["total_balance"], -1200.0)

        response = self.client.delete(f"/api/loans/{loan['id']}", headers=self._auth_headers())
        self.assertEqual(response.status_code, 200)
        response = self.client.get(f"/api/loans/{loan['id']}", headers=self._auth_headers())
        self.assertEqual(response.status_code, 404)

    def test_person_update_and_delete(self):
        person = self._post("/api/people", {"name": "Hasan"})
        self._post(
            "/api/loans",
            {"person_id": person["id"], "transaction_type": "lend", "amount": 100,
             "transaction_date": "1404/08/01"},
        )

        response = self.client.patch(
            f"/api/people/{person['id']}", json={"name": ""}, headers=self._auth_headers()
        )
        self.assertEqual(response.status_code, 422)

        response = self.client.patch(
            f"/api/people/{person['id']}", json={"address": "Tabriz"}, headers=self._auth_headers()
        )
        self.assertEqual(response.get_json()["address"], "Tabriz")

        response = self.client.delete(f"/api/people/{person['id']}", headers=self._auth_headers())
        self.assertEqual(response.status_code, 200)
        loans = self.client.get("/api/loans", headers=self._auth_headers()).get_json()
        self.assertEqual(loans, [])

    def test_loan_amount_must_be_positive(self):
        person = self._post("/api/people", {"name": "Mina"})
        response = self.client.post(
            "/api/loans",
            json={"person_id": person["id"], "transaction_type": "lend", "amount": 0,
                  "transaction_date": "1404/08/01"},
            headers=self._auth_headers(),
        )
        self.assertEqual(response.status_code, 422)


if __name__ == "__main__":
    unittest.main()
