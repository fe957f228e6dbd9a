from decimal import Decimal

from accounting.invoices import approve_invoice, create_invoice_item, mark_invoice_paid
from accounting.records import (
    CostRecord,
    InvoiceRecord,
    InvoiceStatus,
    ProductRecord,
    ProductionRecord,
    SaleRecord,
)
from accounting.reports import (
    generate_custom_report,
    generate_daily_report,
    generate_monthly_report,
)
from accounting.stock import calculate_stock, effective_sales

PRODUCT = ProductRecord(id="p", name="Block", unit_price=Decimal("1000"))


def _sale(quantity, date, product=PRODUCT):
    total = product.unit_price * quantity
    return SaleRecord(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        unit_price=product.unit_price,
        total_price=total,
        date=date,
    )


def _production(quantity, date, product=PRODUCT, entry_id=None):
    return ProductionRecord(
        id=entry_id or f"{product.id}-{date}-{quantity}",
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        date=date,
    )


def _cost(cost_id, period_type, period_value, amount):
    return CostRecord(
        id=cost_id,
        type="electricity",
        amount=Decimal(str(amount)),
        period_type=period_type,
        period_value=period_value,
    )


def test_monthly_report_end_to_end():
    status = approve_invoice(InvoiceStatus.draft)
    status = mark_invoice_paid(status)
    item = create_invoice_item(PRODUCT, 30)
    invoice = InvoiceRecord(
        id="inv-1",
        invoice_number="INV-202601-0001",
        status=status.value,
        customer_name="Customer",
        items=(item,),
        subtotal=item.total,
        total=item.total,
        date="1404/10/05",
        paid_date="1404/10/06",
    )
    productions = [_production(100, "1404/10/05")]
    costs = [_cost("rent", "monthly", "1404/10", 50000)]
    sales = effective_sales([invoice])

    report = generate_monthly_report("1404", "10", [PRODUCT], productions, sales, costs)

    assert report.production.total_quantity == 100
    assert report.sales.total_amount == Decimal("30000")
    assert report.costs.total_amount == Decimal("50000")
    assert report.profit == Decimal("-20000")
    assert report.year == "1404"
    assert report.month == "10"
    assert report.start_date == "1404/10/01"
    assert report.end_date == "1404/10/30"
    assert calculate_stock(PRODUCT.id, productions, [invoice]).remaining_stock == 70

    payload = report.to_dict()
    assert payload["kind"] == "monthly"
    assert payload["profit"] == -20000.0


def test_monthly_report_profit_by_product_uses_allocated_cost():
    curb = ProductRecord(id="c", name="Curb", unit_price=Decimal("500"))
    productions = [_production(30, "1404/10/02"), _production(70, "1404/10/03", product=curb)]
    sales = [_sale(10, "1404/10/04"), _sale(20, "1404/10/05", product=curb)]
    costs = [_cost("m", "monthly", "1404/10", 1000)]

    report = generate_monthly_report(1404, 10, [PRODUCT, curb], productions, sales, costs)
    breakdown = {entry.product_id: entry for entry in report.profit_by_product}

    assert breakdown["p"].revenue == Decimal("10000")
    assert breakdown["p"].cost == Decimal("300")
    assert breakdown["p"].profit == Decimal("9700")
    assert breakdown["c"].cost == Decimal("700")
    assert sum(entry.cost for entry in report.profit_by_product) == report.costs.total_amount
    assert report.profit == report.sales.total_amount - report.costs.total_amount


def test_monthly_report_margin_is_zero_without_revenue():
    report = generate_monthly_report(
        1404, 10, [PRODUCT], [_production(5, "1404/10/01")], [], [_cost("m", "monthly", "1404/10", 90)]
    )
    entry = report.profit_by_product[0]
    assert entry.revenue == Decimal("0")
    assert entry.profit == Decimal("-90")
    assert entry.profit_margin == Decimal("0")


def test_daily_report_picks_up_monthly_and_daily_costs():
    costs = [
        _cost("m", "monthly", "1404/10", 1000),
        _cost("d", "daily", "1404/10/15", 200),
        _cost("x", "daily", "1404/10/16", 999),
    ]
    productions = [_production(8, "1404/10/15"), _production(3, "1404/10/14")]
    sales = [_sale(2, "۱۴۰۴/۱۰/۱۵")]

    report = generate_daily_report("۱۴۰۴/۱۰/۱۵", productions, sales, costs)

    assert report.date == "1404/10/15"
    assert report.production.total_quantity == 8
    assert report.sales.count == 1
    assert report.sales.total_amount == Decimal("2000")
    assert report.costs.total_amount == Decimal("1200")
    assert report.profit == Decimal("800")


def test_custom_report_spans_months_without_double_counting():
    costs = [
        _cost("sep", "monthly", "1404/9", 1000),
        _cost("oct", "monthly", "1404/10", 2000),
        _cost("day", "daily", "1404/10/02", 50),
        _cost("dec", "monthly", "1404/12", 4000),
    ]
    report = generate_custom_report(
        "1404/09/20", "1404/10/10", [PRODUCT], [], [_sale(1, "1404/09/25")], costs
    )

    assert [cost.id for cost in report.costs.costs] == ["sep", "oct", "day"]
    assert report.costs.total_amount == Decimal("3050")
    assert report.profit == Decimal("1000") - Decimal("3050")
    assert report.to_dict()["kind"] == "custom"


def test_monthly_report_keeps_day_31_entries_of_short_months():
    productions = [_production(10, "1404/07/31")]
    sales = [_sale(4, "1404/07/31")]
    costs = [_cost("water", "daily", "1404/07/31", 500)]

    monthly = generate_monthly_report(1404, 7, [PRODUCT], productions, sales, costs)
    custom = generate_custom_report(
        "1404/07/01", "1404/07/31", [PRODUCT], productions, sales, costs
    )

    assert monthly.production.total_quantity == 10
    assert monthly.sales.total_quantity == 4
    assert monthly.costs.total_amount == Decimal("500")
    assert monthly.profit == custom.profit == Decimal("3500")
    assert calculate_stock("p", productions, [], sales).remaining_stock == 6

    following = generate_monthly_report(1404, 8, [PRODUCT], productions, sales, costs)
    assert following.production.total_quantity == 0
    assert following.costs.total_amount == Decimal("0")
