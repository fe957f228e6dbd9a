from datetime import date
from decimal import Decimal

import pytest

from accounting.invoices import (
    InvoiceTransitionError,
    approve_invoice,
    calculate_totals,
    create_invoice_item,
    generate_invoice_number,
    invoice_to_sales,
    mark_invoice_paid,
    validate_transition,
)
from accounting.records import (
    InvoiceItemRecord,
    InvoiceRecord,
    InvoiceStatus,
    ProductRecord,
    ProductionRecord,
    SaleRecord,
)
from accounting.stock import (
    calculate_all_stocks,
    calculate_stock,
    effective_sales,
    has_sufficient_stock,
    sales_from_invoices,
)

BLOCK = ProductRecord(id="1", name="Block 20", dimensions="20x40", unit_price=Decimal("1000"))


def _invoice(status, quantity=30, paid_date=None, invoice_id="10"):
    item = InvoiceItemRecord(
        id="100",
        product_id=BLOCK.id,
        product_name=BLOCK.name,
        quantity=quantity,
        unit_price=BLOCK.unit_price,
        total=BLOCK.unit_price * quantity,
    )
    return InvoiceRecord(
        id=invoice_id,
        invoice_number="INV-202601-0001",
        status=status,
        customer_name="Karimi",
        items=(item,),
        subtotal=item.total,
        total=item.total,
        date="1404/10/05",
        paid_date=paid_date,
    )


def _production(quantity, date="1404/10/05"):
    return ProductionRecord(
        id=f"prod-{quantity}", product_id=BLOCK.id, product_name=BLOCK.name, quantity=quantity, date=date
    )


def test_create_invoice_item_snapshots_product():
    item = create_invoice_item(BLOCK, 3)
    assert item.product_name == "Block 20"
    assert item.dimensions == "20x40"
    assert item.total == Decimal("3000.00")


def test_calculate_totals_applies_discount_before_tax():
    items = [create_invoice_item(BLOCK, 10)]
    totals = calculate_totals(items, Decimal("0.09"), Decimal("1000"))
    assert totals["subtotal"] == Decimal("10000.00")
    assert totals["tax"] == Decimal("810.00")
    assert totals["total"] == Decimal("9810.00")
    assert totals["total"] == totals["subtotal"] - totals["discount"] + totals["tax"]


def test_generate_invoice_number_continues_monthly_sequence():
    today = date(2026, 1, 15)
    existing = ["INV-202601-0001", "INV-202601-0007", "INV-202512-0042", None]
    assert generate_invoice_number(existing, today=today) == "INV-202601-0008"
    assert generate_invoice_number([], today=today) == "INV-202601-0001"


def test_invoice_moves_forward_only():
    assert approve_invoice(InvoiceStatus.draft) == InvoiceStatus.approved
    assert mark_invoice_paid("approved") == InvoiceStatus.paid

    with pytest.raises(InvoiceTransitionError):
        approve_invoice("approved")
    with pytest.raises(InvoiceTransitionError, match="Only approved invoices"):
        mark_invoice_paid("draft")
    with pytest.raises(InvoiceTransitionError, match="already paid"):
        mark_invoice_paid("paid")
    with pytest.raises(InvoiceTransitionError):
        validate_transition("paid", "draft")
    with pytest.raises(InvoiceTransitionError):
        validate_transition("unknown", "paid")


def test_invoice_to_sales_uses_paid_date():
    sales = invoice_to_sales(_invoice("paid", paid_date="1404/10/06"))
    assert len(sales) == 1
    sale = sales[0]
    assert sale.date == "1404/10/06"
    assert sale.invoice_id == "10"
    assert sale.invoice_item_id == "100"
    assert sale.total_price == Decimal("30000")


def test_stock_reflects_only_paid_invoices():
    productions = [_production(100)]
    for status in ("draft", "approved"):
        stock = calculate_stock(BLOCK.id, productions, [_invoice(status)])
        assert stock.remaining_stock == 100

    paid = _invoice("paid", paid_date="1404/10/06")
    stock = calculate_stock(BLOCK.id, productions, [paid], product_name=BLOCK.name)
    assert stock.total_production == 100
    assert stock.total_sales == 30
    assert stock.remaining_stock == 70
    assert stock.product_name == "Block 20"


def test_stock_is_never_negative():
    stock = calculate_stock(BLOCK.id, [_production(10)], [_invoice("paid", quantity=25)])
    assert stock.remaining_stock == 0


def test_legacy_sales_count_only_without_invoice_id():
    legacy = SaleRecord(
        product_id=BLOCK.id,
        product_name=BLOCK.name,
        quantity=5,
        unit_price=Decimal("1000"),
        total_price=Decimal("5000"),
        date="1404/10/07",
    )
    duplicate = SaleRecord(
        product_id=BLOCK.id,
        product_name=BLOCK.name,
        quantity=30,
        unit_price=Decimal("1000"),
        total_price=Decimal("30000"),
        date="1404/10/06",
        invoice_id="10",
    )
    paid = _invoice("paid", paid_date="1404/10/06")

    sales = effective_sales([paid], [legacy, duplicate])
    assert sum(sale.quantity for sale in sales) == 35
    assert len(sales_from_invoices([paid, _invoice("draft", invoice_id="11")])) == 1

    stock = calculate_stock(BLOCK.id, [_production(100)], [paid], [legacy, duplicate])
    assert stock.remaining_stock == 65


def test_calculate_all_stocks_and_sufficiency():
    other = ProductRecord(id="2", name="Curb")
    stocks = calculate_all_stocks([BLOCK, other], [_production(40)], [])
    assert [(s.product_id, s.remaining_stock) for s in stocks] == [("1", 40), ("2", 0)]
    assert stocks[1].product_name == "Curb"

    assert has_sufficient_stock(BLOCK.id, 40, [_production(40)], [])
    assert not has_sufficient_stock(BLOCK.id, 41, [_production(40)], [])
