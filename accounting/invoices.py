"""Invoice totals, numbering and the draft -> approved -> paid workflow."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from .records import InvoiceItemRecord, InvoiceRecord, InvoiceStatus, ProductRecord, SaleRecord

DEFAULT_TAX_RATE = Decimal("0.09")
INVOICE_NUMBER_PREFIX = "INV"

_CURRENCY_QUANT = Decimal("0.01")

# Each status may only move to the next one.
_NEXT_STATUS = {
    InvoiceStatus.draft: InvoiceStatus.approved,
    InvoiceStatus.approved: InvoiceStatus.paid,
}


class InvoiceTransitionError(ValueError):
    """Raised when an invoice is moved backwards, sideways or twice."""


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(_CURRENCY_QUANT, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price) -> Decimal:
    return _quantize(Decimal(str(unit_price)) * Decimal(int(quantity)))


def create_invoice_item(product: ProductRecord, quantity: int) -> InvoiceItemRecord:
    return InvoiceItemRecord(
        product_id=product.id,
        product_name=product.name,
        dimensions=product.dimensions,
        quantity=int(quantity),
        unit_price=Decimal(str(product.unit_price)),
        total=line_total(quantity, product.unit_price),
    )


def calculate_totals(
    items: Iterable[InvoiceItemRecord],
    tax_rate=DEFAULT_TAX_RATE,
    discount=Decimal("0"),
) -> dict[str, Decimal]:
    """Return ``subtotal``, ``discount``, ``tax`` and ``total`` for ``items``.

    Tax is charged on the discounted subtotal.
    """

    subtotal = sum((line_total(item.quantity, item.unit_price) for item in items), Decimal("0"))
    discount = Decimal(str(discount or 0))
    taxable = max(Decimal("0"), subtotal - discount)
    tax = _quantize(taxable * Decimal(str(tax_rate)))
    return {
        "subtotal": _quantize(subtotal),
        "discount": _quantize(discount),
        "tax": tax,
        "total": _quantize(taxable + tax),
    }


def generate_invoice_number(existing_numbers: Iterable[str], today: date | None = None) -> str:
    """Next ``INV-YYYYMM-NNNN`` number for the current month."""

    today = today or date.today()
    prefix = f"{INVOICE_NUMBER_PREFIX}-{today.year}{today.month:02d}-"
    highest = 0
    for number in existing_numbers:
        if not number or not number.startswith(prefix):
            continue
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"


def _coerce_status(status) -> InvoiceStatus:
    try:
        return InvoiceStatus(getattr(status, "value", status))
    except ValueError as exc:
        raise InvoiceTransitionError(f"Unknown invoice status: {status!r}") from exc


def validate_transition(current, target) -> InvoiceStatus:
    """Return the target status if ``current -> target`` is allowed."""

    current_status = _coerce_status(current)
    target_status = _coerce_status(target)
    if _NEXT_STATUS.get(current_status) != target_status:
        if current_status == InvoiceStatus.paid:
            raise InvoiceTransitionError("Invoice is already paid.")
        raise InvoiceTransitionError(
            f"Cannot move invoice from {current_status.value} to {target_status.value}."
        )
    return target_status


def approve_invoice(status) -> InvoiceStatus:
    try:
        return validate_transition(status, InvoiceStatus.approved)
    except InvoiceTransitionError as exc:
        raise InvoiceTransitionError("Only draft invoices can be approved.") from exc


def mark_invoice_paid(status) -> InvoiceStatus:
    current = _coerce_status(status)
    if current == InvoiceStatus.paid:
        raise InvoiceTransitionError("Invoice is already paid.")
    try:
        return validate_transition(current, InvoiceStatus.paid)
    except InvoiceTransitionError as exc:
        raise InvoiceTransitionError("Only approved invoices can be marked as paid.") from exc


def invoice_to_sales(invoice: InvoiceRecord) -> list[SaleRecord]:
    """Sale rows for each line of a paid invoice, dated on the paid date."""

    sale_date = invoice.paid_date or invoice.date
    return [
        SaleRecord(
            invoice_id=invoice.id,
            invoice_item_id=item.id,
            customer_name=invoice.customer_name,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=int(item.quantity),
            unit_price=item.unit_price,
            total_price=item.total,
            date=sale_date,
        )
        for item in invoice.items
    ]
