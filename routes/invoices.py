"""Invoices and the draft -> approved -> paid workflow."""

import re
from collections import defaultdict
from decimal import Decimal
from io import BytesIO

from flask import Blueprint, current_app, jsonify, render_template, request, send_file
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from xhtml2pdf import pisa

from accounting.invoices import (
    DEFAULT_TAX_RATE,
    INVOICE_NUMBER_PREFIX,
    InvoiceTransitionError,
    approve_invoice,
    calculate_totals,
    create_invoice_item,
    generate_invoice_number,
    invoice_to_sales,
    mark_invoice_paid,
)
from accounting.records import InvoiceStatus
from accounting.stock import get_product_stock
from extensions import db
from models import Invoice, InvoiceItem, Product, Sale
from routes.stock import load_invoices, load_legacy_sales, load_productions
from schemas import InvoiceCreateSchema, InvoicePaySchema, InvoiceSchema, InvoiceUpdateSchema

bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")

invoice_schema = InvoiceSchema()
invoices_schema = InvoiceSchema(many=True)
invoice_create_schema = InvoiceCreateSchema()
invoice_pay_schema = InvoicePaySchema()
invoice_update_schema = InvoiceUpdateSchema()


def _tax_rate() -> Decimal:
    return Decimal(str(current_app.config.get("INVOICE_TAX_RATE", DEFAULT_TAX_RATE)))


def _format_currency(value) -> str:
    return f"{Decimal(str(value or 0)):,.0f}"


def _get_invoice(invoice_id: int):
    return (
        Invoice.query.options(selectinload(Invoice.items))
        .filter(Invoice.id == invoice_id)
        .first()
    )


def _next_invoice_number() -> str:
    numbers = [
        number
        for (number,) in db.session.query(Invoice.invoice_number)
        .filter(Invoice.invoice_number.like(f"{INVOICE_NUMBER_PREFIX}-%"))
        .all()
    ]
    return generate_invoice_number(numbers)


def _stock_warnings(invoice: Invoice) -> list[str]:
    requested: dict[int, int] = defaultdict(int)
    names: dict[int, str] = {}
    for item in invoice.items:
        requested[item.product_id] += int(item.quantity)
        names[item.product_id] = item.product_name

    if not requested:
        return []

    productions = load_productions()
    invoices = load_invoices()
    legacy_sales = load_legacy_sales()

    warnings = []
    for product_id, quantity in requested.items():
        available = get_product_stock(str(product_id), productions, invoices, legacy_sales)
        if available < quantity:
            warnings.append(
                f"Insufficient stock for {names[product_id]}: {available} available, {quantity} requested."
            )
    return warnings


def _item_records(lines):
    """Snapshot invoice lines from current product data, plus any unknown product ids."""

    product_ids = {line["product_id"] for line in lines}
    products = {p.id: p for p in Product.query.filter(Product.id.in_(product_ids)).all()}
    missing = sorted(product_ids - products.keys())
    if missing:
        return [], missing
    records = [
        create_invoice_item(products[line["product_id"]].to_record(), line["quantity"])
        for line in lines
    ]
    return records, []


def _item_rows(records) -> list[InvoiceItem]:
    return [
        InvoiceItem(
            product_id=int(record.product_id),
            product_name=record.product_name,
            dimensions=record.dimensions,
            quantity=record.quantity,
            unit_price=record.unit_price,
            total=record.total,
        )
        for record in records
    ]


def _apply_totals(invoice: Invoice, records, discount) -> None:
    totals = calculate_totals(records, _tax_rate(), discount or 0)
    invoice.subtotal = totals["subtotal"]
    invoice.discount = totals["discount"]
    invoice.tax = totals["tax"]
    invoice.total = totals["total"]


@bp.get("")
@jwt_required()
def list_invoices():
    query = Invoice.query.options(selectinload(Invoice.items))
    status = (request.args.get("status") or "").strip().lower()
    if status:
        try:
            query = query.filter(Invoice.status == InvoiceStatus(status))
        except ValueError:
            return jsonify({"msg": "Invalid invoice status."}), 400
    invoices = query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
    return jsonify(invoices_schema.dump(invoices))


@bp.post("")
@jwt_required()
def create_invoice():
    try:
        data = invoice_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    item_records, missing = _item_records(data["items"])
    if missing:
        return jsonify({"msg": f"Products not found: {', '.join(map(str, missing))}"}), 404

    invoice = Invoice(
        invoice_number=_next_invoice_number(),
        status=InvoiceStatus.draft,
        customer_name=data["customer_name"],
        customer_address=data.get("customer_address"),
        customer_phone=data.get("customer_phone"),
        customer_tax_id=data.get("customer_tax_id"),
        date=data["date"],
        due_date=data.get("due_date"),
        notes=data.get("notes"),
    )
    _apply_totals(invoice, item_records, data.get("discount"))
    invoice.items.extend(_item_rows(item_records))

    db.session.add(invoice)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"msg": "Invoice number already exists, please retry."}), 409

    current_app.logger.info("Created invoice %s for %s", invoice.invoice_number, invoice.customer_name)
    return jsonify(invoice_schema.dump(invoice)), 201


@bp.get("/<int:invoice_id>")
@jwt_required()
def get_invoice(invoice_id: int):
    invoice = _get_invoice(invoice_id)
    if not invoice:
        return jsonify({"msg": "Invoice not found."}), 404
    return jsonify(invoice_schema.dump(invoice))


@bp.patch("/<int:invoice_id>")
@jwt_required()
def update_invoice(invoice_id: int):
    invoice = _get_invoice(invoice_id)
    if not invoice:
        return jsonify({"msg": "Invoice not found."}), 404
    if invoice.status != InvoiceStatus.draft:
        return jsonify({"msg": "Only draft invoices can be edited."}), 409

    try:
        data = invoice_update_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    lines = data.pop("items", None)
    if lines is not None:
        item_records, missing = _item_records(lines)
        if missing:
            return jsonify({"msg": f"Products not found: {', '.join(map(str, missing))}"}), 404
        invoice.items.clear()
        invoice.items.extend(_item_rows(item_records))
    else:
        item_records = [item.to_record() for item in invoice.items]

    discount = data.pop("discount", invoice.discount)
    for key, value in data.items():
        setattr(invoice, key, value)
    _apply_totals(invoice, item_records, discount)

    db.session.commit()
    current_app.logger.info("Updated draft invoice %s", invoice.invoice_number)
    return jsonify(invoice_schema.dump(invoice))


@bp.delete("/<int:invoice_id>")
@jwt_required()
def delete_invoice(invoice_id: int):
    invoice = _get_invoice(invoice_id)
    if not invoice:
        return jsonify({"msg": "Invoice not found."}), 404
    if invoice.status == InvoiceStatus.paid:
        return jsonify({"msg": "Paid invoices cannot be deleted."}), 409

    db.session.delete(invoice)
    db.session.commit()
    return jsonify({"msg": "Invoice deleted."})


@bp.post("/<int:invoice_id>/approve")
@jwt_required()
def approve(invoice_id: int):
    invoice = _get_invoice(invoice_id)
    if not invoice:
        return jsonify({"msg": "Invoice not found."}), 404

    try:
        invoice.status = approve_invoice(invoice.status)
    except InvoiceTransitionError as exc:
        return jsonify({"msg": str(exc)}), 409

    warnings = _stock_warnings(invoice)
    for warning in warnings:
        current_app.logger.warning("Invoice %s: %s", invoice.invoice_number, warning)

    db.session.commit()
    return jsonify({"invoice": invoice_schema.dump(invoice), "warnings": warnings})


@bp.post("/<int:invoice_id>/pay")
@jwt_required()
def pay(invoice_id: int):
    invoice = _get_invoice(invoice_id)
    if not invoice:
        return jsonify({"msg": "Invoice not found."}), 404

    try:
        data = invoice_pay_schema.load(request.get_json(silent=True) or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    try:
        invoice.status = mark_invoice_paid(invoice.status)
    except InvoiceTransitionError as exc:
        return jsonify({"msg": str(exc)}), 409
    invoice.paid_date = data.get("paid_date") or invoice.date

    created = 0
    if Sale.query.filter_by(invoice_id=invoice.id).first() is None:
        for sale in invoice_to_sales(invoice.to_record()):
            db.session.add(
                Sale(
                    invoice_id=invoice.id,
                    invoice_item_id=int(sale.invoice_item_id),
                    customer_name=sale.customer_name,
                    product_id=int(sale.product_id),
                    product_name=sale.product_name,
                    quantity=sale.quantity,
                    unit_price=sale.unit_price,
                    total_price=sale.total_price,
                    date=sale.date,
                )
            )
            created += 1
    else:
        current_app.logger.warning(
            "Invoice %s already has sales; skipping sale creation", invoice.invoice_number
        )

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(
            "Duplicate sale rows rejected while paying invoice %s", invoice_id
        )
        return jsonify({"msg": "Sales for this invoice were already recorded."}), 409

    current_app.logger.info(
        "Invoice %s marked paid on %s (%s sales)", invoice.invoice_number, invoice.paid_date, created
    )
    return jsonify({"invoice": invoice_schema.dump(invoice), "sales_created": created})


@bp.get("/<int:invoice_id>/pdf")
@jwt_required()
def invoice_pdf(invoice_id: int):
    invoice = _get_invoice(invoice_id)
    if not invoice:
        return jsonify({"msg": "Invoice not found."}), 404

    html = render_template(
        "invoices/invoice.html",
        invoice=invoice,
        status_label=getattr(invoice.status, "value", invoice.status),
        company={
            "name": current_app.config.get("COMPANY_NAME", "Concrete Workshop"),
            "address": current_app.config.get("COMPANY_ADDRESS"),
            "contact": current_app.config.get("COMPANY_CONTACT"),
        },
        format_currency=_format_currency,
    )

    pdf_buffer = BytesIO()
    pdf_status = pisa.CreatePDF(html, dest=pdf_buffer)

    if pdf_status.err:
        current_app.logger.error("Failed to generate invoice PDF for invoice %s", invoice_id)
        return jsonify({"msg": "Unable to generate the invoice PDF at this time."}), 500

    pdf_buffer.seek(0)
    filename = re.sub(r"[^A-Za-z0-9._-]", "_", f"{invoice.invoice_number}.pdf")
    return send_file(
        pdf_buffer,
        mimetype="application/pdf",
        as_attachment=True,
        download_name=filename,
    )
