from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from accounting.invoices import line_total
from accounting.periods import date_in_range
from accounting.stock import get_product_stock
from extensions import db
from models import Product, Sale
from routes.stock import load_invoices, load_legacy_sales, load_productions
from schemas import SaleCreateSchema, SaleSchema, canonical_date

bp = Blueprint("sales", __name__, url_prefix="/api/sales")

sale_schema = SaleSchema()
sales_schema = SaleSchema(many=True)
sale_create_schema = SaleCreateSchema()


@bp.get("")
@jwt_required()
def list_sales():
    query = Sale.query
    product_id = request.args.get("product_id", type=int)
    if product_id:
        query = query.filter(Sale.product_id == product_id)
    invoice_id = request.args.get("invoice_id", type=int)
    if invoice_id:
        query = query.filter(Sale.invoice_id == invoice_id)

    sales = query.order_by(Sale.date.desc(), Sale.id.desc()).all()

    start = canonical_date(request.args.get("start"))
    end = canonical_date(request.args.get("end"))
    if bool(start) != bool(end):
        return jsonify({"msg": "Both start and end are required to filter sales."}), 400
    if start:
        sales = [sale for sale in sales if date_in_range(sale.date, start, end)]

    return jsonify(sales_schema.dump(sales))


@bp.post("")
@jwt_required()
def create_sale():
    """Record a direct sale that did not go through an invoice."""

    try:
        data = sale_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    product = db.session.get(Product, data["product_id"])
    if not product:
        return jsonify({"msg": "Product not found."}), 404

    unit_price = data.get("unit_price")
    if unit_price is None:
        unit_price = product.unit_price

    available = get_product_stock(
        str(product.id), load_productions(), load_invoices(), load_legacy_sales()
    )
    warnings = []
    if available < data["quantity"]:
        warnings.append(
            f"Insufficient stock for {product.name}: {available} available, "
            f"{data['quantity']} sold."
        )
        current_app.logger.warning("Direct sale: %s", warnings[0])

    sale = Sale(
        customer_name=data["customer_name"],
        product_id=product.id,
        product_name=product.name,
        quantity=data["quantity"],
        unit_price=unit_price,
        total_price=line_total(data["quantity"], unit_price),
        date=data["date"],
    )
    db.session.add(sale)
    db.session.commit()
    return jsonify({"sale": sale_schema.dump(sale), "warnings": warnings}), 201
