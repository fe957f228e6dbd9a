"""Stock levels, derived on every request from production and paid invoices."""

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required
from sqlalchemy.orm import selectinload

from accounting.stock import calculate_all_stocks, calculate_stock
from extensions import db
from models import Invoice, Product, Production, Sale

bp = Blueprint("stock", __name__, url_prefix="/api/stock")


def load_productions():
    return [entry.to_record() for entry in Production.query.all()]


def load_invoices():
    invoices = Invoice.query.options(selectinload(Invoice.items)).all()
    return [invoice.to_record() for invoice in invoices]


def load_legacy_sales():
    """Direct sales recorded without an invoice."""

    return [sale.to_record() for sale in Sale.query.filter(Sale.invoice_id.is_(None)).all()]


def load_products():
    return [product.to_record() for product in Product.query.order_by(Product.name.asc()).all()]


@bp.get("")
@jwt_required()
def list_stock():
    stocks = calculate_all_stocks(
        load_products(), load_productions(), load_invoices(), load_legacy_sales()
    )
    return jsonify([stock.to_dict() for stock in stocks])


@bp.get("/<int:product_id>")
@jwt_required()
def get_stock(product_id: int):
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"msg": "Product not found."}), 404

    stock = calculate_stock(
        str(product.id),
        load_productions(),
        load_invoices(),
        load_legacy_sales(),
        product_name=product.name,
    )
    return jsonify(stock.to_dict())
