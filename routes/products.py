from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from extensions import db
from models import InvoiceItem, Product, Production, RoleEnum
from routes.auth import require_role
from schemas import ProductCreateSchema, ProductSchema, ProductUpdateSchema

bp = Blueprint("products", __name__, url_prefix="/api/products")

product_schema = ProductSchema()
products_schema = ProductSchema(many=True)
product_create_schema = ProductCreateSchema()
product_update_schema = ProductUpdateSchema()


@bp.get("")
@jwt_required()
def list_products():
    query = Product.query
    search = (request.args.get("q") or "").strip()
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))
    return jsonify(products_schema.dump(query.order_by(Product.name.asc()).all()))


@bp.post("")
@jwt_required()
def create_product():
    if not require_role(RoleEnum.admin):
        return jsonify({"msg": "Only admins can manage products."}), 403

    try:
        data = product_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    product = Product(**data)
    db.session.add(product)
    db.session.commit()
    current_app.logger.info("Created product %s (%s)", product.id, product.name)
    return jsonify(product_schema.dump(product)), 201


@bp.get("/<int:product_id>")
@jwt_required()
def get_product(product_id: int):
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"msg": "Product not found."}), 404
    return jsonify(product_schema.dump(product))


@bp.put("/<int:product_id>")
@jwt_required()
def update_product(product_id: int):
    if not require_role(RoleEnum.admin):
        return jsonify({"msg": "Only admins can manage products."}), 403

    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"msg": "Product not found."}), 404

    try:
        data = product_update_schema.load(request.get_json() or {}, partial=True)
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    for key, value in data.items():
        setattr(product, key, value)
    db.session.commit()
    return jsonify(product_schema.dump(product))


@bp.delete("/<int:product_id>")
@jwt_required()
def delete_product(product_id: int):
    if not require_role(RoleEnum.admin):
        return jsonify({"msg": "Only admins can manage products."}), 403

    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"msg": "Product not found."}), 404

    in_use = (
        Production.query.filter_by(product_id=product_id).first() is not None
        or InvoiceItem.query.filter_by(product_id=product_id).first() is not None
    )
    if in_use:
        return jsonify({"msg": "Product has production or invoice history and cannot be deleted."}), 409

    db.session.delete(product)
    db.session.commit()
    return jsonify({"msg": "Product deleted."})
