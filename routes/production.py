"""Daily production entries for each product."""

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from accounting.periods import date_in_range
from extensions import db
from models import Product, Production
from schemas import ProductionCreateSchema, ProductionSchema, canonical_date

bp = Blueprint("production", __name__, url_prefix="/api/production")

entry_schema = ProductionSchema()
entries_schema = ProductionSchema(many=True)
entry_create_schema = ProductionCreateSchema()


@bp.get("")
@jwt_required()
def list_production():
    query = Production.query
    product_id = request.args.get("product_id", type=int)
    if product_id:
        query = query.filter(Production.product_id == product_id)

    entries = query.order_by(Production.date.desc(), Production.id.desc()).all()

    day = canonical_date(request.args.get("date"))
    start = canonical_date(request.args.get("start")) or day
    end = canonical_date(request.args.get("end")) or day
    if bool(start) != bool(end):
        return jsonify({"msg": "Both start and end are required to filter production."}), 400
    if start:
        entries = [entry for entry in entries if date_in_range(entry.date, start, end)]

    return jsonify(entries_schema.dump(entries))


@bp.post("")
@jwt_required()
def create_production():
    try:
        data = entry_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    product = db.session.get(Product, data["product_id"])
    if not product:
        return jsonify({"msg": "Product not found."}), 404

    entry = Production(
        product_id=product.id,
        product_name=product.name,
        quantity=data["quantity"],
        date=data["date"],
        shift=data["shift"],
    )
    db.session.add(entry)
    db.session.commit()
    current_app.logger.info(
        "Recorded production of %s x %s on %s", entry.quantity, product.name, entry.date
    )
    return jsonify(entry_schema.dump(entry)), 201


@bp.delete("/<int:entry_id>")
@jwt_required()
def delete_production(entry_id: int):
    entry = db.session.get(Production, entry_id)
    if not entry:
        return jsonify({"msg": "Production entry not found."}), 404
    db.session.delete(entry)
    db.session.commit()
    return jsonify({"msg": "Production entry deleted."})
