from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from accounting.costs import collect_costs_for_period, summarize_costs
from extensions import db
from models import Cost, Product
from schemas import CostCreateSchema, CostSchema, canonical_date

bp = Blueprint("costs", __name__, url_prefix="/api/costs")

cost_schema = CostSchema()
costs_schema = CostSchema(many=True)
cost_create_schema = CostCreateSchema()


@bp.get("")
@jwt_required()
def list_costs():
    costs = Cost.query.order_by(Cost.created_at.desc(), Cost.id.desc()).all()

    start = canonical_date(request.args.get("start"))
    end = canonical_date(request.args.get("end"))
    if not start and not end:
        return jsonify(costs_schema.dump(costs))
    if not start or not end:
        return jsonify({"msg": "Both start and end are required to filter costs."}), 400

    matched_ids = {
        record.id
        for record in collect_costs_for_period([c.to_record() for c in costs], start, end)
    }
    matched = [cost for cost in costs if str(cost.id) in matched_ids]
    summary = summarize_costs(cost.to_record() for cost in matched)
    return jsonify(
        {
            "costs": costs_schema.dump(matched),
            "total_amount": float(summary.total_amount),
            "by_type": [entry.to_dict() for entry in summary.by_type],
        }
    )


@bp.post("")
@jwt_required()
def create_cost():
    try:
        data = cost_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    legacy_product_id = data.get("product_id")
    if legacy_product_id and not db.session.get(Product, legacy_product_id):
        return jsonify({"msg": "Product not found."}), 404

    cost = Cost(
        type=data["type"],
        type_label=data.get("type_label") or "",
        amount=data["amount"],
        period_type=data["period_type"],
        period_value=data["period_value"],
        description=data.get("description") or "",
        legacy_date=data.get("date"),
        legacy_product_id=legacy_product_id,
        legacy_production_date=data.get("production_date"),
    )
    db.session.add(cost)
    db.session.commit()

    if data["period_type"] == "yearly":
        current_app.logger.warning(
            "Cost %s uses the yearly period and will not appear in reports", cost.id
        )
    return jsonify(cost_schema.dump(cost)), 201


@bp.delete("/<int:cost_id>")
@jwt_required()
def delete_cost(cost_id: int):
    cost = db.session.get(Cost, cost_id)
    if not cost:
        return jsonify({"msg": "Cost not found."}), 404
    db.session.delete(cost)
    db.session.commit()
    return jsonify({"msg": "Cost deleted."})
