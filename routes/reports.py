"""Daily, monthly and custom-range profit and loss reports."""

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_jwt_extended import jwt_required

from accounting.digits import normalize_digits
from accounting.export import XLSX_MIMETYPE, report_filename, report_to_xlsx_bytes
from accounting.periods import parse_date
from accounting.reports import (
    generate_custom_report,
    generate_daily_report,
    generate_monthly_report,
)
from accounting.stock import effective_sales
from models import Cost
from routes.stock import load_invoices, load_legacy_sales, load_productions, load_products

bp = Blueprint("reports", __name__, url_prefix="/api/reports")


class ReportParamError(ValueError):
    pass


def _load_costs():
    return [cost.to_record() for cost in Cost.query.all()]


def _load_sales():
    return effective_sales(load_invoices(), load_legacy_sales())


def _require_date(name: str) -> str:
    value = request.args.get(name)
    parsed = parse_date(value)
    if parsed is None:
        raise ReportParamError(f"'{name}' must be a date in YYYY/MM/DD format.")
    return str(parsed)


def _require_int(name: str, low: int, high: int) -> int:
    text = normalize_digits(request.args.get(name) or "").strip()
    if not text.isdigit() or not low <= int(text) <= high:
        raise ReportParamError(f"'{name}' must be a number between {low} and {high}.")
    return int(text)


def _build_daily():
    day = _require_date("date")
    return generate_daily_report(day, load_productions(), _load_sales(), _load_costs())


def _build_monthly():
    year = _require_int("year", 1, 9999)
    month = _require_int("month", 1, 12)
    return generate_monthly_report(
        year, month, load_products(), load_productions(), _load_sales(), _load_costs()
    )


def _build_custom():
    start = _require_date("start")
    end = _require_date("end")
    if parse_date(start) > parse_date(end):
        raise ReportParamError("'start' must not be after 'end'.")
    return generate_custom_report(
        start, end, load_products(), load_productions(), _load_sales(), _load_costs()
    )


_BUILDERS = {
    "daily": _build_daily,
    "monthly": _build_monthly,
    "custom": _build_custom,
}


@bp.get("/<kind>")
@jwt_required()
def get_report(kind: str):
    builder = _BUILDERS.get(kind)
    if builder is None:
        return jsonify({"msg": "Unknown report type."}), 404
    try:
        report = builder()
    except ReportParamError as exc:
        return jsonify({"msg": str(exc)}), 400
    return jsonify(report.to_dict())


@bp.get("/<kind>/export")
@jwt_required()
def export_report(kind: str):
    builder = _BUILDERS.get(kind)
    if builder is None:
        return jsonify({"msg": "Unknown report type."}), 404
    try:
        report = builder()
    except ReportParamError as exc:
        return jsonify({"msg": str(exc)}), 400

    try:
        output = report_to_xlsx_bytes(report)
    except (OSError, ValueError):
        current_app.logger.exception("Failed to export %s report %s", kind, report.title)
        return jsonify({"msg": "Unable to export the report right now."}), 500

    return send_file(
        output,
        as_attachment=True,
        download_name=report_filename(report),
        mimetype=XLSX_MIMETYPE,
    )
