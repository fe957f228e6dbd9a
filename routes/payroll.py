"""Employees and their partial salary payments."""

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from accounting.payroll import salary_summaries_for_month, total_salary_costs_for_period
from accounting.periods import parse_month
from extensions import db
from models import Employee, SalaryPayment
from schemas import (
    EmployeeCreateSchema,
    EmployeeSchema,
    EmployeeUpdateSchema,
    SalaryPaymentCreateSchema,
    SalaryPaymentSchema,
    SalaryPaymentUpdateSchema,
    canonical_date,
    canonical_month,
)

bp = Blueprint("payroll", __name__, url_prefix="/api")

employee_schema = EmployeeSchema()
employees_schema = EmployeeSchema(many=True)
employee_create_schema = EmployeeCreateSchema()
employee_update_schema = EmployeeUpdateSchema()
payment_schema = SalaryPaymentSchema()
payments_schema = SalaryPaymentSchema(many=True)
payment_create_schema = SalaryPaymentCreateSchema()
payment_update_schema = SalaryPaymentUpdateSchema()


@bp.get("/employees")
@jwt_required()
def list_employees():
    query = Employee.query
    if request.args.get("active") == "true":
        query = query.filter(Employee.is_active.is_(True))
    return jsonify(employees_schema.dump(query.order_by(Employee.name.asc()).all()))


@bp.post("/employees")
@jwt_required()
def create_employee():
    try:
        data = employee_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    employee = Employee(**data)
    db.session.add(employee)
    db.session.commit()
    return jsonify(employee_schema.dump(employee)), 201


@bp.get("/employees/<int:employee_id>")
@jwt_required()
def get_employee(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if not employee:
        return jsonify({"msg": "Employee not found."}), 404
    return jsonify(employee_schema.dump(employee))


@bp.patch("/employees/<int:employee_id>")
@jwt_required()
def update_employee(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if not employee:
        return jsonify({"msg": "Employee not found."}), 404

    try:
        data = employee_update_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    for key, value in data.items():
        setattr(employee, key, value)
    db.session.commit()
    return jsonify(employee_schema.dump(employee))


@bp.delete("/employees/<int:employee_id>")
@jwt_required()
def delete_employee(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if not employee:
        return jsonify({"msg": "Employee not found."}), 404

    removed = SalaryPayment.query.filter_by(employee_id=employee.id).delete(
        synchronize_session=False
    )
    db.session.delete(employee)
    db.session.commit()
    current_app.logger.info(
        "Deleted employee %s with %s salary payments", employee.name, removed
    )
    return jsonify({"msg": "Employee deleted."})


@bp.get("/salary-payments")
@jwt_required()
def list_salary_payments():
    query = SalaryPayment.query
    employee_id = request.args.get("employee_id", type=int)
    if employee_id:
        query = query.filter(SalaryPayment.employee_id == employee_id)
    month = canonical_month(request.args.get("month"))
    if month:
        query = query.filter(SalaryPayment.month == month)
    payments = query.order_by(SalaryPayment.payment_date.desc(), SalaryPayment.id.desc()).all()
    return jsonify(payments_schema.dump(payments))


@bp.post("/salary-payments")
@jwt_required()
def create_salary_payment():
    try:
        data = payment_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    employee = db.session.get(Employee, data["employee_id"])
    if not employee:
        return jsonify({"msg": "Employee not found."}), 404

    payment = SalaryPayment(employee_name=employee.name, **data)
    db.session.add(payment)
    db.session.commit()
    current_app.logger.info(
        "Recorded salary payment of %s to %s for %s", payment.amount, employee.name, payment.month
    )
    return jsonify(payment_schema.dump(payment)), 201


@bp.get("/salary-payments/summary")
@jwt_required()
def salary_summary():
    month = canonical_month(request.args.get("month"))
    if not month or parse_month(month) is None:
        return jsonify({"msg": "'month' must use the YYYY/MM format."}), 400

    employees = [employee.to_record() for employee in Employee.query.all()]
    payments = [payment.to_record() for payment in SalaryPayment.query.all()]
    summaries = salary_summaries_for_month(employees, month, payments)
    return jsonify(
        {
            "month": month,
            "summaries": [summary.to_dict() for summary in summaries],
            "total_paid": float(sum(s.total_paid for s in summaries)),
            "total_remaining": float(sum(s.remaining for s in summaries)),
        }
    )


@bp.get("/salary-payments/total")
@jwt_required()
def salary_total():
    start = canonical_date(request.args.get("start"))
    end = canonical_date(request.args.get("end"))
    if not start or not end:
        return jsonify({"msg": "Both start and end are required."}), 400

    payments = [payment.to_record() for payment in SalaryPayment.query.all()]
    total = total_salary_costs_for_period(start, end, payments)
    return jsonify({"start": start, "end": end, "total": float(total)})


@bp.get("/salary-payments/<int:payment_id>")
@jwt_required()
def get_salary_payment(payment_id: int):
    payment = db.session.get(SalaryPayment, payment_id)
    if not payment:
        return jsonify({"msg": "Salary payment not found."}), 404
    return jsonify(payment_schema.dump(payment))


@bp.patch("/salary-payments/<int:payment_id>")
@jwt_required()
def update_salary_payment(payment_id: int):
    payment = db.session.get(SalaryPayment, payment_id)
    if not payment:
        return jsonify({"msg": "Salary payment not found."}), 404

    try:
        data = payment_update_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    employee_id = data.get("employee_id")
    if employee_id is not None and employee_id != payment.employee_id:
        employee = db.session.get(Employee, employee_id)
        if not employee:
            return jsonify({"msg": "Employee not found."}), 404
        payment.employee_name = employee.name

    for key, value in data.items():
        setattr(payment, key, value)
    db.session.commit()
    return jsonify(payment_schema.dump(payment))


@bp.delete("/salary-payments/<int:payment_id>")
@jwt_required()
def delete_salary_payment(payment_id: int):
    payment = db.session.get(SalaryPayment, payment_id)
    if not payment:
        return jsonify({"msg": "Salary payment not found."}), 404
    db.session.delete(payment)
    db.session.commit()
    return jsonify({"msg": "Salary payment deleted."})
