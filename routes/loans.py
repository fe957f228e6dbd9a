"""People the workshop lends to or borrows from, and their balances."""

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from accounting.loans import (
    loan_summaries,
    person_loan_summary,
    signed_amount,
    total_balance,
    total_borrowed,
    total_lent,
)
from extensions import db
from models import Loan, Person
from schemas import (
    LoanCreateSchema,
    LoanSchema,
    LoanUpdateSchema,
    PersonCreateSchema,
    PersonSchema,
    PersonUpdateSchema,
)

bp = Blueprint("loans", __name__, url_prefix="/api")

person_schema = PersonSchema()
people_schema = PersonSchema(many=True)
person_create_schema = PersonCreateSchema()
person_update_schema = PersonUpdateSchema()
loan_schema = LoanSchema()
loans_schema = LoanSchema(many=True)
loan_create_schema = LoanCreateSchema()
loan_update_schema = LoanUpdateSchema()


@bp.get("/people")
@jwt_required()
def list_people():
    query = Person.query
    if request.args.get("active") == "true":
        query = query.filter(Person.is_active.is_(True))
    return jsonify(people_schema.dump(query.order_by(Person.name.asc()).all()))


@bp.post("/people")
@jwt_required()
def create_person():
    try:
        data = person_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    person = Person(**data)
    db.session.add(person)
    db.session.commit()
    return jsonify(person_schema.dump(person)), 201


@bp.get("/people/<int:person_id>")
@jwt_required()
def get_person(person_id: int):
    person = db.session.get(Person, person_id)
    if not person:
        return jsonify({"msg": "Person not found."}), 404
    return jsonify(person_schema.dump(person))


@bp.patch("/people/<int:person_id>")
@jwt_required()
def update_person(person_id: int):
    person = db.session.get(Person, person_id)
    if not person:
        return jsonify({"msg": "Person not found."}), 404

    try:
        data = person_update_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    for key, value in data.items():
        setattr(person, key, value)
    db.session.commit()
    return jsonify(person_schema.dump(person))


@bp.delete("/people/<int:person_id>")
@jwt_required()
def delete_person(person_id: int):
    person = db.session.get(Person, person_id)
    if not person:
        return jsonify({"msg": "Person not found."}), 404

    removed = Loan.query.filter_by(person_id=person.id).delete(synchronize_session=False)
    db.session.delete(person)
    db.session.commit()
    current_app.logger.info("Deleted %s with %s loan transactions", person.name, removed)
    return jsonify({"msg": "Person deleted."})


@bp.get("/people/<int:person_id>/loans")
@jwt_required()
def person_loans(person_id: int):
    person = db.session.get(Person, person_id)
    if not person:
        return jsonify({"msg": "Person not found."}), 404
    loans = [loan.to_record() for loan in Loan.query.filter_by(person_id=person_id).all()]
    return jsonify(person_loan_summary(person.to_record(), loans).to_dict())


@bp.get("/loans")
@jwt_required()
def list_loans():
    query = Loan.query
    person_id = request.args.get("person_id", type=int)
    if person_id:
        query = query.filter(Loan.person_id == person_id)
    loans = query.order_by(Loan.transaction_date.desc(), Loan.id.desc()).all()
    return jsonify(loans_schema.dump(loans))


@bp.post("/loans")
@jwt_required()
def create_loan():
    try:
        data = loan_create_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    person = db.session.get(Person, data["person_id"])
    if not person:
        return jsonify({"msg": "Person not found."}), 404

    loan = Loan(
        person_id=person.id,
        person_name=person.name,
        transaction_type=data["transaction_type"],
        amount=signed_amount(data["transaction_type"], data["amount"]),
        transaction_date=data["transaction_date"],
        description=data.get("description"),
    )
    db.session.add(loan)
    db.session.commit()
    current_app.logger.info(
        "Recorded %s of %s with %s", data["transaction_type"], data["amount"], person.name
    )
    return jsonify(loan_schema.dump(loan)), 201


@bp.get("/loans/summary")
@jwt_required()
def loans_summary():
    people = [person.to_record() for person in Person.query.all()]
    loans = [loan.to_record() for loan in Loan.query.all()]
    summaries = loan_summaries(people, loans)
    return jsonify(
        {
            "summaries": [summary.to_dict() for summary in summaries],
            "total_balance": float(total_balance(loans)),
            "total_lent": float(total_lent(loans)),
            "total_borrowed": float(total_borrowed(loans)),
        }
    )


@bp.get("/loans/<int:loan_id>")
@jwt_required()
def get_loan(loan_id: int):
    loan = db.session.get(Loan, loan_id)
    if not loan:
        return jsonify({"msg": "Loan not found."}), 404
    return jsonify(loan_schema.dump(loan))


@bp.patch("/loans/<int:loan_id>")
@jwt_required()
def update_loan(loan_id: int):
    loan = db.session.get(Loan, loan_id)
    if not loan:
        return jsonify({"msg": "Loan not found."}), 404

    try:
        data = loan_update_schema.load(request.get_json() or {})
    except ValidationError as error:
        return jsonify({"errors": error.normalized_messages()}), 422

    person_id = data.pop("person_id", None)
    if person_id is not None and person_id != loan.person_id:
        person = db.session.get(Person, person_id)
        if not person:
            return jsonify({"msg": "Person not found."}), 404
        loan.person_id = person.id
        loan.person_name = person.name

    # The stored amount is signed, so type and amount are re-applied together.
    transaction_type = data.pop("transaction_type", None) or loan.transaction_type
    amount = data.pop("amount", None)
    if amount is None:
        amount = abs(loan.amount)
    loan.transaction_type = transaction_type
    loan.amount = signed_amount(transaction_type, amount)

    for key, value in data.items():
        setattr(loan, key, value)
    db.session.commit()
    return jsonify(loan_schema.dump(loan))


@bp.delete("/loans/<int:loan_id>")
@jwt_required()
def delete_loan(loan_id: int):
    loan = db.session.get(Loan, loan_id)
    if not loan:
        return jsonify({"msg": "Loan not found."}), 404
    db.session.delete(loan)
    db.session.commit()
    return jsonify({"msg": "Loan deleted."})
