from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import (
    create_access_token,
    get_jwt,
    jwt_required,
    set_access_cookies,
    unset_jwt_cookies,
)
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from extensions import db
from models import RoleEnum, User
from schemas import UserSchema

bp = Blueprint("auth", __name__, url_prefix="/api/auth")
user_schema = UserSchema()


def require_role(*roles):
    claims = get_jwt()
    try:
        current_role = RoleEnum(claims.get("role"))
    except (ValueError, TypeError):
        return False
    return current_role in roles


@bp.post("/register")
@jwt_required()  # only admins can register
def register():
    if not require_role(RoleEnum.admin):
        return jsonify({"msg": "Admins only"}), 403

    data = request.get_json() or {}
    email = (data.get("email") or "").strip().lower()
    name = (data.get("name") or "").strip()
    role = data.get("role") or RoleEnum.staff.value
    password = data.get("password")

    if not email or not name or not password:
        return jsonify({"msg": "Name, email and password are required"}), 400

    try:
        role_enum = RoleEnum(role)
    except ValueError:
        return jsonify({"msg": "Invalid role"}), 400

    u = User(name=name, email=email, role=role_enum)
    u.set_password(password)
    db.session.add(u)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"msg": "Email is already registered"}), 409

    current_app.logger.info("Registered user %s with role %s", email, role_enum.value)
    return jsonify({"id": u.id}), 201


@bp.post("/login")
def login():
    payload = request.get_json(silent=True)
    if not payload:
        payload = request.form.to_dict() if request.form else {}

    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    if not email or not password:
        return jsonify({"msg": "Email and password are required"}), 400

    u = User.query.filter(func.lower(User.email) == email).first()
    if not u or not u.check_password(password) or not u.active:
        return jsonify({"msg": "Invalid email or password"}), 401

    token = create_access_token(identity=str(u.id), additional_claims={"role": u.role.value})
    response = jsonify(access_token=token, user=user_schema.dump(u))
    set_access_cookies(response, token)
    return response


@bp.post("/logout")
def logout():
    response = jsonify({"msg": "Logged out"})
    unset_jwt_cookies(response)
    return response


@bp.get("/me")
@jwt_required()
def me():
    try:
        user_id = int(get_jwt().get("sub"))
    except (TypeError, ValueError):
        return jsonify({"msg": "Invalid token subject"}), 422
    u = db.session.get(User, user_id)
    if not u:
        return jsonify({"msg": "User not found"}), 404
    return jsonify(user_schema.dump(u))
