from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from dao import user as user_dao
from db.models.user import UserRole
from utils.auth import roles_required
from utils.request_json import json_body
from utils.serialize import user_to_dict

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _ttl() -> int:
    return current_app.config["VERIFICATION_TOKEN_TTL_MINUTES"]


@auth_bp.route("/register", methods=["POST"])
def register():
    body = json_body()
    user = user_dao.register(
        name=body.get("name"),
        email=body.get("email"),
        password=body.get("password"),
        ttl_minutes=_ttl(),
    )
    return jsonify({"user": {"name": user.name, "email": user.email}}), 201


@auth_bp.route("/verify", methods=["POST"])
def verify():
    body = json_body()
    user_dao.verify_email(body.get("email"), body.get("token"))
    return jsonify({"message": "Email verified successfully"})


@auth_bp.route("/resend-verification", methods=["POST"])
def resend_verification():
    body = json_body()
    user_dao.resend_verification(body.get("email"), ttl_minutes=_ttl())
    return jsonify({"success": True})


@auth_bp.route("/login", methods=["POST"])
def login():
    body = json_body()
    user = user_dao.authenticate(body.get("email"), body.get("password"))
    login_user(user, remember=bool(body.get("remember", True)))
    return jsonify({"user": user_to_dict(user)})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({"success": True})


@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"user": user_to_dict(current_user)})


@auth_bp.route("/users")
@roles_required(UserRole.ADMIN)
def users():
    return jsonify([user_to_dict(u) for u in user_dao.list_users()])
