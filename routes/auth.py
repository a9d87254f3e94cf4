"""Registration, login and current user endpoints."""
from __future__ import annotations

from flask import Blueprint, g, jsonify

from database import db
from forms import LoginForm, RegisterForm
from routes import json_payload, token_required, validate_form
from services import auth_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/register", methods=["POST"])
def register():
    """Create an account and return it with a session token."""
    form = validate_form(RegisterForm, json_payload())
    user, token = auth_service.register(
        db.session,
        form.email.data,
        form.password.data,
        form.name.data,
    )
    return jsonify({"user": user.to_dict(), "token": token}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    form = validate_form(LoginForm, json_payload())
    user, token = auth_service.login(db.session, form.email.data, form.password.data)
    return jsonify({"user": user.to_dict(), "token": token})


@auth_bp.route("/me", methods=["GET"])
@token_required
def me():
    """Return the profile of the user the bearer token belongs to."""
    user = auth_service.get_current_user(db.session, g.identity)
    return jsonify({"user": user.to_dict()})
