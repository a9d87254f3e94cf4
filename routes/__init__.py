"""Shared helpers for route blueprints."""

from __future__ import annotations

from functools import wraps

from flask import g, request

from errors import InvalidInput
from services.auth_service import verify_token

__all__ = ["authenticate_request", "bearer_token", "json_payload", "token_required", "validate_form"]


def bearer_token() -> str | None:
    """Return the token from an ``Authorization: Bearer`` header, if any."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def authenticate_request() -> dict:
    """Verify the bearer token and remember the identity on ``g``."""
    g.identity = verify_token(bearer_token())
    return g.identity


def token_required(f):
    """Requires a valid bearer token for the route to be accessed

    Usage:
        @bp.route('/me')   # Flask route\n
        @token_required    # Rejects the request with 401 without a valid token\n
        def me():          # g.identity holds {"id", "email"} from the token\n
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        authenticate_request()
        return f(*args, **kwargs)

    return decorated_function


def json_payload() -> dict:
    """Return the decoded JSON object of the request body."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object.")
    return payload


def validate_form(form_class, payload: dict):
    """Build ``form_class`` from the payload and raise when it does not validate."""
    form = form_class.from_payload(payload)
    if not form.validate():
        raise InvalidInput("Please correct the highlighted fields.", errors=form.errors)
    return form
