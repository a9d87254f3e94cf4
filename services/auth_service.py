"""Registration, login and bearer token handling."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from errors import Conflict, InternalError, InvalidInput, NotFound, Unauthorized
from models.user import User

DEFAULT_TOKEN_LIFETIME = 86400
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _signing_key() -> str:
    return current_app.config.get("JWT_SECRET_KEY") or current_app.config["SECRET_KEY"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def issue_token(user: User, expires_in: Optional[int] = None) -> str:
    """Sign a session token for the user.

    ``expires_in`` is the lifetime in seconds and defaults to the
    ``JWT_EXPIRES_IN`` setting.
    """
    if expires_in is None:
        expires_in = int(current_app.config.get("JWT_EXPIRES_IN", DEFAULT_TOKEN_LIFETIME))
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, _signing_key(), algorithm=_algorithm())


def verify_token(token: Optional[str]) -> Dict[str, Any]:
    """Validate signature and expiry and return the identity in the token."""
    if not token:
        raise Unauthorized("Access token required.")
    try:
        payload = jwt.decode(
            token,
            _signing_key(),
            algorithms=[_algorithm()],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Invalid token.") from exc

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid token.") from exc
    return {"id": user_id, "email": payload.get("email")}


def register(session, email: Optional[str], password: Optional[str], name: Optional[str]) -> Tuple[User, str]:
    """Create a user and return it together with a session token."""
    email = _normalize_email(email)
    name = (name or "").strip()
    if not email or not password or not name:
        raise InvalidInput("Email, password, and name are required.")

    user = User(email=email, name=name)
    user.set_password(password)
    try:
        if session.query(User).filter_by(email=email).first() is not None:
            raise Conflict("A user with this email already exists.")
        session.add(user)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise Conflict("A user with this email already exists.") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logging.exception("Database error while registering user")
        raise InternalError() from exc

    current_app.logger.info("Registered user %s", user.id)
    return user, issue_token(user)


def login(session, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
    """Check the credentials and return the user with a fresh token."""
    email = _normalize_email(email)
    if not email or not password:
        raise InvalidInput("Email and password are required.")

    try:
        user = session.query(User).filter_by(email=email).first()
    except SQLAlchemyError as exc:
        logging.exception("Database error while looking up user for login")
        raise InternalError() from exc

    if user is None or not user.check_password(password):
        current_app.logger.warning("Failed login attempt")
        raise Unauthorized(INVALID_CREDENTIALS_MESSAGE)
    return user, issue_token(user)


def get_current_user(session, identity: Dict[str, Any]) -> User:
    try:
        user = session.get(User, identity["id"])
    except SQLAlchemyError as exc:
        logging.exception("Database error while loading user %s", identity.get("id"))
        raise InternalError() from exc
    if user is None:
        raise NotFound("User not found.")
    return user
