"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "ApiError",
    "Conflict",
    "InternalError",
    "InvalidInput",
    "NotFound",
    "Unauthorized",
]


class ApiError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500
    default_message = "An internal error has occurred."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidInput(ApiError):
    """Raised when request data is missing or malformed."""

    status_code = 400
    default_message = "Invalid input."

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists."


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Authentication required."


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found."


class InternalError(ApiError):
    status_code = 500
