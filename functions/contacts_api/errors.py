"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; the app renders them as
``{"success": false, "message": ..., "errors": [...]}``.
"""

from __future__ import annotations

from typing import Optional

from contacts_api.validation import FieldError


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[FieldError]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def as_dict(self) -> dict:
        payload: dict = {"success": False, "message": self.message}
        if self.errors:
            payload["errors"] = [error.as_dict() for error in self.errors]
        return payload


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid data"


class ConflictError(ApiError):
    status_code = 400
    default_message = "Resource already exists"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(AuthenticationError):
    default_message = "Invalid email or password"


class AccountDisabled(AuthenticationError):
    default_message = "Account disabled"


class InvalidToken(AuthenticationError):
    default_message = "Invalid token"


class ExpiredToken(AuthenticationError):
    default_message = "Token expired"


class UserNotFound(AuthenticationError):
    default_message = "User not found"
