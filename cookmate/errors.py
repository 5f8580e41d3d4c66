"""
Error taxonomy shared by the services and the HTTP layer.

Every domain failure is an ``AppError`` subclass carrying the HTTP status and
a machine-readable code; ``app.py`` turns them into error envelopes.
"""
from __future__ import annotations


class AppError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 422
    code = "validation_error"
    default_message = "Invalid input"


class DuplicateError(AppError):
    status_code = 409
    code = "duplicate"
    default_message = "Resource already exists"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class AuthenticationError(AppError):
    status_code = 401
    code = "not_authenticated"
    default_message = "Not authenticated"


class AuthorizationError(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Not authorized"


class InvalidStateError(AppError):
    status_code = 409
    code = "invalid_state"
    default_message = "Operation not allowed in the current state"


class InternalError(AppError):
    pass
