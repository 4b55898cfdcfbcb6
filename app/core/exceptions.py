"""
Application error taxonomy.

Every error carries the HTTP status it maps to, a user-facing message and,
for validation failures, the list of per-field violations. The handlers in
app.main render them as {"success": false, "message": ..., "errors": [...]}.
"""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that are rendered to the client."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """One or more field-level violations, all reported together."""

    status_code = 400
    default_message = "Validation error"

    def __init__(self, errors: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message, errors=errors)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], message=message)


class AuthError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidToken(AuthError):
    default_message = "Token is not valid"


class TokenExpired(AuthError):
    default_message = "Token has expired"


class InvalidCredentials(AuthError):
    default_message = "Invalid credentials"


class DuplicateEmail(AppError):
    status_code = 409
    default_message = "Email already registered"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class RateLimitExceeded(AppError):
    status_code = 429
    default_message = "Too many requests"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"
