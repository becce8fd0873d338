"""
core/errors.py -- Domain error taxonomy shared by services and the HTTP layer.

Services raise these; api/main.py maps every AppError to the JSON error
envelope using status_code and code. Nothing here knows about FastAPI, so the
auth core and the resource services stay framework-independent.

  ValidationError          400  missing or malformed input
  DuplicateEmailError      400  registration / email change collision
  AuthenticationError      401  missing, invalid or expired token; deleted user
  InvalidCredentialsError  401  bad login (unknown email and wrong password alike)
  ForbiddenError           403  authenticated but not permitted
  NotFoundError            404  resource does not exist

Anything that is not an AppError is an internal error and surfaces as 500.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that have a defined HTTP rendering."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    default_message = "Request validation failed."


class DuplicateEmailError(AppError):
    status_code = 400
    code = "duplicate_email"
    default_message = "A user with that email already exists."


class AuthenticationError(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Not authorized, token failed."


class InvalidCredentialsError(AuthenticationError):
    code = "invalid_credentials"
    default_message = "Invalid email or password."


class ForbiddenError(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Not authorized to perform this action."


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."
