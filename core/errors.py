"""
core/errors.py -- Domain exceptions shared by auth/ and profiles/.

Stores and services raise these; api/main.py owns the single exception handler
that maps them onto the JSON error envelope. Nothing in this module knows
about HTTP beyond the suggested status code carried on each class.

Storage failures are not wrapped here: SQLAlchemyError propagates unchanged
and api/main.py maps it to a generic 500 "storage_error".
"""


class AppError(Exception):
    """Base class for errors that surface to the caller as a 4xx response."""

    status_code: int = 400
    code: str = "bad_request"
    message: str = "Bad request."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DuplicateEmail(AppError):
    code = "duplicate_email"
    message = "Email already exists."


class InvalidCredentials(AppError):
    # Same message for unknown email and wrong password.
    code = "invalid_credentials"
    message = "Invalid credentials."


class InvalidToken(AppError):
    # The access guard renders this as its 401 body.
    status_code = 401
    code = "unauthorized"
    message = "Invalid or expired token."


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    message = "Resource not found."
