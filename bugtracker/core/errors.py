"""Error taxonomy shared by services and routes.

Services raise these; the exception handlers in ``bugtracker.main`` render them
as ``{"error": message}`` with the matching status code.
"""


class AppError(Exception):
    """Base class for failures that map to a client-visible status code."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, cause: Exception | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class Unauthorized(AppError):
    """Missing, invalid or expired bearer token."""

    status_code = 401
    default_message = "Unauthorized"


class TokenInvalid(Unauthorized):
    """Token signature, structure or claims did not verify."""

    default_message = "Invalid token"


class TokenExpired(Unauthorized):
    """Token verified but its expiry instant has passed."""

    default_message = "Token expired"


class InvalidCredentials(AppError):
    """Login failed. Never says whether the email exists."""

    status_code = 401
    default_message = "Invalid credentials"


class DuplicateAccount(AppError):
    # 409 would be more precise; clients already expect 400 here.
    status_code = 400
    default_message = "Email already exists"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class PayloadTooLarge(AppError):
    status_code = 400
    default_message = "File too large"


class UnsupportedMediaType(AppError):
    status_code = 400
    default_message = "Video files are not allowed"


class InternalError(AppError):
    status_code = 500
