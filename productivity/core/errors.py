"""Typed application errors.

Every domain failure is raised as an ``AppError`` subclass that carries the
HTTP status, a caller-facing message and a tagged ``ErrorKind``. The API layer
translates them into the response envelope in exactly one place
(``productivity.api.error_handling``).
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable error classification."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


class AppError(Exception):
    """Base application error."""

    status_code: int = 500
    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[str] | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or semantically invalid input."""

    status_code = 400
    kind = ErrorKind.VALIDATION
    default_message = "Validation error"


class ConflictError(AppError):
    """A unique field is already taken."""

    status_code = 409
    kind = ErrorKind.CONFLICT
    default_message = "Resource already exists"


class UnauthorizedError(AppError):
    """Missing, invalid, expired or revoked credentials."""

    status_code = 401
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    """Authenticated but not allowed."""

    status_code = 403
    kind = ErrorKind.FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    status_code = 404
    kind = ErrorKind.NOT_FOUND
    default_message = "Record not found"


class RateLimitedError(AppError):
    status_code = 429
    kind = ErrorKind.RATE_LIMITED
    default_message = "Too many requests. Please try again later."


class InternalError(AppError):
    pass


# --- Authentication errors ---


class InvalidCredentialsError(UnauthorizedError):
    """Unknown identifier or wrong password.

    Both cases share one message so callers cannot probe for usernames or
    email addresses.
    """

    default_message = "Invalid credentials"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token"


class TokenExpiredError(InvalidTokenError):
    default_message = "Token has expired"


class TokenRevokedError(InvalidTokenError):
    default_message = "Token has been revoked"


class InvalidRoleError(ValidationError):
    default_message = "Invalid role. Only viewer and editor roles are allowed."
