"""Error taxonomy shared by the auth core and the HTTP boundary.

Each error carries the HTTP status it maps to, a short stable ``error`` label
and a human-readable ``message``. The boundary (userapi.api.errors) renders
them as ``{"error": ..., "message": ...}``.
"""

from typing import Any


class AppError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 500
    error: str = "Server error"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        error: str | None = None,
        details: list[Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        if error is not None:
            self.error = error
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailedError(AppError):
    """Malformed input or a rejected business operation (400)."""

    status_code = 400
    error = "Validation Error"
    default_message = "The request is invalid"


class ConflictError(AppError):
    """Uniqueness violation on username or email (400)."""

    status_code = 400
    error = "User already exists"
    default_message = "A user with these details already exists"


class UnauthorizedError(AppError):
    """Missing, invalid or expired token, or bad credentials (401)."""

    status_code = 401
    error = "Unauthorized"
    default_message = "Authentication required"


class ForbiddenError(AppError):
    """Authenticated but not allowed by role or ownership (403)."""

    status_code = 403
    error = "Forbidden"
    default_message = "Admin access required"


class NotFoundError(AppError):
    status_code = 404
    error = "User not found"
    default_message = "User with the specified ID does not exist"


class InternalError(AppError):
    status_code = 500
    error = "Server error"
    default_message = "Internal Server Error"


class TokenError(Exception):
    """Base class for bearer token verification failures."""


class MalformedTokenError(TokenError):
    """Input is not a parseable signed token."""


class InvalidSignatureError(TokenError):
    """Token parses but was not signed with the service secret."""


class TokenExpiredError(TokenError):
    """Signature is valid but the token is past its expiry."""
