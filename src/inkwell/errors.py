"""Error taxonomy for the Inkwell API.

Every failure that reaches the HTTP boundary is one of the `InkwellError`
subclasses below. Each subclass pins its wire code and status, so handlers
dispatch on the class instead of comparing names or messages.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from inkwell.auth.cookies import CookieMutation


class ErrorCode(StrEnum):
    """Machine-readable error codes returned in the `error` field."""

    UNAUTHORIZED = "unauthorized"
    CSRF_INVALID = "csrf_invalid"
    FORBIDDEN = "forbidden"
    INTERNAL_ERROR = "internal_error"
    RATE_LIMITED = "rate_limited"


class InkwellError(Exception):
    """Base exception for all errors surfaced to API clients."""

    code: ClassVar[ErrorCode] = ErrorCode.INTERNAL_ERROR
    status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = "An internal error occurred. Please try again later."

    def __init__(
        self,
        message: str | None = None,
        *,
        cookie_mutations: Sequence[CookieMutation] = (),
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.cookie_mutations = list(cookie_mutations)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.code.value, "message": self.message}


class AuthenticationError(InkwellError):
    """No valid session: missing, expired, or signature-invalid."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401
    default_message = "Authentication required"


class InvalidCsrfError(InkwellError):
    """CSRF token missing or mismatched on a state-changing request."""

    code = ErrorCode.CSRF_INVALID
    status_code = 403
    default_message = "Invalid or missing security token"


class AuthorizationError(InkwellError):
    """Authenticated, but the resource belongs to someone else."""

    code = ErrorCode.FORBIDDEN
    status_code = 403
    default_message = "Access denied"


class InternalError(InkwellError):
    """Storage or unexpected failure. The message is always generic."""


class RateLimitedError(InkwellError):
    """Client exceeded its request budget."""

    code = ErrorCode.RATE_LIMITED
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    def to_payload(self) -> dict[str, str | int]:  # type: ignore[override]
        return {**super().to_payload(), "retryAfter": self.retry_after}
