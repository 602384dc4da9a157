"""Rate limiting configuration for API endpoints."""

import math

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from inkwell import config as config_module
from inkwell.api.errors import error_response
from inkwell.auth.cookies import SESSION_COOKIE
from inkwell.auth.sessions import decode_session_cookie
from inkwell.config import settings
from inkwell.errors import RateLimitedError


def _get_key(request: Request) -> str:
    """Get rate limit key from request.

    Uses the session id when the session cookie carries a valid signature,
    otherwise falls back to IP address. Forged cookies share the IP bucket.
    """
    if config_module.settings.session_secret.get_secret_value():
        session_id = decode_session_cookie(request.cookies.get(SESSION_COOKIE))
        if session_id:
            return f"session:{session_id}"

    return get_remote_address(request)


# Global limiter instance
limiter = Limiter(
    key_func=_get_key,
    default_limits=[settings.rate_limit_default] if settings.rate_limit_default else [],
    storage_uri=settings.rate_limit_storage or "memory://",
    strategy="fixed-window",
    enabled=settings.rate_limit_enabled,
)

RATE_LIMITS = {
    # Auth endpoints - stricter limits to slow down login abuse
    "auth": "10/minute",
    # Standard API endpoints
    "api": "60/minute",
}


def get_rate_limit(endpoint_type: str) -> str:
    """Get rate limit string for endpoint type."""
    return RATE_LIMITS.get(endpoint_type, RATE_LIMITS["api"])


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RateLimitExceeded)
    retry_after = 60
    limit = getattr(exc, "limit", None)
    if limit is not None:
        retry_after = max(1, math.ceil(limit.limit.get_expiry()))
    return error_response(RateLimitedError(retry_after=retry_after))
