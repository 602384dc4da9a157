"""Secure error handling for API responses.

Clients get `{error, message}` built from the `InkwellError` taxonomy and
nothing else. Full details go to the log with a short reference id.
"""

import uuid
from typing import NoReturn

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from inkwell.auth.cookies import apply_cookie_mutations
from inkwell.errors import InkwellError, InternalError, RateLimitedError

log = structlog.get_logger()


def error_response(exc: InkwellError) -> JSONResponse:
    """Render any taxonomy error. The single place status codes are chosen."""
    response = JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    if isinstance(exc, RateLimitedError):
        response.headers["Retry-After"] = str(exc.retry_after)
    return apply_cookie_mutations(response, exc.cookie_mutations)  # type: ignore[return-value]


async def inkwell_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, InkwellError)
    if exc.status_code >= 500:
        log.error("request_failed", path=request.url.path, error=exc.code.value)
    else:
        log.info("request_rejected", path=request.url.path, error=exc.code.value)
    return error_response(exc)


def raise_internal_error(
    exc: Exception,
    *,
    context: str | None = None,
    message: str | None = None,
    log_details: dict | None = None,
) -> NoReturn:
    """Raise a 500 error with a safe message while logging full details.

    Args:
        exc: The original exception (logged but not exposed)
        context: Human-readable context for logs (e.g., "listing installations")
        message: Safe user-facing message (or uses the generic default)
        log_details: Additional details to include in logs

    Raises:
        InternalError: always
    """
    error_id = str(uuid.uuid4())[:8]

    log.error(
        "internal_error",
        error_id=error_id,
        context=context,
        error_type=type(exc).__name__,
        error_message=str(exc),
        **(log_details or {}),
    )

    raise InternalError(message) from exc
