"""FastAPI/Starlette middleware: CSRF enforcement and security headers."""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from inkwell.api.errors import error_response
from inkwell.auth.cookies import CSRF_COOKIE
from inkwell.auth.csrf import CSRF_HEADER, requires_csrf, verify_csrf
from inkwell.errors import InvalidCsrfError

log = structlog.get_logger()

SECURITY_HEADERS = {
    "X-Frame-Options": "SAMEORIGIN",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
}


class CsrfMiddleware(BaseHTTPMiddleware):
    """Reject state-changing requests whose header token does not match the cookie."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if requires_csrf(request.method, request.url.path):
            try:
                verify_csrf(
                    method=request.method,
                    cookie_token=request.cookies.get(CSRF_COOKIE),
                    header_token=request.headers.get(CSRF_HEADER),
                )
            except InvalidCsrfError as e:
                log.warning("CSRF validation failed", method=request.method, path=request.url.path)
                return error_response(e)

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach baseline browser hardening headers to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
