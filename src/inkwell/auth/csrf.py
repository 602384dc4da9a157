"""CSRF protection using the double-submit cookie pattern.

1. `GET /auth/session` ensures a script-readable `__csrf` cookie exists and
   echoes its value in the `X-CSRF-Token` response header.
2. Clients send that value back in `X-CSRF-Token` on state-changing requests.
3. The server compares header and cookie. No server-side token ledger exists.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping

from inkwell import config as config_module
from inkwell.auth.cookies import CSRF_COOKIE, CookieMutation
from inkwell.auth.tokens import generate_token, is_well_formed_token
from inkwell.errors import InvalidCsrfError

CSRF_HEADER = "X-CSRF-Token"
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def get_or_create_token(cookies: Mapping[str, str]) -> tuple[str, list[CookieMutation]]:
    """Return the session's CSRF token, minting one only if none is usable.

    An existing well-formed token comes back unchanged with no mutations, so
    clients that cached it keep working.
    """
    existing = cookies.get(CSRF_COOKIE)
    if is_well_formed_token(existing):
        return existing, []  # type: ignore[return-value]

    token = generate_token()
    cookie = CookieMutation(
        name=CSRF_COOKIE,
        value=token,
        max_age=config_module.settings.csrf_cookie_max_age_days * 24 * 60 * 60,
        httponly=False,
    )
    return token, [cookie]


def expire_token() -> CookieMutation:
    """Force a new token on the next bootstrap (login, logout)."""
    return CookieMutation.delete(CSRF_COOKIE)


def requires_csrf(method: str, path: str) -> bool:
    if method.upper() in SAFE_METHODS:
        return False
    return not any(path.startswith(p) for p in config_module.settings.csrf_exempt_prefixes)


def verify_csrf(*, method: str, cookie_token: str | None, header_token: str | None) -> None:
    """Raise `InvalidCsrfError` unless a state-changing request echoes its cookie token."""
    if method.upper() in SAFE_METHODS:
        return
    if not cookie_token or not header_token:
        raise InvalidCsrfError()
    if not hmac.compare_digest(cookie_token.encode("utf-8"), header_token.encode("utf-8")):
        raise InvalidCsrfError()
