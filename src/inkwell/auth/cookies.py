"""Cookie mutations and HMAC signing helpers.

Auth operations never touch a response directly. They receive the inbound
cookie mapping and return `CookieMutation` values; the HTTP layer applies them
with `apply_cookie_mutations`.
"""

from __future__ import annotations

import base64
import hmac
from collections.abc import Iterable
from dataclasses import dataclass
from hashlib import sha256
from typing import Literal

from starlette.responses import Response

from inkwell import config as config_module
from inkwell.errors import InternalError

SESSION_COOKIE = "__session"
OAUTH_STATE_COOKIE = "__auth_state"
CSRF_COOKIE = "__csrf"


@dataclass(frozen=True)
class CookieMutation:
    """A cookie to set, or to expire when `value` is None."""

    name: str
    value: str | None
    max_age: int | None = None
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"
    path: str = "/"

    @property
    def is_delete(self) -> bool:
        return self.value is None

    @classmethod
    def delete(cls, name: str, *, path: str = "/") -> CookieMutation:
        return cls(name=name, value=None, path=path)


def cookie_secure() -> bool:
    if config_module.settings.cookie_secure is not None:
        return bool(config_module.settings.cookie_secure)
    return config_module.settings.is_production or config_module.settings.public_url.startswith(
        "https://"
    )


def apply_cookie_mutations(response: Response, mutations: Iterable[CookieMutation]) -> Response:
    domain = config_module.settings.cookie_domain
    for mutation in mutations:
        if mutation.is_delete:
            response.delete_cookie(mutation.name, path=mutation.path, domain=domain)
            continue
        response.set_cookie(
            mutation.name,
            mutation.value or "",
            max_age=mutation.max_age,
            path=mutation.path,
            domain=domain,
            secure=cookie_secure(),
            httponly=mutation.httponly,
            samesite=mutation.samesite,
        )
    return response


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + pad).encode("ascii"))


def require_session_secret() -> str:
    secret = config_module.settings.session_secret.get_secret_value()
    if not secret:
        raise InternalError("Session secret not configured")
    return secret


def sign(payload: bytes, *, secret: str | None = None) -> str:
    key = secret if secret is not None else require_session_secret()
    return b64url(hmac.new(key.encode("utf-8"), payload, sha256).digest())


def signature_matches(payload: bytes, signature: str, *, secret: str | None = None) -> bool:
    expected = sign(payload, secret=secret).encode("ascii")
    return hmac.compare_digest(expected, signature.encode("utf-8"))
