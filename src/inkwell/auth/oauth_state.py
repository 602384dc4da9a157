"""Signed OAuth state cookies (login CSRF protection)."""

from __future__ import annotations

import hmac
import json
import time
from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import urlsplit

from inkwell import config as config_module
from inkwell.auth.cookies import (
    OAUTH_STATE_COOKIE,
    CookieMutation,
    b64url,
    b64url_decode,
    sign,
    signature_matches,
)
from inkwell.auth.tokens import generate_token, is_well_formed_token


@dataclass(frozen=True)
class StateRecord:
    state: str
    redirect_to: str
    issued_at: int


class OAuthStateError(ValueError):
    """OAuth state validation error."""


def safe_redirect_path(value: str | None) -> str:
    """Return `value` if it is a same-origin relative path, else the default landing path.

    Rejects absolute URLs, scheme-relative `//host` forms, backslash tricks
    that browsers normalise to `//`, and control characters.
    """
    default = config_module.settings.default_redirect
    target = (value or "").strip()
    if not target or not target.startswith("/"):
        return default
    if target.startswith("//") or "\\" in target:
        return default
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in target):
        return default
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return default
    return target


def _encode(record: StateRecord) -> str:
    payload = json.dumps(
        {"state": record.state, "redirectTo": record.redirect_to, "iat": record.issued_at},
        separators=(",", ":"),
    ).encode("utf-8")
    return f"{b64url(payload)}.{sign(payload)}"


def issue_state(redirect: str | None = None) -> tuple[StateRecord, CookieMutation]:
    """Mint a fresh state nonce and the cookie that carries it to the callback."""
    record = StateRecord(
        state=generate_token(),
        redirect_to=safe_redirect_path(redirect),
        issued_at=int(time.time()),
    )
    cookie = CookieMutation(
        name=OAUTH_STATE_COOKIE,
        value=_encode(record),
        max_age=config_module.settings.oauth_state_max_age_seconds,
        httponly=True,
    )
    return record, cookie


def read_state_cookie(cookie_value: str | None) -> StateRecord:
    """Decode and authenticate a state cookie without checking freshness."""
    if not cookie_value:
        raise OAuthStateError("Authentication session expired")

    try:
        payload_b64, sig = cookie_value.split(".", 1)
        payload = b64url_decode(payload_b64)
    except ValueError as e:
        raise OAuthStateError("Invalid authentication session") from e

    if not signature_matches(payload, sig):
        raise OAuthStateError("Invalid authentication session")

    try:
        data = json.loads(payload.decode("utf-8"))
        record = StateRecord(
            state=str(data["state"]),
            redirect_to=str(data["redirectTo"]),
            issued_at=int(data["iat"]),
        )
    except Exception as e:
        raise OAuthStateError("Invalid authentication session") from e

    if not is_well_formed_token(record.state):
        raise OAuthStateError("Invalid authentication session")
    return record


def verify_state(
    *,
    cookie_value: str | None,
    returned_state: str | None,
    max_age: timedelta | None = None,
) -> StateRecord:
    """Check the provider-echoed state against the cookie set at initiation."""
    if max_age is None:
        max_age = timedelta(seconds=config_module.settings.oauth_state_max_age_seconds)

    record = read_state_cookie(cookie_value)

    if not returned_state or not hmac.compare_digest(
        record.state.encode("utf-8"), returned_state.encode("utf-8")
    ):
        raise OAuthStateError("Invalid authentication state")

    if time.time() - record.issued_at > max_age.total_seconds():
        raise OAuthStateError("Authentication session expired")

    # Redirect targets are re-validated in case the safe-path rules tightened
    return StateRecord(
        state=record.state,
        redirect_to=safe_redirect_path(record.redirect_to),
        issued_at=record.issued_at,
    )


def clear_state_cookie() -> CookieMutation:
    return CookieMutation.delete(OAUTH_STATE_COOKIE)
