"""Browser session management.

Sessions are rows in `user_sessions`; the browser holds `__session`, an
HMAC-signed reference to the row id. The cookie is HTTP-only and never
readable by client-side script.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from inkwell import config as config_module
from inkwell.auth.cookies import SESSION_COOKIE, CookieMutation, sign, signature_matches
from inkwell.auth.tokens import generate_token, is_well_formed_token
from inkwell.db.models import User, UserSession, utcnow_naive
from inkwell.errors import AuthenticationError, InkwellError, InternalError

log = structlog.get_logger()


@dataclass(frozen=True)
class SessionPrincipal:
    """The authenticated user behind a request."""

    id: str
    login: str
    avatar_url: str
    session_id: str
    expires_at: datetime


def _session_max_age() -> timedelta:
    return timedelta(days=config_module.settings.session_max_age_days)


def encode_session_cookie(session_id: str) -> str:
    return f"{session_id}.{sign(session_id.encode('ascii'))}"


def decode_session_cookie(value: str | None) -> str | None:
    """Return the session id if the cookie is well-formed and correctly signed."""
    if not value or "." not in value:
        return None
    session_id, sig = value.split(".", 1)
    if not is_well_formed_token(session_id):
        return None
    if not signature_matches(session_id.encode("ascii"), sig):
        return None
    return session_id


class SessionManager:
    """Manages `user_sessions` rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_session(self, user_id: str) -> UserSession:
        record = UserSession(
            id=generate_token(),
            user_id=user_id,
            expires_at=utcnow_naive() + _session_max_age(),
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def find_valid_session(self, session_id: str) -> tuple[UserSession, User] | None:
        """Look up an unexpired session and its user, touching `last_seen_at`."""
        result = await self._session.execute(
            select(UserSession, User)
            .join(User, UserSession.user_id == User.id)
            .where(UserSession.id == session_id)
        )
        row = result.first()
        if row is None:
            return None
        record, user = row
        now = utcnow_naive()
        if record.expires_at < now:
            return None
        record.last_seen_at = now
        return record, user

    async def delete_session(self, session_id: str) -> None:
        await self._session.execute(delete(UserSession).where(UserSession.id == session_id))

    async def delete_expired_sessions(self) -> int:
        result = await self._session.execute(
            delete(UserSession).where(UserSession.expires_at < utcnow_naive())
        )
        return int(result.rowcount or 0)


class SessionAccessor:
    """Resolves the principal for one request from its cookies.

    `current_principal` / `require_session` are strict and raise
    `AuthenticationError`. `session_summary` is the lenient read path for
    endpoints that must answer when logged out; it never raises.
    """

    def __init__(self, session: AsyncSession, cookies: Mapping[str, str]) -> None:
        self._session = session
        self._cookies = cookies
        self._manager = SessionManager(session)

    async def current_principal(self) -> SessionPrincipal:
        raw = self._cookies.get(SESSION_COOKIE)
        if not raw:
            raise AuthenticationError()

        clear = [CookieMutation.delete(SESSION_COOKIE)]
        session_id = decode_session_cookie(raw)
        if session_id is None:
            log.info("Rejected session cookie with bad format or signature")
            raise AuthenticationError(cookie_mutations=clear)

        try:
            found = await self._manager.find_valid_session(session_id)
        except SQLAlchemyError as e:
            log.error("Session lookup failed", error_type=type(e).__name__, error=str(e))
            raise InternalError() from e

        if found is None:
            raise AuthenticationError(cookie_mutations=clear)

        record, user = found
        return SessionPrincipal(
            id=user.id,
            login=user.login,
            avatar_url=user.avatar_url,
            session_id=record.id,
            expires_at=record.expires_at,
        )

    async def require_session(self) -> SessionPrincipal:
        return await self.current_principal()

    async def session_summary(self) -> tuple[dict[str, Any] | None, list[CookieMutation]]:
        try:
            principal = await self.current_principal()
        except InkwellError as e:
            if not isinstance(e, AuthenticationError):
                log.warning("Session summary degraded to anonymous", error=e.code.value)
            return None, e.cookie_mutations
        return summarize(principal), []

    async def start_session(self, user_id: str) -> list[CookieMutation]:
        record = await self._manager.create_session(user_id)
        return [
            CookieMutation(
                name=SESSION_COOKIE,
                value=encode_session_cookie(record.id),
                max_age=int(_session_max_age().total_seconds()),
                httponly=True,
            )
        ]

    async def end_session(self) -> list[CookieMutation]:
        session_id = decode_session_cookie(self._cookies.get(SESSION_COOKIE))
        if session_id:
            await self._manager.delete_session(session_id)
        return [CookieMutation.delete(SESSION_COOKIE)]


def summarize(principal: SessionPrincipal) -> dict[str, Any]:
    return {
        "user": {
            "id": principal.id,
            "login": principal.login,
            "avatarUrl": principal.avatar_url,
        },
        "expiresAt": principal.expires_at.isoformat() + "Z",
    }
