"""FastAPI dependencies for sessions and owner-scoped data access.

Signed-in routes never receive a raw `AsyncSession`: their only data handle is
`get_authorized_db`, which is bound to the request's principal. The exception
is `/auth/callback`, which depends on `get_session_dependency` directly because
it upserts the user before any session exists.
"""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.context import AuthContext
from inkwell.auth.sessions import SessionAccessor
from inkwell.db.authorized import AuthorizedDb, authorized_db
from inkwell.db.connection import get_session_dependency


def get_session_accessor(
    request: Request,
    session: AsyncSession = Depends(get_session_dependency),
) -> SessionAccessor:
    return SessionAccessor(session, request.cookies)


async def get_auth_context(
    accessor: SessionAccessor = Depends(get_session_accessor),
) -> AuthContext:
    """Strict: raises AuthenticationError (401) when there is no valid session."""
    principal = await accessor.require_session()
    return AuthContext(principal=principal)


def get_authorized_db(
    ctx: AuthContext = Depends(get_auth_context),
    session: AsyncSession = Depends(get_session_dependency),
) -> AuthorizedDb:
    return authorized_db(session, ctx.owner_id)
