"""Inkwell database module - PostgreSQL storage for identities and owner-scoped data.

Usage:
    from inkwell.db import authorized_db, get_session

    async with get_session() as session:
        db = authorized_db(session, user_id)
        installations = await db.installations.find_all()
"""

from inkwell.db.authorized import AuthorizedDb, RepoGrant, RepoSpec, authorized_db
from inkwell.db.connection import (
    async_session_factory,
    close_db,
    get_session,
    get_session_dependency,
    init_db,
)
from inkwell.db.models import (
    AccountType,
    Installation,
    Proposal,
    RepoAccess,
    User,
    UserSession,
)

__all__ = [
    # Connection
    "init_db",
    "close_db",
    "get_session",
    "get_session_dependency",
    "async_session_factory",
    # Scoped access
    "AuthorizedDb",
    "RepoGrant",
    "RepoSpec",
    "authorized_db",
    # Models
    "AccountType",
    "Installation",
    "Proposal",
    "RepoAccess",
    "User",
    "UserSession",
]
