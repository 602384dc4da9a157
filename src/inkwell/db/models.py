"""SQLModel schemas for Inkwell PostgreSQL storage.

Architecture:
- User: GitHub identity of someone who signed in
- UserSession: server-side session row referenced by the `__session` cookie
- Installation: GitHub App installation owned by a user
- RepoAccess: repositories reachable through an installation
- Proposal: pull requests a user opened through the editor
"""

from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from sqlalchemy import BigInteger, UniqueConstraint
from sqlmodel import Field, SQLModel


def utcnow_naive() -> datetime:
    """Get current UTC time as naive datetime (for TIMESTAMP WITHOUT TIME ZONE)."""
    return datetime.now(UTC).replace(tzinfo=None)


def new_id() -> str:
    return uuid4().hex


class AccountType(StrEnum):
    """GitHub account kind an installation is attached to."""

    USER = "User"
    ORGANIZATION = "Organization"


# =============================================================================
# Base Model
# =============================================================================


class TimestampMixin(SQLModel):
    """Mixin for created/updated timestamps."""

    created_at: datetime = Field(
        default_factory=utcnow_naive,
        description="When this record was created",
    )
    updated_at: datetime = Field(
        default_factory=utcnow_naive,
        description="When this record was last updated",
        sa_column_kwargs={"onupdate": utcnow_naive},
    )


# =============================================================================
# Identity
# =============================================================================


class User(TimestampMixin, table=True):
    """A GitHub-backed user identity."""

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    github_user_id: int = Field(
        sa_type=BigInteger, index=True, unique=True, description="GitHub numeric user id"
    )
    login: str = Field(max_length=255, description="GitHub login")
    avatar_url: str = Field(default="", max_length=2048, description="GitHub avatar URL")

    def __repr__(self) -> str:
        return f"<User login={self.login!r}>"


class UserSession(SQLModel, table=True):
    """Browser login session. The id is the secret half of the session cookie."""

    __tablename__ = "user_sessions"

    id: str = Field(primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow_naive)
    last_seen_at: datetime = Field(default_factory=utcnow_naive)


# =============================================================================
# Owner-scoped resources
# =============================================================================


class Installation(SQLModel, table=True):
    """A GitHub App installation linked to exactly one Inkwell user."""

    __tablename__ = "installations"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    installation_id: int = Field(
        sa_type=BigInteger, index=True, unique=True, description="GitHub installation id"
    )
    account_login: str = Field(max_length=255)
    account_type: str = Field(max_length=32, description="User or Organization")
    account_avatar: str = Field(default="", max_length=2048)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utcnow_naive)


class RepoAccess(SQLModel, table=True):
    """A repository reachable through an installation."""

    __tablename__ = "repo_access"
    __table_args__ = (UniqueConstraint("installation_id", "repo_id"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    installation_id: str = Field(foreign_key="installations.id", index=True, ondelete="CASCADE")
    repo_id: int = Field(sa_type=BigInteger)
    repo_full_name: str = Field(max_length=255, index=True)
    repo_name: str = Field(max_length=255)
    is_private: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow_naive)


class Proposal(TimestampMixin, table=True):
    """A pull request opened from the editor."""

    __tablename__ = "proposals"
    __table_args__ = (UniqueConstraint("repo_full_name", "pr_number"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    repo_full_name: str = Field(max_length=255, index=True)
    pr_number: int
    pr_url: str = Field(max_length=2048)
    title: str = Field(max_length=512)
    status: str = Field(max_length=32)
