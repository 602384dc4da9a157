"""User identity helpers (GitHub-backed)."""

from __future__ import annotations

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from inkwell.db.models import User


class GitHubUserIdentity(BaseModel):
    """Normalized subset of the GitHub user payload."""

    github_id: int = Field(..., alias="id")
    login: str
    avatar_url: str = ""


class UserManager:
    """Identity lookups and upserts used by the login callback."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_github_id(self, github_id: int) -> User | None:
        result = await self._session.execute(select(User).where(User.github_user_id == github_id))
        return result.scalar_one_or_none()

    async def upsert_from_github(self, identity: GitHubUserIdentity) -> User:
        """Create or update a user from a GitHub identity payload.

        Does not commit; caller controls transaction scope.
        """
        existing = await self.get_by_github_id(identity.github_id)
        if existing is None:
            user = User(
                github_user_id=identity.github_id,
                login=identity.login,
                avatar_url=identity.avatar_url or "",
            )
            self._session.add(user)
            await self._session.flush()
            return user

        existing.login = identity.login
        existing.avatar_url = identity.avatar_url or existing.avatar_url
        await self._session.flush()
        return existing
