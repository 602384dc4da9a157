"""Owner-scoped data access.

All database access for user-owned data from request handlers goes through
this layer. Every statement issued here is predicated on the owner id the
accessor was built with, so cross-tenant reads are unreachable from routes.

Usage in API routes:
    db = authorized_db(session, principal.id)
    installations = await db.installations.find_all()  # scoped to principal
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from inkwell.db.models import AccountType, Installation, Proposal, RepoAccess, utcnow_naive
from inkwell.errors import AuthorizationError, InternalError

log = structlog.get_logger()


class _Scoped:
    """Shared plumbing: owner id, session, and storage-error translation."""

    resource = "resource"

    def __init__(self, session: AsyncSession, owner_id: str) -> None:
        self._session = session
        self.owner_id = owner_id

    def _storage_failure(self, op: str, exc: SQLAlchemyError) -> InternalError:
        log.error(
            "Scoped query failed",
            resource=self.resource,
            op=op,
            owner_id=self.owner_id,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return InternalError()

    async def _all(self, op: str, stmt: Any) -> list[Any]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._storage_failure(op, e) from e
        return list(result.scalars().all())

    async def _first(self, op: str, stmt: Any) -> Any | None:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._storage_failure(op, e) from e
        return result.scalars().first()

    async def _flush(self, op: str) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            raise self._storage_failure(op, e) from e


# =============================================================================
# Installations
# =============================================================================


class AuthorizedInstallations(_Scoped):
    resource = "installation"

    async def find_all(self) -> list[Installation]:
        """Installations owned by this user. Callers must not rely on ordering."""
        stmt = select(Installation).where(Installation.user_id == self.owner_id)
        return await self._all("find_all", stmt)

    async def find_by_installation_id(self, installation_id: int) -> Installation | None:
        stmt = select(Installation).where(
            Installation.installation_id == installation_id,
            Installation.user_id == self.owner_id,
        )
        return await self._first("find_by_installation_id", stmt)

    async def upsert(
        self,
        *,
        installation_id: int,
        account_login: str,
        account_type: AccountType | str,
        account_avatar: str,
    ) -> Installation:
        """Create or refresh an installation for this user.

        Raises AuthorizationError if the installation is linked to another user.
        """
        # Unscoped on purpose: detects takeover attempts, never returned to callers
        existing = await self._first(
            "upsert",
            select(Installation).where(Installation.installation_id == installation_id),
        )
        if existing is not None and existing.user_id != self.owner_id:
            log.warning(
                "Refused installation takeover",
                installation_id=installation_id,
                owner_id=self.owner_id,
            )
            raise AuthorizationError("This installation is already linked to another account")

        if existing is None:
            existing = Installation(installation_id=installation_id, user_id=self.owner_id)
            self._session.add(existing)
        existing.account_login = account_login
        existing.account_type = str(account_type)
        existing.account_avatar = account_avatar
        await self._flush("upsert")
        return existing

    async def delete(self, installation_id: int) -> None:
        try:
            await self._session.execute(
                delete(Installation).where(
                    Installation.installation_id == installation_id,
                    Installation.user_id == self.owner_id,
                )
            )
        except SQLAlchemyError as e:
            raise self._storage_failure("delete", e) from e


# =============================================================================
# Repository access
# =============================================================================


@dataclass(frozen=True)
class RepoGrant:
    repo: RepoAccess
    installation: Installation


@dataclass(frozen=True)
class RepoSpec:
    repo_id: int
    repo_full_name: str
    repo_name: str
    is_private: bool = False


class AuthorizedRepos(_Scoped):
    resource = "repo_access"

    def _base(self) -> Any:
        return (
            select(RepoAccess, Installation)
            .join(Installation, RepoAccess.installation_id == Installation.id)
            .where(Installation.user_id == self.owner_id)
        )

    async def _grants(self, op: str, stmt: Any) -> list[RepoGrant]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise self._storage_failure(op, e) from e
        return [RepoGrant(repo=repo, installation=inst) for repo, inst in result.all()]

    async def find_all(self) -> list[RepoGrant]:
        return await self._grants("find_all", self._base())

    async def find_by_full_name(self, repo_full_name: str) -> RepoGrant | None:
        grants = await self._grants(
            "find_by_full_name",
            self._base().where(RepoAccess.repo_full_name == repo_full_name).limit(1),
        )
        return grants[0] if grants else None

    async def check_access(self, repo_full_name: str) -> int | None:
        """GitHub installation id granting access to the repo, if any."""
        grant = await self.find_by_full_name(repo_full_name)
        return grant.installation.installation_id if grant else None

    async def require_access(self, repo_full_name: str) -> RepoGrant:
        grant = await self.find_by_full_name(repo_full_name)
        if grant is None:
            raise AuthorizationError(f"Access denied to repository: {repo_full_name}")
        return grant

    async def sync_for_installation(self, installation_id: int, repos: Sequence[RepoSpec]) -> None:
        """Make the stored repo list for one of this user's installations match `repos`."""
        installation = await self._first(
            "sync_for_installation",
            select(Installation).where(
                Installation.installation_id == installation_id,
                Installation.user_id == self.owner_id,
            ),
        )
        if installation is None:
            raise AuthorizationError("Cannot sync repos for an installation you do not own")

        current = {
            r.repo_id: r
            for r in await self._all(
                "sync_for_installation",
                select(RepoAccess).where(RepoAccess.installation_id == installation.id),
            )
        }
        wanted = {spec.repo_id for spec in repos}

        stale = [repo_id for repo_id in current if repo_id not in wanted]
        if stale:
            try:
                await self._session.execute(
                    delete(RepoAccess).where(
                        RepoAccess.installation_id == installation.id,
                        RepoAccess.repo_id.in_(stale),  # type: ignore[attr-defined]
                    )
                )
            except SQLAlchemyError as e:
                raise self._storage_failure("sync_for_installation", e) from e

        for spec in repos:
            row = current.get(spec.repo_id)
            if row is None:
                row = RepoAccess(installation_id=installation.id, repo_id=spec.repo_id)
                self._session.add(row)
            row.repo_full_name = spec.repo_full_name
            row.repo_name = spec.repo_name
            row.is_private = spec.is_private
        await self._flush("sync_for_installation")


# =============================================================================
# Proposals
# =============================================================================


class AuthorizedProposals(_Scoped):
    resource = "proposal"

    async def find_all(self) -> list[Proposal]:
        stmt = (
            select(Proposal)
            .where(Proposal.user_id == self.owner_id)
            .order_by(Proposal.created_at.desc())  # type: ignore[attr-defined]
        )
        return await self._all("find_all", stmt)

    async def find_by_repo(self, repo_full_name: str) -> list[Proposal]:
        stmt = (
            select(Proposal)
            .where(Proposal.user_id == self.owner_id, Proposal.repo_full_name == repo_full_name)
            .order_by(Proposal.created_at.desc())  # type: ignore[attr-defined]
        )
        return await self._all("find_by_repo", stmt)

    async def find_by_pr(self, repo_full_name: str, pr_number: int) -> Proposal | None:
        stmt = select(Proposal).where(
            Proposal.user_id == self.owner_id,
            Proposal.repo_full_name == repo_full_name,
            Proposal.pr_number == pr_number,
        )
        return await self._first("find_by_pr", stmt)

    async def create(
        self, *, repo_full_name: str, pr_number: int, pr_url: str, title: str, status: str
    ) -> Proposal:
        proposal = Proposal(
            user_id=self.owner_id,
            repo_full_name=repo_full_name,
            pr_number=pr_number,
            pr_url=pr_url,
            title=title,
            status=status,
        )
        self._session.add(proposal)
        await self._flush("create")
        return proposal

    async def update_status(
        self, repo_full_name: str, pr_number: int, status: str
    ) -> Proposal | None:
        proposal = await self.find_by_pr(repo_full_name, pr_number)
        if proposal is None:
            return None
        proposal.status = status
        proposal.updated_at = utcnow_naive()
        await self._flush("update_status")
        return proposal


# =============================================================================
# Entry point
# =============================================================================


class AuthorizedDb:
    """Data access handle pre-bound to a single owner."""

    def __init__(self, session: AsyncSession, owner_id: str) -> None:
        if not owner_id:
            raise ValueError("owner_id is required for scoped data access")
        self.owner_id = owner_id
        self.installations = AuthorizedInstallations(session, owner_id)
        self.repos = AuthorizedRepos(session, owner_id)
        self.proposals = AuthorizedProposals(session, owner_id)


def authorized_db(session: AsyncSession, owner_id: str) -> AuthorizedDb:
    return AuthorizedDb(session, owner_id)
