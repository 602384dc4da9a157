"""initial schema

Revision ID: 1d4e7b2a9c10
Revises:
Create Date: 2026-10-18 09:12:00

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "1d4e7b2a9c10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users, sessions, installations, repo access and proposals."""
    op.create_table(
        "users",
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("github_user_id", sa.BigInteger(), nullable=False),
        sa.Column("login", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("avatar_url", sqlmodel.sql.sqltypes.AutoString(length=2048), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_github_user_id"), "users", ["github_user_id"], unique=True)

    op.create_table(
        "user_sessions",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("user_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_sessions_user_id"), "user_sessions", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_user_sessions_expires_at"), "user_sessions", ["expires_at"], unique=False
    )

    op.create_table(
        "installations",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("installation_id", sa.BigInteger(), nullable=False),
        sa.Column("account_login", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("account_type", sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column(
            "account_avatar", sqlmodel.sql.sqltypes.AutoString(length=2048), nullable=False
        ),
        sa.Column("user_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_installations_installation_id"),
        "installations",
        ["installation_id"],
        unique=True,
    )
    op.create_index(op.f("ix_installations_user_id"), "installations", ["user_id"], unique=False)

    op.create_table(
        "repo_access",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("installation_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("repo_id", sa.BigInteger(), nullable=False),
        sa.Column("repo_full_name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("repo_name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["installation_id"], ["installations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("installation_id", "repo_id"),
    )
    op.create_index(
        op.f("ix_repo_access_installation_id"), "repo_access", ["installation_id"], unique=False
    )
    op.create_index(
        op.f("ix_repo_access_repo_full_name"), "repo_access", ["repo_full_name"], unique=False
    )

    op.create_table(
        "proposals",
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("user_id", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("repo_full_name", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("pr_number", sa.Integer(), nullable=False),
        sa.Column("pr_url", sqlmodel.sql.sqltypes.AutoString(length=2048), nullable=False),
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(length=512), nullable=False),
        sa.Column("status", sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("repo_full_name", "pr_number"),
    )
    op.create_index(op.f("ix_proposals_user_id"), "proposals", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_proposals_repo_full_name"), "proposals", ["repo_full_name"], unique=False
    )


def downgrade() -> None:
    """Drop all Inkwell tables."""
    op.drop_index(op.f("ix_proposals_repo_full_name"), table_name="proposals")
    op.drop_index(op.f("ix_proposals_user_id"), table_name="proposals")
    op.drop_table("proposals")
    op.drop_index(op.f("ix_repo_access_repo_full_name"), table_name="repo_access")
    op.drop_index(op.f("ix_repo_access_installation_id"), table_name="repo_access")
    op.drop_table("repo_access")
    op.drop_index(op.f("ix_installations_user_id"), table_name="installations")
    op.drop_index(op.f("ix_installations_installation_id"), table_name="installations")
    op.drop_table("installations")
    op.drop_index(op.f("ix_user_sessions_expires_at"), table_name="user_sessions")
    op.drop_index(op.f("ix_user_sessions_user_id"), table_name="user_sessions")
    op.drop_table("user_sessions")
    op.drop_index(op.f("ix_users_github_user_id"), table_name="users")
    op.drop_table("users")
