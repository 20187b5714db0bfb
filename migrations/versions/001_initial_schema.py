"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18

Categories, announcements with their publication schedule, and the
append-only announcement revision history.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Categories table
    op.create_table(
        "categories",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    # Announcements table
    op.create_table(
        "announcements",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("image_path", sa.String(), nullable=True),
        sa.Column("category_id", sa.String(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("takedown_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False),
        sa.Column("is_hero", sa.Boolean(), nullable=False),
        sa.Column("draft_content", sa.Text(), nullable=True),
        sa.Column("draft_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["category_id"], ["categories.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index(
        "ix_announcements_is_published", "announcements", ["is_published"]
    )
    op.create_index(
        "ix_announcements_scheduled_at", "announcements", ["scheduled_at"]
    )
    op.create_index("ix_announcements_takedown_at", "announcements", ["takedown_at"])
    op.create_index("ix_announcements_created_at", "announcements", ["created_at"])

    # Announcement revisions table
    op.create_table(
        "announcement_revisions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("announcement_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("image_path", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("change_type", sa.String(), nullable=False),
        sa.Column("change_summary", sa.String(), nullable=True),
        sa.Column("author_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["announcement_id"], ["announcements.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "announcement_id", "version", name="uq_announcement_revisions_version"
        ),
    )
    op.create_index(
        "ix_announcement_revisions_announcement_id",
        "announcement_revisions",
        ["announcement_id"],
    )
    op.create_index(
        "ix_announcement_revisions_created_at",
        "announcement_revisions",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_announcement_revisions_created_at", table_name="announcement_revisions"
    )
    op.drop_index(
        "ix_announcement_revisions_announcement_id",
        table_name="announcement_revisions",
    )
    op.drop_table("announcement_revisions")

    op.drop_index("ix_announcements_created_at", table_name="announcements")
    op.drop_index("ix_announcements_takedown_at", table_name="announcements")
    op.drop_index("ix_announcements_scheduled_at", table_name="announcements")
    op.drop_index("ix_announcements_is_published", table_name="announcements")
    op.drop_table("announcements")

    op.drop_table("categories")
