"""
Create websites, boards, board_items and waitlist_entries tables.

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-12 18:04:51.117203
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _timestamp_indexes(table: str) -> None:
    op.create_index(op.f(f"ix_{table}_created_at"), table, ["created_at"], unique=False)
    op.create_index(op.f(f"ix_{table}_updated_at"), table, ["updated_at"], unique=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "websites",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "canonical_url",
            sa.Text(),
            nullable=False,
            comment="Homepage-normalized URL, e.g. 'https://notion.so/'",
        ),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column(
            "origin",
            sa.String(length=255),
            nullable=False,
            comment="Hostname without leading 'www.'",
        ),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("categories", sa.JSON(), nullable=False),
        sa.Column("favicon_url", sa.Text(), nullable=True),
        sa.Column("og_image_url", sa.Text(), nullable=True),
        sa.Column("save_count", sa.Integer(), nullable=False),
        sa.Column("public_save_count", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_websites_canonical_url"), "websites", ["canonical_url"], unique=True)
    op.create_index(op.f("ix_websites_slug"), "websites", ["slug"], unique=True)
    op.create_index(op.f("ix_websites_save_count"), "websites", ["save_count"], unique=False)
    op.create_index(
        op.f("ix_websites_public_save_count"), "websites", ["public_save_count"], unique=False,
    )
    _timestamp_indexes("websites")

    op.create_table(
        "boards",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "owner_key",
            sa.String(length=200),
            nullable=False,
            comment="Opaque owner identifier supplied by the client",
        ),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_key", "slug", name="uq_boards_owner_key_slug"),
    )
    op.create_index(op.f("ix_boards_owner_key"), "boards", ["owner_key"], unique=False)
    op.create_index(op.f("ix_boards_slug"), "boards", ["slug"], unique=False)
    _timestamp_indexes("boards")

    op.create_table(
        "board_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_key", sa.String(length=200), nullable=False),
        sa.Column("board_id", sa.Uuid(), nullable=False),
        sa.Column("website_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["board_id"], ["boards.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["website_id"], ["websites.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "owner_key", "website_id", name="uq_board_items_owner_key_website_id",
        ),
    )
    op.create_index(op.f("ix_board_items_owner_key"), "board_items", ["owner_key"], unique=False)
    op.create_index(op.f("ix_board_items_board_id"), "board_items", ["board_id"], unique=False)
    op.create_index(
        op.f("ix_board_items_website_id"), "board_items", ["website_id"], unique=False,
    )

    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column(
            "source",
            sa.String(length=100),
            nullable=True,
            comment="Where the signup came from, e.g. 'landing', 'cta-footer'",
        ),
        sa.Column(
            "ref",
            sa.String(length=32),
            nullable=True,
            comment="Referral code of the entry that invited this one",
        ),
        sa.Column("referral_code", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_waitlist_entries_email"), "waitlist_entries", ["email"], unique=True)
    op.create_index(
        op.f("ix_waitlist_entries_referral_code"),
        "waitlist_entries",
        ["referral_code"],
        unique=True,
    )
    _timestamp_indexes("waitlist_entries")


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("waitlist_entries")
    op.drop_table("board_items")
    op.drop_table("boards")
    op.drop_table("websites")
