"""create items and vote counter tables

Revision ID: a41c7e9b20d3
Revises:
Create Date: 2025-11-10 09:00:00.000000
"""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "a41c7e9b20d3"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=512), nullable=False, server_default=""),
        sa.Column(
            "item_type",
            sa.String(length=32),
            nullable=False,
            server_default="post",
        ),
        sa.Column(
            "status",
            sa.String(length=32),
            nullable=False,
            server_default="draft",
        ),
    )
    op.create_index("ix_items_item_type", "items", ["item_type"])
    op.create_index("ix_items_status", "items", ["status"])

    op.create_table(
        "vote_counters",
        sa.Column("item_id", sa.String(length=64), primary_key=True),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint(
            "upvotes >= 0", name="ck_vote_counters_upvotes_non_negative"
        ),
        sa.CheckConstraint(
            "downvotes >= 0", name="ck_vote_counters_downvotes_non_negative"
        ),
    )


def downgrade() -> None:
    op.drop_table("vote_counters")
    op.drop_index("ix_items_status", table_name="items")
    op.drop_index("ix_items_item_type", table_name="items")
    op.drop_table("items")
