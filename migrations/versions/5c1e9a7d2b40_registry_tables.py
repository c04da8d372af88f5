"""registry tables

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-18 09:12:40.318554

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the record, vote, submitter and event tables."""
    op.create_table(
        "intel_record",
        sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("submitter", sa.Text(), nullable=False),
        sa.Column("content_ref", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False),
        sa.Column("downvotes", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.CheckConstraint("upvotes >= 0", name="ck_intel_record_upvotes"),
        sa.CheckConstraint("downvotes >= 0", name="ck_intel_record_downvotes"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_intel_record_active_id", "intel_record", ["active", "id"])
    op.create_index("ix_intel_record_submitter", "intel_record", ["submitter"])

    op.create_table(
        "record_vote",
        sa.Column("record_id", sa.BigInteger(), nullable=False),
        sa.Column("voter", sa.Text(), nullable=False),
        sa.Column("is_upvote", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["record_id"], ["intel_record.id"]),
        sa.PrimaryKeyConstraint("record_id", "voter"),
    )
    op.create_index("ix_record_vote_record_id", "record_vote", ["record_id"])

    op.create_table(
        "submitter_stats",
        sa.Column("identity", sa.Text(), nullable=False),
        sa.Column("submission_count", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("identity"),
    )

    op.create_table(
        "registry_event",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_type", sa.Text(), nullable=False),
        sa.Column("event_hash", sa.CHAR(length=64), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("status", sa.VARCHAR(length=20), nullable=False),
        sa.Column("retry_count", sa.SmallInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_hash"),
    )


def downgrade() -> None:
    """Drop all registry tables."""
    op.drop_table("registry_event")
    op.drop_table("submitter_stats")
    op.drop_index("ix_record_vote_record_id", table_name="record_vote")
    op.drop_table("record_vote")
    op.drop_index("ix_intel_record_submitter", table_name="intel_record")
    op.drop_index("ix_intel_record_active_id", table_name="intel_record")
    op.drop_table("intel_record")
