"""001 processed videos and processing errors

Revision ID: 001_processed_videos
Revises:
Create Date: 2026-10-17

Creates the idempotency table (one row per converted video, keyed by
video_id) and the append-only error record table.
"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_processed_videos"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create processed_videos and processing_errors tables."""
    op.create_table(
        "processed_videos",
        sa.Column("video_id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("path", sa.Text(), nullable=False),
        sa.Column(
            "processed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("video_id", name="pk_processed_videos"),
    )

    op.create_table(
        "processing_errors",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("video_id", sa.BigInteger(), nullable=True),
        sa.Column("error", sa.String(255), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column(
            "occurred_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_processing_errors"),
    )
    op.create_index(
        "ix_processing_errors_video_id", "processing_errors", ["video_id"], unique=False
    )


def downgrade() -> None:
    """Drop processing_errors and processed_videos tables."""
    op.drop_index("ix_processing_errors_video_id", table_name="processing_errors")
    op.drop_table("processing_errors")
    op.drop_table("processed_videos")
