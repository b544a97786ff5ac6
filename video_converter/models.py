"""SQLAlchemy 2.0 ORM models.

This module contains the SQLAlchemy models backing the worker's persisted
state. All models use the Mapped[type] annotation pattern required by
SQLAlchemy 2.0.

Tables:
    processed_videos: One row per successfully converted video (idempotency).
    processing_errors: Append-only log of failures, written for every failed
        task and never read back by the worker.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class ProcessedVideo(Base):
    """Processing record proving a video was converted successfully.

    The primary key on video_id is the idempotency guarantee: two workers
    racing on the same redelivered task cannot both insert a row. Presence
    of a row short-circuits any further processing of that video.

    Attributes:
        video_id: Identifier from the inbound task (primary key).
        path: Task directory the video was converted in.
        processed_at: Timestamp when the record was written (UTC).

    Note:
        Rows are never deleted by the worker.
    """

    __tablename__ = "processed_videos"

    video_id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
    )

    path: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"<ProcessedVideo(video_id={self.video_id}, path={self.path!r})>"


class ProcessingError(Base):
    """Error record for a failed task.

    Attributes:
        id: Internal UUID primary key.
        video_id: Identifier from the task, None when the message could not
            be decoded.
        error: Description of the failed stage (e.g. "Failed to merge chunks").
        details: Underlying error text, including captured transcoder output.
        occurred_at: When the failure happened (UTC).

    Indexes:
        - Index on video_id for looking up the failure history of a video
    """

    __tablename__ = "processing_errors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    video_id: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )

    error: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    details: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (Index("ix_processing_errors_video_id", "video_id"),)

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"<ProcessingError(id={self.id!s:.8}, video_id={self.video_id}, "
            f"error={self.error!r})>"
        )
