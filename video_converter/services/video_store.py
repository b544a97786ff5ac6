"""Processed-state and error-record persistence.

This module is the worker's persistence collaborator. It answers "was this
video already converted?", records successful conversions, and appends error
records for failures.

Idempotency:
    processed_videos.video_id is the primary key. When two workers race on a
    redelivered task, the second insert raises IntegrityError; mark_processed()
    reports that as "already recorded" instead of an error.

Transactions:
    Every operation opens its own short transaction. Sessions are never held
    across the merge/transcode work.

Usage:
    store = SqlAlchemyVideoStore(session_factory)
    if not await store.is_processed(42):
        ...
        await store.mark_processed(42, "/data/42")
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from video_converter.exceptions import PersistenceError
from video_converter.models import ProcessedVideo, ProcessingError, utcnow
from video_converter.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class ErrorDetails:
    """Context of a failed task, as logged and persisted.

    Attributes:
        video_id: Task identifier, None if the message could not be decoded
        message: Description of the failed stage
        details: Underlying error text
        occurred_at: When the failure happened (UTC)
    """

    video_id: int | None
    message: str
    details: str
    occurred_at: datetime = field(default_factory=utcnow)

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "video_id": self.video_id,
            "error": self.message,
            "details": self.details,
            "time": self.occurred_at.isoformat(),
        }


class VideoStore(Protocol):
    """Persistence operations the task handler depends on."""

    async def is_processed(self, video_id: int) -> bool: ...

    async def mark_processed(self, video_id: int, path: str) -> bool: ...

    async def register_error(self, details: ErrorDetails, error: BaseException) -> None: ...


class SqlAlchemyVideoStore:
    """VideoStore backed by the processed_videos and processing_errors tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def is_processed(self, video_id: int) -> bool:
        """Check whether a processing record exists for video_id.

        Raises:
            PersistenceError: If the lookup fails
        """
        try:
            async with self._session_factory() as session:
                record = await session.get(ProcessedVideo, video_id)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"failed to check processed state for video {video_id}: {e}",
                stage="Failed to check processed state",
            ) from e
        return record is not None

    async def mark_processed(self, video_id: int, path: str) -> bool:
        """Write the processing record for video_id.

        Returns:
            True if this call created the record, False if it already existed

        Raises:
            PersistenceError: If the insert fails for any other reason
        """
        try:
            async with self._session_factory() as session, session.begin():
                session.add(ProcessedVideo(video_id=video_id, path=path))
        except IntegrityError:
            log.info("processed_record_already_exists", video_id=video_id)
            return False
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"failed to mark video {video_id} as processed: {e}",
                stage="Failed to mark video as processed",
            ) from e
        return True

    async def register_error(self, details: ErrorDetails, error: BaseException) -> None:
        """Append an error record.

        The underlying error's type is prefixed to the stored details so the
        record is useful without the logs.

        Raises:
            PersistenceError: If the insert fails
        """
        record = ProcessingError(
            video_id=details.video_id,
            error=details.message[:255],
            details=f"{type(error).__name__}: {details.details}",
            occurred_at=details.occurred_at,
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(record)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"failed to register error for video {details.video_id}: {e}",
                stage="Failed to register error",
            ) from e
