"""Task handler for inbound video conversion messages.

This module owns the lifecycle of a single message: decode it, skip it if the
video was already converted, run the processing pipeline, record the result
and publish the confirmation.

State machine per message:
    received → already processed → SKIPPED (acknowledged)
    received → processing → recorded → confirmed → COMPLETED (acknowledged)
    received → processing → failed → error recorded → FAILED (not acknowledged)
    received → undecodable → error recorded → REJECTED (not acknowledged)

Ordering (CRITICAL):
    process fully → mark processed → publish confirmation → acknowledge.
    If the processing record cannot be written, nothing is acknowledged or
    published, so a redelivery repeats the work instead of losing the
    confirmation. Once the record exists, a redelivery is a no-op.

Error Handling:
    Every failure is logged with video_id, stage, details and timestamp, and
    best-effort persisted as an error record. Nothing is retried here;
    redelivery is the queue's decision.

Usage:
    handler = VideoTaskHandler(processor=processor, store=store, publisher=publisher)
    outcome = await handler.handle(job.payload)
    if not outcome.acknowledged:
        ...
"""

import enum

from pydantic import ValidationError

from video_converter.exceptions import MessageDecodeError, VideoWorkerError
from video_converter.schemas import VideoConvertedEvent, VideoTask
from video_converter.services.publisher import ConfirmationPublisher
from video_converter.services.video_processor import VideoProcessor
from video_converter.services.video_store import ErrorDetails, VideoStore
from video_converter.utils.logging import get_logger

log = get_logger(__name__)


class HandleOutcome(enum.Enum):
    """Result of handling one message."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    REJECTED = "rejected"

    @property
    def acknowledged(self) -> bool:
        """Whether the message should be acknowledged to the queue."""
        return self in (HandleOutcome.COMPLETED, HandleOutcome.SKIPPED)


def decode_task(raw_message: bytes | str | None) -> VideoTask:
    """Deserialize a message body into a VideoTask.

    Raises:
        MessageDecodeError: If the body is empty, not JSON, or fails validation
    """
    if not raw_message:
        raise MessageDecodeError("message body is empty")
    try:
        return VideoTask.model_validate_json(raw_message)
    except ValidationError as e:
        raise MessageDecodeError(f"invalid task message: {e}") from e


class VideoTaskHandler:
    """Handle inbound video tasks with idempotency.

    Collaborators are injected so the worker controls their lifecycle.

    Args:
        processor: Pipeline that converts the task's chunks
        store: Processed-state and error-record persistence
        publisher: Confirmation event publisher
        worker_id: Worker name included in logs
    """

    def __init__(
        self,
        processor: VideoProcessor,
        store: VideoStore,
        publisher: ConfirmationPublisher,
        worker_id: str = "worker-local",
    ) -> None:
        self._processor = processor
        self._store = store
        self._publisher = publisher
        self._worker_id = worker_id

    async def handle(self, raw_message: bytes | str | None) -> HandleOutcome:
        """Handle one message end to end.

        Never raises for task-level failures; the returned outcome tells the
        caller whether to acknowledge.
        """
        try:
            task = decode_task(raw_message)
        except MessageDecodeError as e:
            await self._record_failure(None, e)
            return HandleOutcome.REJECTED

        log.info(
            "task_received",
            worker_id=self._worker_id,
            video_id=task.video_id,
            path=task.path,
        )

        try:
            already_processed = await self._store.is_processed(task.video_id)
        except VideoWorkerError as e:
            await self._record_failure(task.video_id, e)
            return HandleOutcome.FAILED

        if already_processed:
            log.info("video_already_processed", video_id=task.video_id, path=task.path)
            return HandleOutcome.SKIPPED

        try:
            result = await self._processor.process(task)
        except Exception as e:
            await self._record_failure(task.video_id, e)
            return HandleOutcome.FAILED

        try:
            created = await self._store.mark_processed(task.video_id, task.path)
        except VideoWorkerError as e:
            await self._record_failure(task.video_id, e)
            return HandleOutcome.FAILED

        if not created:
            # Another worker recorded it first and owns the confirmation
            log.warning("video_processed_concurrently", video_id=task.video_id)
            return HandleOutcome.SKIPPED

        try:
            await self._publisher.publish(VideoConvertedEvent.from_task(task))
        except VideoWorkerError as e:
            await self._record_failure(task.video_id, e)
            return HandleOutcome.FAILED

        log.info(
            "task_completed",
            worker_id=self._worker_id,
            video_id=task.video_id,
            manifest=str(result.manifest_path),
            chunk_count=result.chunk_count,
            duration_seconds=result.duration_seconds,
        )
        return HandleOutcome.COMPLETED

    async def _record_failure(self, video_id: int | None, error: Exception) -> None:
        """Log the failure and persist an error record, best-effort."""
        details = ErrorDetails(
            video_id=video_id,
            message=getattr(error, "stage", VideoWorkerError.stage),
            details=str(error),
        )
        log.error(
            "processing_error",
            worker_id=self._worker_id,
            error_type=type(error).__name__,
            exc_info=not isinstance(error, VideoWorkerError),
            **details.to_log_dict(),
        )

        try:
            await self._store.register_error(details, error)
        except Exception as e:
            # The first failure already decides the outcome
            log.error(
                "error_record_failed",
                worker_id=self._worker_id,
                video_id=video_id,
                error=str(e),
                error_type=type(e).__name__,
            )
