"""Confirmation event publishing.

After a task is converted and its processing record is written, the worker
announces it by enqueueing a VideoConvertedEvent on the confirmation
entrypoint. Downstream consumers (the API that flips the video to "ready")
register a PgQueuer entrypoint with the same name.

Usage:
    publisher = PgQueuerPublisher(Queries(driver), "video_converted")
    await publisher.publish(VideoConvertedEvent(video_id=42, path="/data/42"))
"""

from typing import Protocol

from pgqueuer.queries import Queries

from video_converter.exceptions import PublishError
from video_converter.schemas import VideoConvertedEvent
from video_converter.utils.logging import get_logger

log = get_logger(__name__)


class ConfirmationPublisher(Protocol):
    """Messaging operation the task handler depends on."""

    async def publish(self, event: VideoConvertedEvent) -> None: ...


class PgQueuerPublisher:
    """Publish confirmation events as PgQueuer jobs.

    Args:
        queries: PgQueuer query interface bound to the worker's connection pool
        entrypoint: Entrypoint name confirmations are enqueued on
    """

    def __init__(self, queries: Queries, entrypoint: str) -> None:
        self._queries = queries
        self.entrypoint = entrypoint

    async def publish(self, event: VideoConvertedEvent) -> None:
        """Enqueue the event as a JSON payload.

        Raises:
            PublishError: If the job cannot be enqueued
        """
        payload = event.model_dump_json().encode()
        try:
            job_ids = await self._queries.enqueue(self.entrypoint, payload)
        except Exception as e:
            raise PublishError(
                f"failed to publish confirmation for video {event.video_id}: {e}"
            ) from e

        log.info(
            "confirmation_published",
            video_id=event.video_id,
            entrypoint=self.entrypoint,
            job_ids=[str(job_id) for job_id in job_ids],
        )
