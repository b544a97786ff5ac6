"""PgQueuer entrypoint definitions for video conversion.

The task entrypoint is a thin adapter: it hands the job payload to the
VideoTaskHandler and translates the handler's outcome into PgQueuer's
acknowledgment semantics.

Acknowledgment:
    - COMPLETED / SKIPPED: the entrypoint returns normally, PgQueuer logs the
      job as successful.
    - FAILED / REJECTED: the entrypoint raises MessageNotAcknowledgedError,
      PgQueuer logs the job as failed. Redelivery, if any, is configured on
      the queue, not here.

References:
    - PgQueuer Documentation: https://pgqueuer.readthedocs.io/
"""

from pgqueuer import PgQueuer
from pgqueuer.models import Job

from video_converter.exceptions import MessageNotAcknowledgedError
from video_converter.services.task_handler import VideoTaskHandler
from video_converter.utils.logging import get_logger

log = get_logger(__name__)


def register_entrypoints(
    pgq: PgQueuer,
    handler: VideoTaskHandler,
    task_entrypoint: str = "convert_video",
    concurrency_limit: int = 1,
) -> None:
    """Register the video conversion entrypoint with a PgQueuer instance.

    Must be called after PgQueuer is initialized.

    Args:
        pgq: Initialized PgQueuer instance
        handler: Handler with its collaborators already wired
        task_entrypoint: Entrypoint (queue) name to consume
        concurrency_limit: Max jobs of this entrypoint running at once
    """

    @pgq.entrypoint(task_entrypoint, concurrency_limit=concurrency_limit)
    async def convert_video(job: Job) -> None:
        """Convert the video described by the job payload.

        Args:
            job: PgQueuer Job whose payload is a JSON VideoTask

        Raises:
            MessageNotAcknowledgedError: If the handler withheld acknowledgment
        """
        log.debug("job_claimed", pgqueuer_job_id=str(job.id), entrypoint=task_entrypoint)

        outcome = await handler.handle(job.payload)

        if not outcome.acknowledged:
            log.warning(
                "job_not_acknowledged",
                pgqueuer_job_id=str(job.id),
                outcome=outcome.value,
            )
            raise MessageNotAcknowledgedError(outcome.value)

        log.info(
            "job_acknowledged",
            pgqueuer_job_id=str(job.id),
            outcome=outcome.value,
        )

    log.info(
        "entrypoint_registered",
        entrypoint=task_entrypoint,
        concurrency_limit=concurrency_limit,
    )
