"""Worker process entry point for the video converter.

Each worker runs as an independent Python process consuming the task
entrypoint through PgQueuer. Any number of workers may run side by side;
PgQueuer's FOR UPDATE SKIP LOCKED claiming keeps them from sharing a job.

Architecture Pattern:
    - Explicit lifecycle: the SQLAlchemy engine and the asyncpg pool are
      opened at startup, injected into the handler, and closed at shutdown
    - Async Execution: ffmpeg runs in a thread, the event loop stays free
    - Graceful Shutdown: SIGTERM/SIGINT stop claiming, in-flight jobs finish

Usage:
    Local Development:
        python -m video_converter.worker

    Installed:
        video-converter-worker
"""

import asyncio
import shutil
import signal
import sys
from dataclasses import dataclass

import asyncpg
from dotenv import load_dotenv
from pgqueuer import PgQueuer
from sqlalchemy.ext.asyncio import AsyncEngine

from video_converter.config import (
    get_chunk_suffix,
    get_confirmation_entrypoint,
    get_database_url,
    get_ffmpeg_path,
    get_task_entrypoint,
    get_transcode_timeout,
    get_worker_concurrency,
    get_worker_id,
)
from video_converter.database import create_engine_and_session_factory
from video_converter.exceptions import ConfigurationError
from video_converter.utils.logging import get_logger

log = get_logger(__name__)

# Shutdown flag (set by SIGTERM handler)
shutdown_requested = False

# Process-wide resources, kept for cleanup in shutdown_worker()
pgq: PgQueuer | None = None
asyncpg_pool: asyncpg.Pool | None = None
sqlalchemy_engine: AsyncEngine | None = None


@dataclass
class WorkerConfig:
    """Worker configuration loaded from environment variables."""

    database_url: str
    ffmpeg_path: str
    transcode_timeout: int
    chunk_suffix: str
    task_entrypoint: str
    confirmation_entrypoint: str
    concurrency: int
    worker_id: str


def get_config() -> WorkerConfig:
    """Load and validate worker configuration.

    Returns:
        WorkerConfig populated from the environment.

    Raises:
        ConfigurationError: If DATABASE_URL is missing or ffmpeg is not found.
    """
    try:
        database_url = get_database_url()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    ffmpeg_path = get_ffmpeg_path()
    if shutil.which(ffmpeg_path) is None:
        raise ConfigurationError(f"Transcoder executable not found: {ffmpeg_path}")

    return WorkerConfig(
        database_url=database_url,
        ffmpeg_path=ffmpeg_path,
        transcode_timeout=get_transcode_timeout(),
        chunk_suffix=get_chunk_suffix(),
        task_entrypoint=get_task_entrypoint(),
        confirmation_entrypoint=get_confirmation_entrypoint(),
        concurrency=get_worker_concurrency(),
        worker_id=get_worker_id(),
    )


def signal_handler(signum: int, frame: object) -> None:
    """Handle SIGTERM/SIGINT for graceful shutdown.

    Stops PgQueuer from claiming new jobs; jobs already running finish.

    Args:
        signum: Signal number (typically SIGTERM = 15)
        frame: Current stack frame (unused)
    """
    global shutdown_requested
    log.info(
        "shutdown_signal_received",
        signal=signum,
        signal_name=signal.Signals(signum).name,
    )
    shutdown_requested = True
    if pgq is not None:
        pgq.shutdown.set()


async def worker_main_loop(config: WorkerConfig) -> None:
    """Wire the collaborators together and run the PgQueuer loop.

    Raises:
        asyncpg.PostgresError: If the queue database is unreachable
    """
    global pgq, asyncpg_pool, sqlalchemy_engine

    # Deferred so importing this module does not pull in the service layer
    from video_converter.entrypoints import register_entrypoints
    from video_converter.queue import create_queries, initialize_pgqueuer
    from video_converter.services.publisher import PgQueuerPublisher
    from video_converter.services.task_handler import VideoTaskHandler
    from video_converter.services.video_processor import VideoProcessor
    from video_converter.services.video_store import SqlAlchemyVideoStore

    log.info("worker_started", worker_id=config.worker_id)

    sqlalchemy_engine, session_factory = create_engine_and_session_factory(
        config.database_url
    )
    pgq, asyncpg_pool = await initialize_pgqueuer(config.database_url)

    handler = VideoTaskHandler(
        processor=VideoProcessor(
            ffmpeg_path=config.ffmpeg_path,
            transcode_timeout=config.transcode_timeout,
            chunk_suffix=config.chunk_suffix,
        ),
        store=SqlAlchemyVideoStore(session_factory),
        publisher=PgQueuerPublisher(
            create_queries(asyncpg_pool), config.confirmation_entrypoint
        ),
        worker_id=config.worker_id,
    )
    register_entrypoints(
        pgq,
        handler,
        task_entrypoint=config.task_entrypoint,
        concurrency_limit=config.concurrency,
    )

    if shutdown_requested:
        pgq.shutdown.set()

    await pgq.run()


async def shutdown_worker() -> None:
    """Close the asyncpg pool and dispose the SQLAlchemy engine."""
    global asyncpg_pool, sqlalchemy_engine

    log.info("closing_database_connections")

    if asyncpg_pool is not None:
        await asyncpg_pool.close()
        asyncpg_pool = None
        log.info("asyncpg_pool_closed")

    if sqlalchemy_engine is not None:
        await sqlalchemy_engine.dispose()
        sqlalchemy_engine = None
        log.info("sqlalchemy_engine_closed")

    log.info("database_connections_closed")


async def run_worker(config: WorkerConfig) -> None:
    """Run the worker until shutdown, always releasing connections."""
    try:
        await worker_main_loop(config)
    except asyncio.CancelledError:
        log.info("worker_cancelled", worker_id=config.worker_id)
        raise
    finally:
        await shutdown_worker()
        log.info("worker_shutdown", worker_id=config.worker_id)


def main() -> None:
    """Worker process entry point.

    Exit Codes:
        0: Successful shutdown (SIGTERM received)
        1: Fatal error (configuration invalid, database unreachable)
    """
    load_dotenv()

    try:
        config = get_config()
    except ConfigurationError as e:
        log.error("configuration_load_failed", error=str(e))
        sys.exit(1)

    # Redact credentials when logging
    database_host = (
        config.database_url.split("@")[-1].split("/")[0]
        if "@" in config.database_url
        else "local"
    )
    log.info(
        "worker_configuration_loaded",
        database_url_host=database_host,
        ffmpeg_path=config.ffmpeg_path,
        transcode_timeout=config.transcode_timeout,
        task_entrypoint=config.task_entrypoint,
        confirmation_entrypoint=config.confirmation_entrypoint,
        concurrency=config.concurrency,
    )

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        asyncio.run(run_worker(config))
    except KeyboardInterrupt:
        log.info("worker_interrupted_by_user")
    except Exception as e:
        log.error("worker_fatal_error", error=str(e), error_type=type(e).__name__, exc_info=True)
        sys.exit(1)

    log.info("worker_exited_successfully")


if __name__ == "__main__":
    main()
