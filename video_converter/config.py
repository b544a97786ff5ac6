"""Configuration management for the video converter worker.

This module provides centralized configuration loading from environment variables.
Values are read on call; the database URL is cached.

Environment Variables:
    DATABASE_URL: PostgreSQL connection URL (required)
    FFMPEG_PATH: Transcoder executable (default: "ffmpeg")
    TRANSCODE_TIMEOUT_SECONDS: Transcoder timeout (default: 3600)
    CHUNK_SUFFIX: Filename suffix of uploaded chunks (default: ".chunk")
    TASK_ENTRYPOINT: PgQueuer entrypoint consumed by the worker (default: "convert_video")
    CONFIRMATION_ENTRYPOINT: PgQueuer entrypoint for confirmations (default: "video_converted")
    WORKER_CONCURRENCY: Parallel tasks per worker process (default: 1)
    WORKER_ID: Worker name used in logs (default: "worker-local")
    LOG_LEVEL: Logging level (default: "INFO")

Usage:
    from video_converter.config import get_database_url, get_transcode_timeout

    db_url = get_database_url()  # Raises if DATABASE_URL not set
    timeout = get_transcode_timeout()
"""

import logging
import os
from functools import lru_cache

import structlog

log = structlog.get_logger(__name__)

DEFAULT_FFMPEG_PATH = "ffmpeg"
DEFAULT_TRANSCODE_TIMEOUT = 3600  # 1 hour, long uploads on a single core
DEFAULT_CHUNK_SUFFIX = ".chunk"
DEFAULT_TASK_ENTRYPOINT = "convert_video"
DEFAULT_CONFIRMATION_ENTRYPOINT = "video_converted"
DEFAULT_WORKER_CONCURRENCY = 1


def _get_clamped_int(name: str, default: int, minimum: int, maximum: int) -> int:
    """Read an integer env var, clamped to [minimum, maximum].

    Invalid values log a warning and fall back to the default.
    """
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("invalid_integer_setting", name=name, value=raw, using_default=default)
        return default
    return max(minimum, min(maximum, value))


@lru_cache
def get_database_url() -> str:
    """Get database URL from environment.

    Converts postgresql:// to postgresql+asyncpg:// for async SQLAlchemy.

    Environment Variable:
        DATABASE_URL: PostgreSQL connection URL

    Returns:
        Database URL with asyncpg driver.

    Raises:
        ValueError: If DATABASE_URL not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise ValueError("DATABASE_URL environment variable is required")

    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def get_ffmpeg_path() -> str:
    """Get transcoder executable from environment.

    Environment Variable:
        FFMPEG_PATH: Executable name or absolute path (default: "ffmpeg")
    """
    return os.getenv("FFMPEG_PATH") or DEFAULT_FFMPEG_PATH


def get_transcode_timeout() -> int:
    """Get transcoder timeout in seconds.

    Environment Variable:
        TRANSCODE_TIMEOUT_SECONDS: Timeout (default: 3600)

    Returns:
        Timeout in seconds (minimum 1, maximum 86400).
    """
    return _get_clamped_int("TRANSCODE_TIMEOUT_SECONDS", DEFAULT_TRANSCODE_TIMEOUT, 1, 86400)


def get_chunk_suffix() -> str:
    """Get the filename suffix identifying uploaded chunks.

    Environment Variable:
        CHUNK_SUFFIX: Suffix including the dot (default: ".chunk")
    """
    return os.getenv("CHUNK_SUFFIX") or DEFAULT_CHUNK_SUFFIX


def get_task_entrypoint() -> str:
    """Get the PgQueuer entrypoint name the worker consumes."""
    return os.getenv("TASK_ENTRYPOINT") or DEFAULT_TASK_ENTRYPOINT


def get_confirmation_entrypoint() -> str:
    """Get the PgQueuer entrypoint name confirmations are published to."""
    return os.getenv("CONFIRMATION_ENTRYPOINT") or DEFAULT_CONFIRMATION_ENTRYPOINT


def get_worker_concurrency() -> int:
    """Get max parallel tasks per worker process.

    Environment Variable:
        WORKER_CONCURRENCY: Parallel tasks (default: 1)

    Returns:
        Concurrency limit (minimum 1, maximum 32).

    Note:
        Each task runs one ffmpeg process, so this is effectively the number
        of concurrent transcodes on the host.
    """
    return _get_clamped_int("WORKER_CONCURRENCY", DEFAULT_WORKER_CONCURRENCY, 1, 32)


def get_worker_id() -> str:
    """Get worker name used in structured logs."""
    return os.getenv("WORKER_ID", "worker-local")


def get_log_level() -> int:
    """Get logging level from environment.

    Environment Variable:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)

    Returns:
        Numeric logging level. Unknown names fall back to INFO.
    """
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        log.warning("invalid_log_level", value=name, using_default="INFO")
        return logging.INFO
    return level
