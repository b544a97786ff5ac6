"""Structured JSON logging for the worker.

Every log line is one JSON object on stdout carrying the event name, the
level, the logger name, a UTC timestamp and any keyword context::

    log.info("chunks_merged", video_id=42, chunk_count=12)

    {"time": "2026-10-17T12:00:00.000000+00:00", "level": "INFO",
     "logger": "video_converter.services.video_processor",
     "event": "chunks_merged", "video_id": 42, "chunk_count": 12}

Configuration:
- Log level from LOG_LEVEL (default INFO)
- exc_info=True on error() adds the formatted traceback as "exception"
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from video_converter.config import get_log_level

# LogRecord attribute holding the structured context
CONTEXT_ATTR = "structured_context"


class JsonFormatter(logging.Formatter):
    """Render a LogRecord and its structured context as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update(getattr(record, CONTEXT_ATTR, {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Paths and datetimes are common context values
        return json.dumps(entry, default=str)


class StructuredLogger:
    """Logger facade taking an event name plus keyword context.

    The event becomes the record message and the keyword arguments travel
    on the record for JsonFormatter.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def _log(self, level: int, event: str, exc_info: bool, context: dict[str, Any]) -> None:
        self._logger.log(level, event, exc_info=exc_info, extra={CONTEXT_ATTR: context})

    def info(self, event: str, **kwargs: Any) -> None:
        self._log(logging.INFO, event, False, kwargs)

    def error(self, event: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, event, exc_info, kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, event, False, kwargs)

    def debug(self, event: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, event, False, kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        StructuredLogger writing JSON lines to stdout
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(get_log_level())
        # Keep JSON lines out of any root handler's plain-text output
        logger.propagate = False

    return StructuredLogger(logger)
