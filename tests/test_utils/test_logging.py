"""Tests for the structured JSON logger."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from video_converter.utils.logging import (
    CONTEXT_ATTR,
    JsonFormatter,
    StructuredLogger,
    get_logger,
)


@pytest.fixture
def captured():
    """StructuredLogger writing into a list of LogRecords."""
    records: list[logging.LogRecord] = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger = logging.getLogger("tests.structured")
    logger.handlers = [ListHandler()]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield StructuredLogger(logger), records
    logger.handlers = []


def _render(record: logging.LogRecord) -> dict:
    return json.loads(JsonFormatter().format(record))


def test_info_renders_event_and_context(captured):
    log, records = captured

    log.info("chunks_merged", video_id=42, chunk_count=2)

    assert records[0].levelno == logging.INFO
    assert records[0].getMessage() == "chunks_merged"
    assert getattr(records[0], CONTEXT_ATTR) == {"video_id": 42, "chunk_count": 2}

    line = _render(records[0])
    assert line["event"] == "chunks_merged"
    assert line["video_id"] == 42
    assert line["chunk_count"] == 2
    assert line["level"] == "INFO"
    assert line["logger"] == "tests.structured"
    assert "time" in line


def test_non_json_values_are_stringified(captured):
    log, records = captured

    log.warning(
        "odd_values",
        path=Path("/data/42"),
        occurred=datetime(2026, 10, 17, tzinfo=timezone.utc),
    )

    line = _render(records[0])
    assert line["path"] == "/data/42"
    assert line["occurred"].startswith("2026-10-17")


def test_error_attaches_traceback_only_when_requested(captured):
    log, records = captured

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        log.error("with_trace", exc_info=True)
        log.error("without_trace")

    assert "RuntimeError: boom" in _render(records[0])["exception"]
    assert "exception" not in _render(records[1])


def test_debug_level(captured):
    log, records = captured

    log.debug("job_claimed", pgqueuer_job_id="1")

    assert records[0].levelno == logging.DEBUG


def test_get_logger_writes_json_to_stdout(capsys):
    name = "tests.logging.stdout_check"
    logging.getLogger(name).handlers = []

    get_logger(name).info("worker_started", worker_id="worker-1")

    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "worker_started"
    assert line["worker_id"] == "worker-1"
    logging.getLogger(name).handlers = []


def test_get_logger_honours_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    name = "tests.logging.level_check"
    logging.getLogger(name).handlers = []

    get_logger(name)

    assert logging.getLogger(name).level == logging.WARNING
    logging.getLogger(name).handlers = []


def test_get_logger_does_not_duplicate_handlers():
    name = "tests.logging.handler_check"
    logging.getLogger(name).handlers = []

    get_logger(name)
    get_logger(name)

    assert len(logging.getLogger(name).handlers) == 1
    logging.getLogger(name).handlers = []
