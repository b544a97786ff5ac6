"""Shared pytest fixtures for the video converter tests.

Provides an in-memory SQLite database built from the ORM models, a chunk
directory factory, and in-memory stand-ins for the store and publisher
collaborators of VideoTaskHandler.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from tests.fixtures.fakes import InMemoryVideoStore, RecordingPublisher


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def memory_store() -> InMemoryVideoStore:
    return InMemoryVideoStore()


@pytest.fixture
def make_chunks(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing chunk files into a task directory.

    Usage:
        task_dir = make_chunks({"c_0.chunk": b"AA", "c_1.chunk": b"BB"})
    """

    def _make_chunks(files: dict[str, bytes], name: str = "task") -> Path:
        task_dir = tmp_path / name
        task_dir.mkdir(parents=True, exist_ok=True)
        for file_name, content in files.items():
            (task_dir / file_name).write_bytes(content)
        return task_dir

    return _make_chunks


# Database fixtures live in tests/fixtures/database.py
from tests.fixtures.database import (  # noqa: F401, E402
    async_test_engine,
    test_session_factory,
    video_store,
)
