"""Filesystem path helpers for a video task directory.

This module provides standardized path construction for the files the worker
reads and writes inside a task's upload directory.

Architecture Pattern:
    {task.path}/
    ├── 0.chunk, 1.chunk, ...   (uploaded chunks, read-only)
    ├── merged.mp4              (transient, removed after transcoding)
    └── mpeg-dash/
        ├── output.mpd
        └── *.m4s               (segments written by ffmpeg)

Usage:
    from video_converter.utils.filesystem import get_merged_file, ensure_dash_dir

    merged = get_merged_file(task.path)
    dash_dir = ensure_dash_dir(task.path)
"""

from pathlib import Path

__all__ = [
    "DASH_DIR_NAME",
    "MANIFEST_FILE_NAME",
    "MERGED_FILE_NAME",
    "ensure_dash_dir",
    "get_dash_dir",
    "get_manifest_file",
    "get_merged_file",
]

MERGED_FILE_NAME = "merged.mp4"
DASH_DIR_NAME = "mpeg-dash"
MANIFEST_FILE_NAME = "output.mpd"


def get_merged_file(task_path: str | Path) -> Path:
    """Get path of the merged video inside the task directory.

    Does not create anything.

    Example:
        >>> get_merged_file("/data/42")
        PosixPath('/data/42/merged.mp4')
    """
    return Path(task_path) / MERGED_FILE_NAME


def get_dash_dir(task_path: str | Path) -> Path:
    """Get path of the mpeg-dash output directory (not created)."""
    return Path(task_path) / DASH_DIR_NAME


def get_manifest_file(task_path: str | Path) -> Path:
    """Get path of the DASH manifest ffmpeg writes."""
    return get_dash_dir(task_path) / MANIFEST_FILE_NAME


def ensure_dash_dir(task_path: str | Path) -> Path:
    """Get the mpeg-dash output directory, creating it if needed.

    Idempotent: an existing directory is left untouched.

    Args:
        task_path: Task upload directory

    Returns:
        Path to {task_path}/mpeg-dash/

    Raises:
        OSError: If the directory cannot be created
    """
    path = get_dash_dir(task_path)
    path.mkdir(parents=True, exist_ok=True)
    return path
