"""Cross-cutting utilities for the video converter worker.

Modules:
    logging: JSON structured logger.
    filesystem: Path helpers for a task directory.
    transcoder: Non-blocking, timeout-bounded ffmpeg execution.
"""
