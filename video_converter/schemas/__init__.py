"""Pydantic schemas for queue message payloads."""

from video_converter.schemas.video_task import VideoConvertedEvent, VideoTask

__all__ = [
    "VideoConvertedEvent",
    "VideoTask",
]
