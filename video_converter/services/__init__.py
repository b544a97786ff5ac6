"""Business logic services for the video converter worker."""

from video_converter.services.chunk_merger import extract_sequence_number, merge_chunks
from video_converter.services.publisher import ConfirmationPublisher, PgQueuerPublisher
from video_converter.services.task_handler import HandleOutcome, VideoTaskHandler
from video_converter.services.video_processor import ProcessingResult, VideoProcessor
from video_converter.services.video_store import (
    ErrorDetails,
    SqlAlchemyVideoStore,
    VideoStore,
)

__all__ = [
    "ConfirmationPublisher",
    "ErrorDetails",
    "HandleOutcome",
    "PgQueuerPublisher",
    "ProcessingResult",
    "SqlAlchemyVideoStore",
    "VideoProcessor",
    "VideoStore",
    "VideoTaskHandler",
    "extract_sequence_number",
    "merge_chunks",
]
