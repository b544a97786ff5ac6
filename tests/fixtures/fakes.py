"""In-memory stand-ins for the VideoTaskHandler collaborators."""

from video_converter.schemas import VideoConvertedEvent
from video_converter.services.video_store import ErrorDetails


class RecordingPublisher:
    """ConfirmationPublisher that keeps published events in memory."""

    def __init__(self, error: Exception | None = None) -> None:
        self.events: list[VideoConvertedEvent] = []
        self.error = error

    async def publish(self, event: VideoConvertedEvent) -> None:
        if self.error is not None:
            raise self.error
        self.events.append(event)


class InMemoryVideoStore:
    """VideoStore keeping processing and error records in memory.

    Each operation can be made to fail by setting the matching *_error
    attribute.
    """

    def __init__(self) -> None:
        self.processed: dict[int, str] = {}
        self.errors: list[tuple[ErrorDetails, BaseException]] = []
        self.is_processed_error: Exception | None = None
        self.mark_processed_error: Exception | None = None
        self.register_error_error: Exception | None = None

    async def is_processed(self, video_id: int) -> bool:
        if self.is_processed_error is not None:
            raise self.is_processed_error
        return video_id in self.processed

    async def mark_processed(self, video_id: int, path: str) -> bool:
        if self.mark_processed_error is not None:
            raise self.mark_processed_error
        if video_id in self.processed:
            return False
        self.processed[video_id] = path
        return True

    async def register_error(self, details: ErrorDetails, error: BaseException) -> None:
        if self.register_error_error is not None:
            raise self.register_error_error
        self.errors.append((details, error))
