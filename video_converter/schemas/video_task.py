"""Video task message schemas.

Defines Pydantic models for the inbound task message and the outbound
confirmation event. Both travel as JSON payloads on PgQueuer jobs.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class VideoTask(BaseModel):
    """Inbound video conversion task.

    The path is the directory the uploader wrote chunk files into.
    Strict typing rejects ``"video_id": "42"`` rather than coercing it.
    """

    model_config = ConfigDict(frozen=True)

    video_id: StrictInt
    path: str = Field(..., min_length=1)


class VideoConvertedEvent(BaseModel):
    """Confirmation published after a task is processed and recorded."""

    model_config = ConfigDict(frozen=True)

    video_id: int
    path: str

    @classmethod
    def from_task(cls, task: VideoTask) -> "VideoConvertedEvent":
        return cls(video_id=task.video_id, path=task.path)
