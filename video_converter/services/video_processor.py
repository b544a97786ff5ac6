"""Video processing pipeline for a single task.

Turns a directory of uploaded chunks into an MPEG-DASH manifest and segments.

Pipeline (strictly sequential, first failure aborts the rest):
    1. Merge chunks into {path}/merged.mp4
    2. Ensure {path}/mpeg-dash/ exists
    3. Run ffmpeg: merged.mp4 → mpeg-dash/output.mpd (+ segments)
    4. Delete merged.mp4

On a transcoder failure the merged file is left in place for inspection;
a redelivered task rebuilds it from the chunks anyway.

Usage:
    processor = VideoProcessor(ffmpeg_path="ffmpeg", transcode_timeout=3600)
    result = await processor.process(VideoTask(video_id=42, path="/data/42"))
"""

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path

from video_converter.exceptions import CleanupError, OutputDirectoryError
from video_converter.schemas import VideoTask
from video_converter.services.chunk_merger import merge_chunks
from video_converter.utils.filesystem import (
    MANIFEST_FILE_NAME,
    ensure_dash_dir,
    get_merged_file,
)
from video_converter.utils.logging import get_logger
from video_converter.utils.transcoder import build_dash_command, run_transcoder

log = get_logger(__name__)


@dataclass
class ProcessingResult:
    """Outcome of a successful pipeline run.

    Attributes:
        video_id: Task identifier
        manifest_path: Location of output.mpd
        chunk_count: Number of chunks merged
        duration_seconds: Wall-clock time of the whole pipeline
    """

    video_id: int
    manifest_path: Path
    chunk_count: int
    duration_seconds: float


class VideoProcessor:
    """Merge, transcode and clean up one video task.

    Args:
        ffmpeg_path: Transcoder executable
        transcode_timeout: Seconds before the transcoder is killed
        chunk_suffix: Filename suffix identifying chunks
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        transcode_timeout: float = 3600,
        chunk_suffix: str = ".chunk",
    ) -> None:
        self.ffmpeg_path = ffmpeg_path
        self.transcode_timeout = transcode_timeout
        self.chunk_suffix = chunk_suffix

    async def process(self, task: VideoTask) -> ProcessingResult:
        """Run the full pipeline for task.

        Raises:
            MergeError: Chunk discovery, access or copy failure
            OutputDirectoryError: mpeg-dash directory cannot be created
            TranscoderError: ffmpeg failed, timed out or could not run
            CleanupError: merged file cannot be removed
        """
        started = time.monotonic()
        task_dir = Path(task.path)
        merged_file = get_merged_file(task_dir)

        log.info("merging_chunks", video_id=task.video_id, path=task.path)
        chunks = await asyncio.to_thread(
            merge_chunks, task_dir, merged_file, self.chunk_suffix
        )
        log.info(
            "chunks_merged",
            video_id=task.video_id,
            chunk_count=len(chunks),
            merged_file=str(merged_file),
        )

        log.info("creating_dash_dir", video_id=task.video_id, path=task.path)
        try:
            dash_dir = ensure_dash_dir(task_dir)
        except OSError as e:
            raise OutputDirectoryError(
                f"failed to create mpeg-dash directory in {task_dir}: {e}"
            ) from e

        manifest_path = dash_dir / MANIFEST_FILE_NAME
        log.info("converting_to_dash", video_id=task.video_id, path=task.path)
        await run_transcoder(
            build_dash_command(self.ffmpeg_path, str(merged_file), str(manifest_path)),
            timeout=self.transcode_timeout,
        )
        log.info("video_converted", video_id=task.video_id, dash_dir=str(dash_dir))

        try:
            merged_file.unlink()
        except OSError as e:
            raise CleanupError(f"failed to remove merged file {merged_file}: {e}") from e

        return ProcessingResult(
            video_id=task.video_id,
            manifest_path=manifest_path,
            chunk_count=len(chunks),
            duration_seconds=round(time.monotonic() - started, 3),
        )
