"""Transcoder Wrapper for Async Subprocess Execution.

This module provides an async wrapper around the external transcoder (ffmpeg),
preventing blocking of the async event loop during long-running transcodes.

Critical Pattern:
- Callers MUST use this wrapper instead of subprocess.run() directly
- Non-blocking execution via asyncio.to_thread()
- Every invocation is bounded by a timeout
- stdout and stderr are captured together, since ffmpeg reports progress
  and errors on stderr
"""

import asyncio
import subprocess

from video_converter.exceptions import TranscoderError, TranscoderTimeoutError
from video_converter.utils.logging import get_logger

log = get_logger(__name__)

# Keep log lines bounded; the full text stays on the raised exception
_LOG_OUTPUT_LIMIT = 500


def build_dash_command(ffmpeg_path: str, input_file: str, manifest_file: str) -> list[str]:
    """Build the ffmpeg command producing an MPEG-DASH manifest and segments.

    Args:
        ffmpeg_path: Transcoder executable
        input_file: Merged source video
        manifest_file: Destination output.mpd; segments land beside it

    Returns:
        Argument vector for subprocess.run
    """
    # -y: a redelivered task may find a manifest from an earlier failed attempt
    return [ffmpeg_path, "-y", "-i", input_file, "-f", "dash", manifest_file]


def _truncate(text: str) -> str:
    return text[-_LOG_OUTPUT_LIMIT:] if len(text) > _LOG_OUTPUT_LIMIT else text


async def run_transcoder(
    command: list[str],
    timeout: float,
) -> subprocess.CompletedProcess[str]:
    """Run the transcoder without blocking the event loop.

    Args:
        command: Full argument vector, executable first
        timeout: Timeout in seconds; the child is killed when exceeded

    Returns:
        CompletedProcess whose stdout holds the combined output

    Raises:
        TranscoderError: If the process exits non-zero or cannot be started
        TranscoderTimeoutError: If the process exceeds the timeout

    Example:
        >>> result = await run_transcoder(
        ...     build_dash_command("ffmpeg", "/data/42/merged.mp4",
        ...                        "/data/42/mpeg-dash/output.mpd"),
        ...     timeout=3600,
        ... )
    """
    executable = command[0]
    log.info("transcoder_start", command=command, timeout=timeout)

    try:
        result = await asyncio.to_thread(
            subprocess.run,
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        # TimeoutExpired carries the partial output as bytes even in text mode
        if isinstance(e.output, bytes):
            output = e.output.decode(errors="replace")
        else:
            output = e.output or ""
        log.error(
            "transcoder_timeout",
            command=executable,
            timeout=timeout,
            output=_truncate(output),
        )
        raise TranscoderTimeoutError(executable, timeout, output) from e
    except OSError as e:
        log.error("transcoder_not_executable", command=executable, error=str(e))
        raise TranscoderError(executable, None, str(e)) from e

    output = result.stdout or ""
    if result.returncode != 0:
        log.error(
            "transcoder_error",
            command=executable,
            exit_code=result.returncode,
            output=_truncate(output),
        )
        raise TranscoderError(executable, result.returncode, output)

    log.info("transcoder_success", command=executable, output=_truncate(output))
    return result
