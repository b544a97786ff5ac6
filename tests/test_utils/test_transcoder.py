"""
Unit tests for video_converter/utils/transcoder.py.

Tests the ffmpeg command construction, non-blocking execution, output
capture, and the mapping of exit codes, timeouts and missing executables
to TranscoderError.
"""

import asyncio
import subprocess
import sys
from unittest.mock import Mock

import pytest

from video_converter.exceptions import TranscoderError, TranscoderTimeoutError
from video_converter.utils.transcoder import build_dash_command, run_transcoder


class TestTranscoderError:
    """Test TranscoderError exception classes."""

    def test_transcoder_error_attributes(self):
        error = TranscoderError("ffmpeg", 1, "moov atom not found")

        assert error.command == "ffmpeg"
        assert error.exit_code == 1
        assert error.output == "moov atom not found"
        assert str(error) == "ffmpeg failed with exit code 1: moov atom not found"
        assert error.stage == "Failed to convert to mpeg-dash"

    def test_not_executable_message(self):
        error = TranscoderError("ffmpeg", None, "No such file or directory")

        assert str(error) == "ffmpeg could not be executed: No such file or directory"

    def test_timeout_error_is_transcoder_error(self):
        error = TranscoderTimeoutError("ffmpeg", 30)

        assert isinstance(error, TranscoderError)
        assert error.timeout == 30
        assert error.exit_code is None
        assert str(error) == "ffmpeg exceeded timeout of 30s"

    def test_timeout_error_message_includes_output(self):
        error = TranscoderTimeoutError("ffmpeg", 30, "frame=  120 fps=60")

        assert error.output == "frame=  120 fps=60"
        assert str(error) == "ffmpeg exceeded timeout of 30s: frame=  120 fps=60"


class TestBuildDashCommand:
    def test_command_layout(self):
        command = build_dash_command(
            "ffmpeg", "/data/42/merged.mp4", "/data/42/mpeg-dash/output.mpd"
        )

        assert command == [
            "ffmpeg",
            "-y",
            "-i",
            "/data/42/merged.mp4",
            "-f",
            "dash",
            "/data/42/mpeg-dash/output.mpd",
        ]


class TestRunTranscoder:
    """Test run_transcoder async function."""

    @pytest.mark.asyncio
    async def test_success_returns_completed_process(self, mocker):
        mock_result = Mock(returncode=0, stdout="frame=  120 fps=60")
        mocker.patch("asyncio.to_thread", return_value=mock_result)
        mocker.patch("video_converter.utils.transcoder.log")

        result = await run_transcoder(["ffmpeg", "-i", "in.mp4"], timeout=60)

        assert result.returncode == 0
        assert result.stdout == "frame=  120 fps=60"

    @pytest.mark.asyncio
    async def test_failure_raises_with_combined_output(self, mocker):
        mock_result = Mock(returncode=1, stdout="in.mp4: Invalid data found when processing input")
        mocker.patch("asyncio.to_thread", return_value=mock_result)
        mocker.patch("video_converter.utils.transcoder.log")

        with pytest.raises(TranscoderError) as exc_info:
            await run_transcoder(["ffmpeg", "-i", "in.mp4"], timeout=60)

        assert exc_info.value.exit_code == 1
        assert exc_info.value.command == "ffmpeg"
        assert "Invalid data found" in exc_info.value.output

    @pytest.mark.asyncio
    async def test_timeout_raises_timeout_error(self, mocker):
        mocker.patch(
            "asyncio.to_thread",
            side_effect=subprocess.TimeoutExpired(cmd="ffmpeg", timeout=5, output=b"partial"),
        )
        mock_log = mocker.patch("video_converter.utils.transcoder.log")

        with pytest.raises(TranscoderTimeoutError) as exc_info:
            await run_transcoder(["ffmpeg"], timeout=5)

        assert exc_info.value.timeout == 5
        assert exc_info.value.output == "partial"
        assert "partial" in str(exc_info.value)
        assert mock_log.error.call_args.args[0] == "transcoder_timeout"

    @pytest.mark.asyncio
    async def test_timeout_without_output(self, mocker):
        mocker.patch(
            "asyncio.to_thread",
            side_effect=subprocess.TimeoutExpired(cmd="ffmpeg", timeout=5, output=None),
        )
        mocker.patch("video_converter.utils.transcoder.log")

        with pytest.raises(TranscoderTimeoutError) as exc_info:
            await run_transcoder(["ffmpeg"], timeout=5)

        assert exc_info.value.output == ""
        assert str(exc_info.value) == "ffmpeg exceeded timeout of 5s"

    @pytest.mark.asyncio
    async def test_missing_executable_raises_transcoder_error(self, mocker):
        mocker.patch("asyncio.to_thread", side_effect=FileNotFoundError("No such file: 'ffmpeg'"))
        mocker.patch("video_converter.utils.transcoder.log")

        with pytest.raises(TranscoderError) as exc_info:
            await run_transcoder(["ffmpeg"], timeout=5)

        assert exc_info.value.exit_code is None
        assert "No such file" in exc_info.value.output

    @pytest.mark.asyncio
    async def test_subprocess_options(self, mocker):
        """Test output is merged, stdin closed and the timeout forwarded."""
        mock_to_thread = mocker.patch(
            "asyncio.to_thread", return_value=Mock(returncode=0, stdout="")
        )
        mocker.patch("video_converter.utils.transcoder.log")

        await run_transcoder(["ffmpeg", "-version"], timeout=42)

        args, kwargs = mock_to_thread.call_args
        assert args == (subprocess.run, ["ffmpeg", "-version"])
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert kwargs["stdout"] is subprocess.PIPE
        assert kwargs["stderr"] is subprocess.STDOUT
        assert kwargs["text"] is True
        assert kwargs["timeout"] == 42

    @pytest.mark.asyncio
    async def test_long_output_is_truncated_in_logs(self, mocker):
        output = "x" * 2000
        mocker.patch("asyncio.to_thread", return_value=Mock(returncode=1, stdout=output))
        mock_log = mocker.patch("video_converter.utils.transcoder.log")

        with pytest.raises(TranscoderError) as exc_info:
            await run_transcoder(["ffmpeg"], timeout=5)

        assert len(mock_log.error.call_args.kwargs["output"]) == 500
        assert exc_info.value.output == output

    @pytest.mark.asyncio
    async def test_real_process_success(self):
        """Test a real child process through the thread pool."""
        result = await run_transcoder(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"],
            timeout=30,
        )

        assert "out" in result.stdout
        assert "err" in result.stdout

    @pytest.mark.asyncio
    async def test_real_process_failure(self):
        with pytest.raises(TranscoderError) as exc_info:
            await run_transcoder(
                [sys.executable, "-c", "import sys; print('bad'); sys.exit(3)"],
                timeout=30,
            )

        assert exc_info.value.exit_code == 3
        assert "bad" in exc_info.value.output

    @pytest.mark.asyncio
    async def test_non_blocking_execution(self):
        """Test the event loop keeps running while the child process runs."""
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0.01)

        task = asyncio.create_task(ticker())
        try:
            await run_transcoder([sys.executable, "-c", "import time; time.sleep(0.3)"], timeout=30)
        finally:
            task.cancel()

        assert ticks > 5

    @pytest.mark.asyncio
    async def test_real_process_timeout_keeps_partial_output(self):
        """Test output printed before a hang reaches the timeout error."""
        with pytest.raises(TranscoderTimeoutError) as exc_info:
            await run_transcoder(
                [
                    sys.executable,
                    "-c",
                    "import time; print('progress line', flush=True); time.sleep(5)",
                ],
                timeout=1,
            )

        assert "progress line" in exc_info.value.output
        assert "progress line" in str(exc_info.value)
