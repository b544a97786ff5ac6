"""Shared exceptions for the video converter worker.

Every failure the worker can hit while handling a task is a subclass of
VideoWorkerError. Each class carries a human-readable ``stage`` that ends up
in structured logs and in the persisted error record, so a reader of the
``processing_errors`` table can tell which step of the pipeline broke.

Taxonomy:
    - Deserialization: MessageDecodeError
    - Filesystem: MergeError (ChunkDiscoveryError, ChunkAccessError,
      ChunkCopyError), OutputDirectoryError, CleanupError
    - External process: TranscoderError, TranscoderTimeoutError
    - Persistence: PersistenceError
    - Messaging: PublishError, MessageNotAcknowledgedError
"""


class ConfigurationError(Exception):
    """Raised when required worker configuration is missing or invalid.

    Raised at startup only; the worker exits with code 1.
    """

    pass


class VideoWorkerError(Exception):
    """Base class for failures while handling a single video task.

    Attributes:
        stage: Description of the pipeline step that failed.
    """

    stage: str = "Failed to process video"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class MessageDecodeError(VideoWorkerError):
    """Raised when an inbound message body is not a valid VideoTask."""

    stage = "Failed to unmarshal task"


class MergeError(VideoWorkerError):
    """Base class for chunk merge failures."""

    stage = "Failed to merge chunks"


class ChunkDiscoveryError(MergeError):
    """Raised when the chunk directory cannot be listed."""


class ChunkAccessError(MergeError):
    """Raised when a chunk cannot be opened or the merged file cannot be created."""


class ChunkCopyError(MergeError):
    """Raised when copying a chunk into the merged file fails partway."""


class OutputDirectoryError(VideoWorkerError):
    """Raised when the mpeg-dash output directory cannot be created."""

    stage = "Failed to create mpeg-dash directory"


class TranscoderError(VideoWorkerError):
    """Raised when the transcoder exits non-zero or cannot be executed.

    Attributes:
        command: Executable name that was invoked.
        exit_code: Process exit code, or None if the process never ran.
        output: Combined stdout/stderr text captured from the process.
    """

    stage = "Failed to convert to mpeg-dash"

    def __init__(self, command: str, exit_code: int | None, output: str) -> None:
        self.command: str = command
        self.exit_code: int | None = exit_code
        self.output: str = output
        if exit_code is None:
            message = f"{command} could not be executed: {output}"
        else:
            message = f"{command} failed with exit code {exit_code}: {output}"
        super().__init__(message)


class TranscoderTimeoutError(TranscoderError):
    """Raised when the transcoder exceeds its configured timeout."""

    def __init__(self, command: str, timeout: float, output: str = "") -> None:
        self.command = command
        self.exit_code = None
        self.output = output
        self.timeout: float = timeout
        message = f"{command} exceeded timeout of {timeout}s"
        if output:
            message = f"{message}: {output}"
        VideoWorkerError.__init__(self, message)


class CleanupError(VideoWorkerError):
    """Raised when the merged file cannot be removed after transcoding."""

    stage = "Failed to remove merged file"


class PersistenceError(VideoWorkerError):
    """Raised when processed/error state cannot be read or written."""

    stage = "Failed to persist processing state"


class PublishError(VideoWorkerError):
    """Raised when the confirmation event cannot be published."""

    stage = "Failed to publish confirmation"


class MessageNotAcknowledgedError(Exception):
    """Raised by the queue entrypoint when the handler withheld acknowledgment.

    PgQueuer marks the job as failed instead of successful, leaving any
    retry decision to the queue.
    """

    def __init__(self, outcome: str) -> None:
        self.outcome = outcome
        super().__init__(f"Message not acknowledged (outcome={outcome})")
