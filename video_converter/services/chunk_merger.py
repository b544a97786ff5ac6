"""Chunk merging for uploaded video fragments.

Uploaders write a video as numbered chunk files into one directory. Before
transcoding, the chunks are concatenated byte-for-byte into a single file in
sequence-number order.

Ordering:
    The sequence number is the first run of ASCII digits 0-9 in the base
    filename, compared numerically: part_2.chunk sorts before part_10.chunk.
    A filename with no digits gets -1 and sorts before every numbered chunk.
    Chunks sharing a sequence number keep their directory listing order.

This module is synchronous; async callers run merge_chunks() in a thread.

Usage:
    from video_converter.services.chunk_merger import merge_chunks

    chunks = merge_chunks(Path("/data/42"), Path("/data/42/merged.mp4"))
"""

import re
import shutil
from collections import Counter
from pathlib import Path

from video_converter.exceptions import ChunkAccessError, ChunkCopyError, ChunkDiscoveryError
from video_converter.utils.logging import get_logger

log = get_logger(__name__)

NO_SEQUENCE_NUMBER = -1

# ASCII only: other Unicode decimal digits do not count as sequence numbers
_DIGITS_PATTERN = re.compile(r"[0-9]+")

# 1 MiB copy buffer
_COPY_BUFFER_SIZE = 1024 * 1024


def extract_sequence_number(file_name: str | Path) -> int:
    """Extract the chunk sequence number from a filename.

    Only the base name is inspected, so digits in parent directories are
    ignored.

    Args:
        file_name: Chunk filename or path

    Returns:
        First run of ASCII digits as an int, or -1 if there are none

    Example:
        >>> extract_sequence_number("/data/42/part_10.chunk")
        10
        >>> extract_sequence_number("header.chunk")
        -1
    """
    match = _DIGITS_PATTERN.search(Path(file_name).name)
    if match is None:
        return NO_SEQUENCE_NUMBER
    return int(match.group())


def find_chunks(input_dir: Path, suffix: str = ".chunk") -> list[Path]:
    """List chunk files in a directory, in merge order.

    Args:
        input_dir: Directory holding the uploaded chunks
        suffix: Filename suffix identifying chunks

    Returns:
        Chunk paths sorted by sequence number

    Raises:
        ChunkDiscoveryError: If the directory cannot be listed
    """
    try:
        chunks = [
            entry
            for entry in Path(input_dir).iterdir()
            if entry.name.endswith(suffix) and entry.is_file()
        ]
    except OSError as e:
        raise ChunkDiscoveryError(f"failed to find chunks in {input_dir}: {e}") from e

    # sorted() is stable; equal sequence numbers are left as listed
    chunks = sorted(chunks, key=extract_sequence_number)

    duplicates = sorted(
        number
        for number, count in Counter(extract_sequence_number(c) for c in chunks).items()
        if count > 1
    )
    if duplicates:
        log.warning(
            "duplicate_chunk_sequence_numbers",
            input_dir=str(input_dir),
            sequence_numbers=duplicates,
        )

    return chunks


def merge_chunks(input_dir: Path, output_file: Path, suffix: str = ".chunk") -> list[Path]:
    """Concatenate the chunks of input_dir into output_file.

    The output file is created or truncated. On failure it may be left
    partially written; nothing is rolled back. Chunk files are only read.

    Args:
        input_dir: Directory holding the uploaded chunks
        output_file: Destination of the merged video
        suffix: Filename suffix identifying chunks

    Returns:
        The chunks in the order they were written

    Raises:
        ChunkDiscoveryError: If the directory cannot be listed
        ChunkAccessError: If the output cannot be created or a chunk cannot be opened
        ChunkCopyError: If copying a chunk fails partway
    """
    chunks = find_chunks(input_dir, suffix)
    if not chunks:
        log.warning("no_chunks_found", input_dir=str(input_dir), suffix=suffix)

    try:
        output = open(output_file, "wb")
    except OSError as e:
        raise ChunkAccessError(f"failed to create output file {output_file}: {e}") from e

    with output:
        for chunk in chunks:
            try:
                source = open(chunk, "rb")
            except OSError as e:
                raise ChunkAccessError(f"failed to read chunk file {chunk}: {e}") from e

            with source:
                try:
                    shutil.copyfileobj(source, output, _COPY_BUFFER_SIZE)
                except OSError as e:
                    raise ChunkCopyError(
                        f"failed to write chunk {chunk} to merged file: {e}"
                    ) from e

    log.debug(
        "chunks_concatenated",
        input_dir=str(input_dir),
        output_file=str(output_file),
        chunk_count=len(chunks),
    )
    return chunks
