"""Manages physical chunk files inside a chunk directory: naming, read/write, delete."""

import re
import shutil
from pathlib import Path
from typing import Iterator

from common.constants import (
    ARCHIVE_SUFFIX,
    CHUNK_FILE_PREFIX,
    CHUNK_INDEX_WIDTH,
    MANIFEST_FILE_NAME,
)
from common.exceptions import PartialWriteError
from common.logging_config import get_logger

logger = get_logger(__name__)


def get_chunk_directory(storage_root: Path, fingerprint: str) -> Path:
    """
    Get the directory holding the chunk set of a source file.

    Args:
        storage_root: Root of all chunk directories
        fingerprint: Content fingerprint of the source file

    Returns:
        Path object for the chunk directory
    """
    return Path(storage_root) / fingerprint


_ARTIFACT_NAME_PATTERN = re.compile(
    rf"^(?:{re.escape(CHUNK_FILE_PREFIX)}\.\d{{{CHUNK_INDEX_WIDTH}}}"
    rf"|\d+-[0-9a-f]{{12}}{re.escape(ARCHIVE_SUFFIX)}"
    rf"|[0-9a-f]{{64}}{re.escape(ARCHIVE_SUFFIX)}"
    rf"|{re.escape(MANIFEST_FILE_NAME)})$"
)


def is_chunk_artifact(name: str) -> bool:
    """Check whether ``name`` is a chunk, chunk archive or manifest name written by a split."""
    return bool(_ARTIFACT_NAME_PATTERN.match(name))


def clear_chunk_artifacts(chunk_dir: Path) -> int:
    """
    Delete the split artifacts inside ``chunk_dir``, leaving any other file alone.

    Returns:
        Number of artifacts deleted
    """
    if not chunk_dir.is_dir():
        return 0
    removed = 0
    for path in chunk_dir.iterdir():
        if path.is_file() and is_chunk_artifact(path.name):
            path.unlink()
            removed += 1
    return removed


def prepare_chunk_directory(chunk_dir: Path) -> bool:
    """
    Create ``chunk_dir`` if needed and drop artifacts of an earlier split.

    Returns:
        True if the directory was created by this call
    """
    created = not chunk_dir.exists()
    chunk_dir.mkdir(parents=True, exist_ok=True)
    if not created:
        removed = clear_chunk_artifacts(chunk_dir)
        if removed:
            logger.info(f"Removed {removed} stale artifacts from {chunk_dir}")
    return created


def remove_chunk_directory(chunk_dir: Path) -> bool:
    """
    Recursively delete a chunk directory.

    Returns:
        True if the directory was deleted, False if it didn't exist
    """
    if chunk_dir.exists():
        shutil.rmtree(chunk_dir)
        return True
    return False


def chunk_file_name(index: int) -> str:
    """Return the sequence-formatted artifact name, e.g. ``chunk.00000001``."""
    return f"{CHUNK_FILE_PREFIX}.{index:0{CHUNK_INDEX_WIDTH}d}"


def get_chunk_path(chunk_dir: Path, index: int) -> Path:
    """
    Get file path for an uncompressed chunk.

    Args:
        chunk_dir: Chunk directory
        index: 1-based chunk index

    Returns:
        Path object for chunk file
    """
    return chunk_dir / chunk_file_name(index)


def get_manifest_path(chunk_dir: Path) -> Path:
    """Get the plain manifest path inside a chunk directory."""
    return chunk_dir / MANIFEST_FILE_NAME


def write_chunk(chunk_dir: Path, index: int, data: bytes) -> Path:
    """
    Write chunk data to disk.

    Args:
        chunk_dir: Chunk directory
        index: 1-based chunk index
        data: Raw chunk payload

    Returns:
        Path to written file

    Raises:
        PartialWriteError: If fewer bytes than the payload were written
        OSError: If write operation fails
    """
    filepath = get_chunk_path(chunk_dir, index)
    with open(filepath, 'wb') as f:
        written = f.write(data)
    if written != len(data):
        raise PartialWriteError(
            f"Chunk {index}: wrote {written} of {len(data)} bytes",
            path=filepath
        )
    return filepath


def write_atomic(target: Path, data: bytes) -> Path:
    """
    Write ``data`` to a temporary sibling and rename it over ``target``.

    Raises:
        PartialWriteError: If fewer bytes than ``data`` were written
        OSError: If write or rename fails
    """
    tmp_path = target.with_name(f".{target.name}.tmp")
    try:
        with open(tmp_path, 'wb') as f:
            written = f.write(data)
        if written != len(data):
            raise PartialWriteError(
                f"Wrote {written} of {len(data)} bytes to {target.name}",
                path=target
            )
        tmp_path.replace(target)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    return target


def read_chunk(path: Path) -> bytes:
    """
    Read entire chunk artifact from disk.

    Raises:
        FileNotFoundError: If chunk does not exist
        OSError: If read operation fails
    """
    return Path(path).read_bytes()


def read_source_windows(path: Path, window: int) -> Iterator[bytes]:
    """
    Stream a source file in windows of ``window`` bytes.

    Yields:
        Non-empty windows; only the final one may be shorter than ``window``

    Raises:
        OSError: If read operation fails
    """
    with open(path, 'rb') as f:
        while True:
            piece = f.read(window)
            if not piece:
                break
            yield piece


def delete_artifact(path: Path) -> bool:
    """
    Delete an artifact file from disk.

    Returns:
        True if file was deleted, False if it didn't exist
    """
    path = Path(path)
    if path.exists():
        path.unlink()
        return True
    return False

