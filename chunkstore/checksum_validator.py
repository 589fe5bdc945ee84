"""Provides SHA-256 fingerprint calculation and verification helpers."""

import hashlib
from pathlib import Path

from common.constants import READ_WINDOW_BYTES
from common.exceptions import StorageIOError


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def compute_file_checksum(path: Path, window: int = READ_WINDOW_BYTES) -> str:
    """
    Compute SHA-256 checksum of a file, reading it in bounded windows.

    Args:
        path: File to hash
        window: Bytes read per iteration

    Returns:
        Hexadecimal string representation of SHA-256 hash

    Raises:
        StorageIOError: If the file cannot be read
    """
    calculator = IncrementalChecksumCalculator()
    try:
        with open(path, 'rb') as f:
            for piece in iter(lambda: f.read(window), b""):
                calculator.update(piece)
    except OSError as e:
        raise StorageIOError(f"Cannot read {path} for checksum: {e}", path=Path(path)) from e
    return calculator.finalize()


def verify_file_checksum(path: Path, expected: str) -> bool:
    """
    Verify that a file on disk matches expected checksum.

    Raises:
        StorageIOError: If the file cannot be read
    """
    return compute_file_checksum(path) == expected


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streaming data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(window1)
        calculator.update(window2)
        final_checksum = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha256()
        self._finalized = False

    def update(self, data: bytes) -> None:
        """
        Update checksum with new data.

        Args:
            data: Bytes to add to checksum calculation
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.

        Returns:
            Hexadecimal string representation of SHA-256 hash
        """
        self._finalized = True
        return self._hasher.hexdigest()
