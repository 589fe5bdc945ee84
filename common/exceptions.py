"""Custom exception classes for splitting and merging."""

from pathlib import Path
from typing import Optional


class ChunkStoreException(Exception):
    """
    Base exception class for all chunk store errors.

    Attributes:
        path: File the error relates to, when known
        stage: Last merge state reached before the failure, when raised by the merger
    """

    def __init__(self, message: str, path: Optional[Path] = None, stage=None):
        super().__init__(message)
        self.path = path
        self.stage = stage


class SourceNotFoundError(ChunkStoreException):
    """
    Raised when a source file or manifest handle does not exist.
    """
    pass


class StorageIOError(ChunkStoreException):
    """
    Raised when reading, writing or creating a file fails.
    """
    pass


class PartialWriteError(StorageIOError):
    """
    Raised when a chunk or manifest write did not complete.
    """
    pass


class ManifestFormatError(ChunkStoreException):
    """
    Raised when a manifest cannot be parsed or its schema variant is inconsistent.
    """
    pass


class IntegrityError(ChunkStoreException):
    """
    Raised when a fingerprint does not match at any verification point.
    """
    pass


class MissingChunkError(IntegrityError):
    """
    Raised when a chunk referenced by the manifest is absent from the table or disk.
    """
    pass


class ConfigurationError(ChunkStoreException):
    """
    Raised when a configured value (storage mode, chunk unit, chunk size) is invalid.
    """
    pass
