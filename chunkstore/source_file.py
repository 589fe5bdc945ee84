"""Source file identity: path, size and content fingerprint."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from chunkstore.checksum_validator import compute_file_checksum
from common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """
    A file to be split.

    Built with ``SourceFile.assign``; the fingerprint is computed once over the
    whole file at that time. A missing path gives the absent state
    (``exists`` False, every other field at its default) instead of an error.
    """
    path: Optional[Path] = None
    size_bytes: int = 0
    content_fingerprint: str = ""
    exists: bool = False

    @classmethod
    def assign(cls, path: Union[str, Path]) -> "SourceFile":
        """
        Build a SourceFile for ``path``.

        Raises:
            StorageIOError: If the file exists but cannot be read
        """
        path = Path(path)
        if not path.is_file():
            logger.warning(f"Source file not found: {path}")
            return cls()

        size = path.stat().st_size
        fingerprint = compute_file_checksum(path)
        logger.debug(f"Assigned source {path.name} [size={size}, fingerprint={fingerprint}]")
        return cls(path=path, size_bytes=size, content_fingerprint=fingerprint, exists=True)

    @property
    def name(self) -> str:
        """Base name of the source file, empty when absent."""
        return self.path.name if self.path is not None else ""
