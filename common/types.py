"""Shared data type definitions (ChunkUnit, ChunkSpec, ChunkRecord)."""

from dataclasses import dataclass
from enum import Enum

from common.constants import (
    DEFAULT_CHUNK_SIZE_BYTES,
    DEFAULT_CHUNK_UNIT,
    DEFAULT_CHUNK_UNIT_SIZE,
    MIN_CHUNK_SIZE_BYTES,
)


class ChunkUnit(str, Enum):
    """Unit in which a chunk size is expressed."""

    BYTE = "B"
    KILOBYTE = "KB"
    MEGABYTE = "MB"

    @property
    def scale(self) -> int:
        return _UNIT_SCALES[self]


_UNIT_SCALES = {
    ChunkUnit.BYTE: 1,
    ChunkUnit.KILOBYTE: 1024,
    ChunkUnit.MEGABYTE: 1024 * 1024,
}


@dataclass(frozen=True)
class ChunkSpec:
    """
    Requested chunk size.

    The requested size is not always honored: ``effective_size`` falls back to
    DEFAULT_CHUNK_SIZE_BYTES when the request is below MIN_CHUNK_SIZE_BYTES.
    """
    unit_size: int = DEFAULT_CHUNK_UNIT_SIZE
    unit: ChunkUnit = ChunkUnit(DEFAULT_CHUNK_UNIT)

    @property
    def requested_size(self) -> int:
        return self.unit_size * ChunkUnit(self.unit).scale

    @property
    def effective_size(self) -> int:
        requested = self.requested_size
        if requested < MIN_CHUNK_SIZE_BYTES:
            return DEFAULT_CHUNK_SIZE_BYTES
        return requested


@dataclass(frozen=True)
class ChunkRecord:
    """
    Metadata for a single stored chunk.

    ``fingerprint`` is the checksum of the artifact as stored on disk, i.e. of
    the archive when compression is enabled.
    """
    index: int
    fingerprint: str
    artifact_name: str
    size: int
