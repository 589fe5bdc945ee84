"""Pydantic schema and canonical JSON form of the chunk manifest."""

import json
import re
from pathlib import Path
from typing import Dict, Literal, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from chunkstore.chunk_storage import chunk_file_name
from common.constants import COMPRESSION_NONE, COMPRESSION_ZIP
from common.exceptions import ManifestFormatError, StorageIOError

DIGEST_PATTERN = re.compile(r'^[0-9a-f]{64}$')

ChunkListValue = Union[str, Tuple[str, str]]


class ChunkEntry(NamedTuple):
    """Resolved chunk table entry."""
    fingerprint: str
    artifact_ref: str


class Manifest(BaseModel):
    """
    Authoritative record for reconstructing a split file.

    ``chunk_list`` (serialized as ``list``) maps 1-based indices to a bare
    digest when ``compression_mode`` is "none", or to a
    ``(digest, archive base name)`` pair when it is "zip".
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    file_name: str
    file_hash: str
    file_size: int = Field(ge=0)
    chunk_size: int = Field(gt=0)
    chunk_count: int = Field(ge=0)
    compression_mode: Literal["none", "zip"]
    chunk_list: Dict[int, ChunkListValue] = Field(default_factory=dict, alias="list")

    @field_validator("file_name")
    @classmethod
    def _base_name_only(cls, value: str) -> str:
        if not value or Path(value).name != value or value in (".", ".."):
            raise ValueError(f"file_name must be a base name, got {value!r}")
        return value

    @field_validator("file_hash")
    @classmethod
    def _hex_digest(cls, value: str) -> str:
        if not DIGEST_PATTERN.match(value):
            raise ValueError("file_hash must be a 64-character hex digest")
        return value

    @model_validator(mode="after")
    def _entries_match_mode(self) -> "Manifest":
        for index, value in self.chunk_list.items():
            if index < 1:
                raise ValueError(f"chunk index {index} is not 1-based")
            if self.compression_mode == COMPRESSION_NONE:
                if not isinstance(value, str):
                    raise ValueError(f"chunk {index}: expected a bare digest for uncompressed manifest")
                digest = value
            else:
                if isinstance(value, str):
                    raise ValueError(f"chunk {index}: expected [digest, name] for compressed manifest")
                digest, name = value
                if not name or Path(name).name != name:
                    raise ValueError(f"chunk {index}: invalid archive name {name!r}")
            if not DIGEST_PATTERN.match(digest):
                raise ValueError(f"chunk {index}: invalid digest")
        return self

    @property
    def source_file_name(self) -> str:
        return self.file_name

    @property
    def source_fingerprint(self) -> str:
        return self.file_hash

    @property
    def source_size(self) -> int:
        return self.file_size

    @property
    def effective_chunk_size(self) -> int:
        return self.chunk_size

    @property
    def compressed(self) -> bool:
        return self.compression_mode == COMPRESSION_ZIP

    @property
    def chunk_table(self) -> Dict[int, ChunkEntry]:
        return {index: self.entry(index) for index in sorted(self.chunk_list)}

    def entry(self, index: int) -> Optional[ChunkEntry]:
        """
        Resolve a chunk table entry.

        Returns:
            ChunkEntry, or None if the index is not in the table. For
            uncompressed manifests the artifact reference is the
            sequence-formatted chunk file name.
        """
        value = self.chunk_list.get(index)
        if value is None:
            return None
        if isinstance(value, str):
            return ChunkEntry(value, chunk_file_name(index))
        return ChunkEntry(value[0], value[1])

    def to_json(self, info_file: Optional[Path] = None) -> str:
        """
        Serialize to the canonical JSON form.

        Args:
            info_file: Location the manifest is written to; recorded for reference only
        """
        data = {}
        if info_file is not None:
            data["info_file"] = str(info_file)
        data.update(self.model_dump(mode="json", by_alias=True))
        data["list"] = {
            str(index): value if isinstance(value, str) else list(value)
            for index, value in sorted(self.chunk_list.items())
        }
        return json.dumps(data, indent=2)


def parse_manifest(text: Union[str, bytes]) -> Manifest:
    """
    Parse manifest JSON.

    Raises:
        ManifestFormatError: If the content is not a well-formed manifest
    """
    try:
        return Manifest.model_validate_json(text)
    except ValidationError as e:
        raise ManifestFormatError(f"Invalid manifest: {e}") from e


def read_manifest_file(path: Path) -> Manifest:
    """
    Read and parse a plain manifest file.

    Raises:
        StorageIOError: If the file cannot be read
        ManifestFormatError: If the content is not a well-formed manifest
    """
    try:
        text = Path(path).read_bytes()
    except OSError as e:
        raise StorageIOError(f"Cannot read manifest {path}: {e}", path=Path(path)) from e
    try:
        return parse_manifest(text)
    except ManifestFormatError as e:
        e.path = Path(path)
        raise
