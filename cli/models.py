"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class SplitCommand:
    """Split a file into a chunk set. Unset options fall back to the config."""

    file_path: str
    compress: Optional[bool] = None
    unit_size: Optional[int] = None
    unit: Optional[str] = None
    command: Literal["split"] = "split"


@dataclass(frozen=True)
class MergeCommand:
    """Reconstruct a file from a manifest or manifest archive."""

    manifest_path: str
    output_path: Optional[str] = None
    command: Literal["merge"] = "merge"


@dataclass(frozen=True)
class VerifyCommand:
    """Verify every chunk of a chunk set without writing output."""

    manifest_path: str
    command: Literal["verify"] = "verify"


@dataclass(frozen=True)
class InfoCommand:
    """Show the manifest of a chunk set."""

    manifest_path: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class StorageCommand:
    """Show the storage root, or switch storage mode when one is given."""

    mode: Optional[str] = None
    path: Optional[str] = None
    command: Literal["storage"] = "storage"


CommandRequest = (
    SplitCommand
    | MergeCommand
    | VerifyCommand
    | InfoCommand
    | StorageCommand
)
