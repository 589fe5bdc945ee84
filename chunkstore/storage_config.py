"""Storage root resolution for chunk directories."""

import sys
import tempfile
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from common.constants import STORAGES_DIR_NAME
from common.logging_config import get_logger

logger = get_logger(__name__)


class StorageMode(str, Enum):
    """Where chunk directories are stored."""

    APPLICATION = "application"
    TEMPORARY = "temporary"
    CUSTOM = "custom"


def application_storage_root(program_path: Optional[Path] = None) -> Path:
    """
    Storage root next to the installed program.

    Ascends three parent directories from the program path and descends into
    ``storages``.

    Args:
        program_path: Program location (default: ``sys.argv[0]``)
    """
    if program_path is None:
        program_path = Path(sys.argv[0] or '.')
    program_path = Path(program_path).resolve()
    parents = program_path.parents
    base = parents[2] if len(parents) > 2 else parents[-1]
    return base / STORAGES_DIR_NAME


def temporary_storage_root() -> Path:
    """Storage root under the platform temporary directory."""
    return Path(tempfile.gettempdir()) / STORAGES_DIR_NAME


def resolve_storage_root(
    mode: Union[StorageMode, str],
    custom_path: Optional[Path] = None,
    program_path: Optional[Path] = None,
) -> Path:
    """
    Resolve and create the storage root for a mode.

    Args:
        mode: One of StorageMode (or its string value)
        custom_path: Required for StorageMode.CUSTOM
        program_path: Override of the program location for StorageMode.APPLICATION

    Returns:
        Existing storage root directory

    Raises:
        ValueError: If the mode is unknown or CUSTOM is used without a path
        OSError: If the directory cannot be created
    """
    mode = StorageMode(mode)

    if mode is StorageMode.APPLICATION:
        root = application_storage_root(program_path)
    elif mode is StorageMode.TEMPORARY:
        root = temporary_storage_root()
    else:
        if not custom_path:
            raise ValueError("Custom storage mode requires a path")
        root = Path(custom_path).expanduser()

    root.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Storage root resolved [mode={mode.value}, path={root}]")
    return root
