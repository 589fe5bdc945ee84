"""Single-entry ZIP containers wrapping chunk and manifest artifacts."""

import time
import uuid
import zipfile
import zlib
from pathlib import Path
from typing import Optional

from common.constants import ARCHIVE_ENTRY_NAME, ARCHIVE_SUFFIX
from common.logging_config import get_logger

logger = get_logger(__name__)


class ArchiveError(Exception):
    """Raised when an archive is unreadable or lacks its content entry."""

    pass


def generate_archive_name() -> str:
    """
    Generate a time-derived archive base name with a random suffix.

    Returns:
        Name such as "1760880000123-3f2a9c0d11be" (no extension)
    """
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


def archive_path_for(directory: Path, name: str) -> Path:
    """Return the path of the archive called ``name`` inside ``directory``."""
    return directory / f"{name}{ARCHIVE_SUFFIX}"


def is_archive(path: Path) -> bool:
    """Check whether ``path`` is a ZIP container."""
    path = Path(path)
    return path.is_file() and zipfile.is_zipfile(path)


def compress(path: Path, archive_name: Optional[str] = None) -> Path:
    """
    Wrap a file in a single-entry ZIP archive next to it.

    Args:
        path: File to wrap
        archive_name: Archive base name without extension. Generated when omitted;
            generated names never collide with an existing archive in the directory.

    Returns:
        Path of the created archive

    Raises:
        OSError: If the source cannot be read or the archive cannot be written
    """
    path = Path(path)
    if archive_name is None:
        archive_name = generate_archive_name()
        while archive_path_for(path.parent, archive_name).exists():
            archive_name = generate_archive_name()

    target = archive_path_for(path.parent, archive_name)
    with zipfile.ZipFile(target, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        archive.write(path, arcname=ARCHIVE_ENTRY_NAME)

    logger.debug(f"Compressed {path.name} -> {target.name}")
    return target


def decompress(archive_path: Path) -> bytes:
    """
    Read the content entry of a single-entry archive.

    Raises:
        ArchiveError: If the file is not a ZIP archive, the entry is missing or corrupted
        OSError: If the archive cannot be read
    """
    try:
        with zipfile.ZipFile(archive_path, 'r') as archive:
            return archive.read(ARCHIVE_ENTRY_NAME)
    except KeyError as e:
        raise ArchiveError(f"Archive {archive_path} has no '{ARCHIVE_ENTRY_NAME}' entry") from e
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Archive {archive_path} is not a valid ZIP file: {e}") from e
    except (zlib.error, EOFError) as e:
        raise ArchiveError(f"Archive {archive_path} has a corrupted '{ARCHIVE_ENTRY_NAME}' entry: {e}") from e


def extract_to(archive_path: Path, target: Path) -> Path:
    """
    Write the content entry of an archive to ``target``.

    Returns:
        ``target``
    """
    data = decompress(archive_path)
    target = Path(target)
    target.write_bytes(data)
    return target
