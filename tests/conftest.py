"""Shared pytest fixtures for all tests."""

import random
import struct
import zipfile

import pytest
from pathlib import Path

from chunkstore.source_file import SourceFile
from cli.config import Config
from common.types import ChunkSpec, ChunkUnit


def write_random_file(path: Path, size: int, seed: int = 1234) -> Path:
    """Write ``size`` deterministic pseudo-random bytes to ``path``."""
    path.write_bytes(random.Random(seed).randbytes(size))
    return path


@pytest.fixture
def storage_root(tmp_path):
    """
    Create temporary storage root for chunk directories.

    Returns:
        Path to empty storage root
    """
    root = tmp_path / 'storages'
    root.mkdir()
    return root


@pytest.fixture
def source_dir(tmp_path):
    """Directory holding source files, separate from the storage root."""
    directory = tmp_path / 'sources'
    directory.mkdir()
    return directory


@pytest.fixture
def write_source(source_dir):
    """
    Factory writing pseudo-random files into the source directory.

    Returns:
        Callable (name, size, seed=1234) -> Path
    """
    def _write(name: str, size: int, seed: int = 1234) -> Path:
        return write_random_file(source_dir / name, size, seed)
    return _write


@pytest.fixture
def make_source(write_source):
    """
    Factory creating assigned source files of a given size.

    Returns:
        Callable (size, name='data.bin', seed=1234) -> SourceFile
    """
    def _make(size: int, name: str = 'data.bin', seed: int = 1234) -> SourceFile:
        return SourceFile.assign(write_source(name, size, seed))
    return _make


@pytest.fixture
def small_spec():
    """Smallest honored chunk size (16 KiB) to keep chunk counts readable."""
    return ChunkSpec(unit_size=16, unit=ChunkUnit.KILOBYTE)


@pytest.fixture
def corrupt_archive_entry():
    """
    Corrupt the compressed bytes of an archive entry, keeping the ZIP directory intact.

    Returns:
        Callable (archive_path, entry_name='content') -> None
    """
    def _corrupt(archive_path: Path, entry_name: str = 'content') -> None:
        with zipfile.ZipFile(archive_path) as zf:
            info = zf.getinfo(entry_name)
        data = bytearray(archive_path.read_bytes())
        offset = info.header_offset
        name_len, extra_len = struct.unpack('<HH', data[offset + 26:offset + 30])
        start = offset + 30 + name_len + extra_len
        for i in range(start, start + max(1, info.compress_size // 2)):
            data[i] ^= 0xFF
        archive_path.write_bytes(bytes(data))
    return _corrupt


@pytest.fixture
def temp_config(tmp_path, storage_root):
    """
    Create temporary config instance pointing at the test storage root.

    Returns:
        Config instance with temp config file
    """
    config = Config(tmp_path / '.chunkstore' / 'config.json')
    config.set_storage('custom', str(storage_root))
    return config
