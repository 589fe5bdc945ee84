"""Project-wide constants (chunk sizes, artifact names, storage defaults)."""

import os

MIN_CHUNK_SIZE_BYTES: int = 16 * 1024  # 16 KiB smallest honored chunk size
DEFAULT_CHUNK_SIZE_BYTES: int = 64 * 1024  # used when a requested size is too small

DEFAULT_CHUNK_UNIT_SIZE: int = 256
DEFAULT_CHUNK_UNIT: str = "KB"

CHUNK_FILE_PREFIX: str = "chunk"
CHUNK_INDEX_WIDTH: int = 8
MANIFEST_FILE_NAME: str = "info.json"
EXTRACTED_MANIFEST_SUFFIX: str = ".extracted.json"

ARCHIVE_SUFFIX: str = ".zip"
ARCHIVE_ENTRY_NAME: str = "content"

COMPRESSION_NONE: str = "none"
COMPRESSION_ZIP: str = "zip"

STORAGES_DIR_NAME: str = "storages"

READ_WINDOW_BYTES: int = 1024 * 1024  # window for whole-file hashing

DEFAULT_STORAGE_MODE: str = os.environ.get("CHUNKSTORE_STORAGE_MODE", "temporary")
DEFAULT_STORAGE_PATH: str = os.environ.get("CHUNKSTORE_STORAGE_PATH", "")
