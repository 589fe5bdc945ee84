"""Configuration management for the chunkstore CLI."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from chunkstore.storage_config import StorageMode, resolve_storage_root
from common.constants import (
    DEFAULT_CHUNK_UNIT,
    DEFAULT_CHUNK_UNIT_SIZE,
    DEFAULT_STORAGE_MODE,
    DEFAULT_STORAGE_PATH,
)
from common.exceptions import ConfigurationError, StorageIOError
from common.logging_config import get_logger
from common.types import ChunkSpec, ChunkUnit

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "storage_mode": DEFAULT_STORAGE_MODE,
        "storage_path": DEFAULT_STORAGE_PATH,
        "chunk_size": DEFAULT_CHUNK_UNIT_SIZE,
        "chunk_unit": DEFAULT_CHUNK_UNIT,
        "compress": False,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.chunkstore/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.chunkstore' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Config file {self.config_path} unreadable, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except OSError as e:
                logger.warning(f"Could not write default config: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config: {e}")

    def get_storage_root(self) -> Path:
        """
        Resolve the configured storage root, creating it if needed.

        Returns:
            Existing storage root directory

        Raises:
            ConfigurationError: If the storage mode is invalid
            StorageIOError: If the storage root cannot be created
        """
        mode = self.data.get('storage_mode', DEFAULT_STORAGE_MODE)
        custom_path = self.data.get('storage_path') or None
        return self._resolve_storage(mode, custom_path)

    def set_storage(self, mode: str, path: Optional[str] = None) -> Path:
        """
        Set storage mode (and path for custom mode) and save to file.

        The setting is saved only once its storage root resolves.

        Returns:
            The new storage root

        Raises:
            ConfigurationError: If the mode is unknown or custom mode lacks a path
            StorageIOError: If the storage root cannot be created
        """
        root = self._resolve_storage(mode, path or None)
        self.data['storage_mode'] = StorageMode(mode).value
        self.data['storage_path'] = path or ""
        self.save()
        return root

    def _resolve_storage(self, mode: str, custom_path: Optional[str]) -> Path:
        try:
            return resolve_storage_root(mode, custom_path=custom_path)
        except ValueError as e:
            raise ConfigurationError(f"Invalid storage setting: {e}", path=self.config_path) from e
        except OSError as e:
            location = Path(custom_path) if custom_path else None
            raise StorageIOError(f"Storage root for mode '{mode}' is unusable: {e}", path=location) from e

    def get_chunk_spec(self) -> ChunkSpec:
        """
        Get the configured chunk size.

        Returns:
            ChunkSpec built from 'chunk_size' and 'chunk_unit'

        Raises:
            ConfigurationError: If either value is invalid
        """
        try:
            unit_size = int(self.data.get('chunk_size', DEFAULT_CHUNK_UNIT_SIZE))
            unit = ChunkUnit(str(self.data.get('chunk_unit', DEFAULT_CHUNK_UNIT)).upper())
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid chunk size setting: {e}", path=self.config_path) from e
        if unit_size <= 0:
            raise ConfigurationError(f"Chunk size must be positive, got {unit_size}", path=self.config_path)
        return ChunkSpec(unit_size=unit_size, unit=unit)

    def get_compress(self) -> bool:
        """
        Get whether chunks are compressed by default.

        Returns:
            True if split compresses chunks unless told otherwise
        """
        return bool(self.data.get('compress', False))
