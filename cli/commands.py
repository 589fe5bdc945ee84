"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from chunkstore.merger import load_manifest, merge_file, verify_manifest
from chunkstore.source_file import SourceFile
from chunkstore.splitter import split_file
from cli.config import Config
from cli.models import (
    InfoCommand,
    MergeCommand,
    SplitCommand,
    StorageCommand,
    VerifyCommand,
)
from cli.utils import format_file_size, format_manifest
from common.exceptions import SourceNotFoundError
from common.logging_config import get_logger
from common.types import ChunkSpec, ChunkUnit

logger = get_logger(__name__)


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        logger.debug("Loading CLI configuration")
        _config = Config(Path.home() / '.chunkstore' / 'config.json')
    return _config


def handle_split(cmd: SplitCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'split' command.

    Args:
        cmd: SplitCommand with file path and optional size/compression overrides
        config: Optional Config for dependency injection (testing)

    Returns:
        Summary of the created chunk set

    Raises:
        ChunkStoreException: If the split fails
    """
    if config is None:
        config = get_config()

    spec = config.get_chunk_spec()
    if cmd.unit_size is not None or cmd.unit is not None:
        spec = ChunkSpec(
            unit_size=cmd.unit_size if cmd.unit_size is not None else spec.unit_size,
            unit=ChunkUnit(cmd.unit) if cmd.unit is not None else spec.unit,
        )
    compress = config.get_compress() if cmd.compress is None else cmd.compress

    logger.info(f"Executing split command: file={cmd.file_path} compress={compress}")
    source = SourceFile.assign(cmd.file_path)
    if not source.exists:
        raise SourceNotFoundError(f"File not found: {cmd.file_path}", path=Path(cmd.file_path))

    result = split_file(source, spec, config.get_storage_root(), compress=compress)
    manifest = result.manifest
    return (
        f"Split {manifest.file_name} ({format_file_size(manifest.file_size)}) into "
        f"{manifest.chunk_count} chunk(s) of {format_file_size(manifest.chunk_size)}\n"
        f"Manifest: {result.manifest_path}"
    )


def handle_merge(cmd: MergeCommand) -> str:
    """
    Handle 'merge' command.

    Args:
        cmd: MergeCommand with manifest path and optional output path

    Returns:
        Location of the reconstructed file

    Raises:
        ChunkStoreException: If verification or reconstruction fails
    """
    logger.info(f"Executing merge command: manifest={cmd.manifest_path} output={cmd.output_path}")
    output_path = Path(cmd.output_path) if cmd.output_path else None
    result = merge_file(Path(cmd.manifest_path), output_path)
    return f"Merged and verified: {result}"


def handle_verify(cmd: VerifyCommand) -> str:
    """
    Handle 'verify' command.

    Args:
        cmd: VerifyCommand with manifest path

    Returns:
        Confirmation message

    Raises:
        ChunkStoreException: If any chunk is missing or does not match
    """
    manifest = verify_manifest(Path(cmd.manifest_path))
    return f"All {manifest.chunk_count} chunk(s) of {manifest.file_name} verified"


def handle_info(cmd: InfoCommand) -> str:
    """
    Handle 'info' command.

    Args:
        cmd: InfoCommand with manifest path

    Returns:
        Formatted manifest
    """
    return format_manifest(load_manifest(Path(cmd.manifest_path)))


def handle_storage(cmd: StorageCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'storage' command.

    Args:
        cmd: StorageCommand, with a mode to switch storage or without to show it
        config: Optional Config for dependency injection (testing)

    Returns:
        Current storage root
    """
    if config is None:
        config = get_config()
    if cmd.mode is not None:
        config.set_storage(cmd.mode, cmd.path)
        logger.info(f"Storage mode set to {cmd.mode}")
    return f"Storage ({config.data['storage_mode']}): {config.get_storage_root()}"
