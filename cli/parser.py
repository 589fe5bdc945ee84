"""Command parser for CLI input."""

import shlex
from typing import Optional

from cli.models import (
    CommandRequest,
    InfoCommand,
    MergeCommand,
    SplitCommand,
    StorageCommand,
    VerifyCommand,
)
from chunkstore.storage_config import StorageMode
from common.types import ChunkUnit


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL or joined argv

    Returns:
        CommandRequest object (one of Split/Merge/Verify/Info/Storage)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "split":
        return _parse_split(tokens[1:])
    elif command_name == "merge":
        return _parse_merge(tokens[1:])
    elif command_name == "verify":
        return VerifyCommand(manifest_path=_single_manifest_arg("verify", tokens[1:]))
    elif command_name == "info":
        return InfoCommand(manifest_path=_single_manifest_arg("info", tokens[1:]))
    elif command_name == "storage":
        return _parse_storage(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_split(args: list[str]) -> SplitCommand:
    """Parse 'split <file> [--compress|--no-compress] [--size N] [--unit B|KB|MB]'."""
    file_path: Optional[str] = None
    compress: Optional[bool] = None
    unit_size: Optional[int] = None
    unit: Optional[str] = None

    remaining = list(args)
    while remaining:
        arg = remaining.pop(0)
        if arg == "--compress":
            compress = True
        elif arg == "--no-compress":
            compress = False
        elif arg == "--size":
            unit_size = _parse_size(_option_value("--size", remaining))
        elif arg == "--unit":
            unit = _parse_unit(_option_value("--unit", remaining))
        elif arg.startswith("--"):
            raise ParseError(f"Unknown option for split: {arg}")
        elif file_path is None:
            file_path = arg
        else:
            raise ParseError("split accepts exactly one file")

    if file_path is None:
        raise ParseError("split requires a file")

    return SplitCommand(file_path=file_path, compress=compress, unit_size=unit_size, unit=unit)


def _parse_merge(args: list[str]) -> MergeCommand:
    """Parse 'merge <manifest> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("merge requires 1 or 2 arguments: <manifest> [output_path]")

    manifest_path = args[0]
    output_path = args[1] if len(args) > 1 else None

    return MergeCommand(manifest_path=manifest_path, output_path=output_path)


def _parse_storage(args: list[str]) -> StorageCommand:
    """Parse 'storage [application|temporary|custom <path>]' command."""
    if not args:
        return StorageCommand()

    mode = args[0].lower()
    try:
        StorageMode(mode)
    except ValueError:
        raise ParseError(f"Invalid storage mode: {args[0]} (expected application, temporary or custom)")

    if mode == StorageMode.CUSTOM.value:
        if len(args) != 2:
            raise ParseError("storage custom requires exactly 1 path")
        return StorageCommand(mode=mode, path=args[1])

    if len(args) != 1:
        raise ParseError(f"storage {mode} takes no path")
    return StorageCommand(mode=mode)


def _single_manifest_arg(command_name: str, args: list[str]) -> str:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: <manifest>")
    return args[0]


def _option_value(option: str, remaining: list[str]) -> str:
    if not remaining:
        raise ParseError(f"{option} requires a value")
    return remaining.pop(0)


def _parse_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise ParseError(f"Invalid size: {value}")
    if size <= 0:
        raise ParseError("Size must be a positive integer")
    return size


def _parse_unit(value: str) -> str:
    unit = value.upper()
    try:
        ChunkUnit(unit)
    except ValueError:
        raise ParseError(f"Invalid unit: {value} (expected B, KB or MB)")
    return unit
