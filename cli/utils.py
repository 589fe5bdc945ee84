"""Utility functions for CLI output."""

from chunkstore.manifest import Manifest


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_manifest(manifest: Manifest) -> str:
    """Render a manifest as an aligned summary followed by its chunk table."""
    lines = [
        f"File:        {manifest.file_name}",
        f"Size:        {format_file_size(manifest.file_size)} ({manifest.file_size} bytes)",
        f"Fingerprint: {manifest.file_hash}",
        f"Chunk size:  {format_file_size(manifest.chunk_size)}",
        f"Chunks:      {manifest.chunk_count}",
        f"Compression: {manifest.compression_mode}",
    ]
    for index, entry in manifest.chunk_table.items():
        lines.append(f"  {index:>8}  {entry.fingerprint}  {entry.artifact_ref}")
    return "\n".join(lines)
