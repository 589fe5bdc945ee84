"""Splits a source file into fingerprinted chunk artifacts plus a manifest."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from chunkstore import archive_codec
from chunkstore.checksum_validator import IncrementalChecksumCalculator, compute_file_checksum
from chunkstore.chunk_storage import (
    clear_chunk_artifacts,
    delete_artifact,
    get_chunk_directory,
    get_manifest_path,
    read_source_windows,
    prepare_chunk_directory,
    remove_chunk_directory,
    write_atomic,
    write_chunk,
)
from chunkstore.manifest import Manifest
from chunkstore.source_file import SourceFile
from common.constants import COMPRESSION_NONE, COMPRESSION_ZIP
from common.exceptions import IntegrityError, SourceNotFoundError, StorageIOError
from common.logging_config import get_logger
from common.types import ChunkRecord, ChunkSpec

logger = get_logger(__name__)


@dataclass(frozen=True)
class SplitResult:
    """
    Outcome of a successful split.

    Attributes:
        manifest: The manifest that was written
        manifest_path: Handle to pass to merge (plain manifest or its archive)
        chunk_dir: Directory holding the chunk set
        chunks: Stored chunk records in index order
    """
    manifest: Manifest
    manifest_path: Path
    chunk_dir: Path
    chunks: Tuple[ChunkRecord, ...]


def split_file(
    source: SourceFile,
    spec: ChunkSpec,
    storage_root: Path,
    compress: bool = False,
) -> SplitResult:
    """
    Split ``source`` into chunks under ``storage_root / source.content_fingerprint``.

    Either the whole chunk set and its manifest are written, or every artifact
    of this split is removed before the error is raised (the chunk directory
    too when this call created it). A previous chunk set of the same content is
    replaced; other files in the chunk directory are kept.

    Args:
        source: Assigned source file
        spec: Requested chunk size (clamped, see ChunkSpec.effective_size)
        storage_root: Root directory of chunk directories
        compress: Wrap every chunk and the manifest in a ZIP archive

    Returns:
        SplitResult with the manifest and its handle

    Raises:
        SourceNotFoundError: If the source is in the absent state
        StorageIOError: If any read, write or create fails, or the source lies
            inside its own chunk directory
        PartialWriteError: If a chunk or the manifest is not fully written
        IntegrityError: If the source content changed since it was assigned
    """
    if not source.exists:
        raise SourceNotFoundError("Source file does not exist", path=source.path)

    chunk_size = spec.effective_size
    if chunk_size != spec.requested_size:
        logger.warning(
            f"Requested chunk size {spec.requested_size} bytes is below the minimum, "
            f"using {chunk_size} bytes"
        )

    chunk_dir = get_chunk_directory(storage_root, source.content_fingerprint)
    if chunk_dir.resolve() in Path(source.path).resolve().parents:
        raise StorageIOError(
            f"Source {source.path} lies inside its own chunk directory {chunk_dir}",
            path=source.path
        )

    logger.info(
        f"Splitting {source.name} ({source.size_bytes} bytes) into {chunk_size}-byte chunks "
        f"[dir={chunk_dir}, compress={compress}]"
    )

    created = False
    try:
        created = prepare_chunk_directory(chunk_dir)
        records = _store_chunks(source, chunk_dir, chunk_size, compress)

        manifest = _build_manifest(source, chunk_size, records, compress)
        manifest_path = _write_manifest(chunk_dir, manifest, compress)
    except Exception as e:
        logger.error(f"Split of {source.name} failed, removing its artifacts from {chunk_dir}: {e}")
        if created:
            remove_chunk_directory(chunk_dir)
        else:
            clear_chunk_artifacts(chunk_dir)
        if isinstance(e, OSError):
            raise StorageIOError(f"Split of {source.name} failed: {e}", path=chunk_dir) from e
        raise

    logger.info(f"Split {source.name} into {len(records)} chunks, manifest at {manifest_path}")
    return SplitResult(
        manifest=manifest,
        manifest_path=manifest_path,
        chunk_dir=chunk_dir,
        chunks=tuple(records),
    )


def _store_chunks(
    source: SourceFile,
    chunk_dir: Path,
    chunk_size: int,
    compress: bool,
) -> List[ChunkRecord]:
    """Write every window of the source as a chunk artifact."""
    records = []
    calculator = IncrementalChecksumCalculator()
    total = 0

    for index, window in enumerate(read_source_windows(source.path, chunk_size), start=1):
        calculator.update(window)
        total += len(window)
        records.append(_store_chunk(chunk_dir, index, window, compress))

    if total != source.size_bytes or calculator.finalize() != source.content_fingerprint:
        raise IntegrityError(
            f"{source.name} changed after it was assigned",
            path=source.path
        )
    return records


def _store_chunk(chunk_dir: Path, index: int, window: bytes, compress: bool) -> ChunkRecord:
    raw_path = write_chunk(chunk_dir, index, window)

    if not compress:
        fingerprint = compute_file_checksum(raw_path)
        logger.debug(f"Stored chunk {index} as {raw_path.name} [{len(window)} bytes]")
        return ChunkRecord(index=index, fingerprint=fingerprint, artifact_name=raw_path.name, size=len(window))

    archive_path = archive_codec.compress(raw_path)
    fingerprint = compute_file_checksum(archive_path)
    delete_artifact(raw_path)
    logger.debug(f"Stored chunk {index} as {archive_path.name} [{len(window)} bytes]")
    return ChunkRecord(index=index, fingerprint=fingerprint, artifact_name=archive_path.stem, size=len(window))


def _build_manifest(
    source: SourceFile,
    chunk_size: int,
    records: List[ChunkRecord],
    compress: bool,
) -> Manifest:
    if compress:
        chunk_list = {r.index: (r.fingerprint, r.artifact_name) for r in records}
    else:
        chunk_list = {r.index: r.fingerprint for r in records}

    return Manifest(
        file_name=source.name,
        file_hash=source.content_fingerprint,
        file_size=source.size_bytes,
        chunk_size=chunk_size,
        chunk_count=len(records),
        compression_mode=COMPRESSION_ZIP if compress else COMPRESSION_NONE,
        chunk_list=chunk_list,
    )


def _write_manifest(chunk_dir: Path, manifest: Manifest, compress: bool) -> Path:
    """
    Persist the manifest and return the handle for merging.

    In compressed mode the plain manifest is replaced by
    ``<source fingerprint>.zip``.
    """
    manifest_path = get_manifest_path(chunk_dir)
    write_atomic(manifest_path, manifest.to_json(info_file=manifest_path).encode("utf-8"))

    if not compress:
        return manifest_path

    archive_path = archive_codec.compress(manifest_path, archive_name=manifest.file_hash)
    delete_artifact(manifest_path)
    return archive_path
