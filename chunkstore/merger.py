"""Verifies a chunk set against its manifest and reconstructs the source file."""

from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from chunkstore import archive_codec
from chunkstore.archive_codec import ArchiveError
from chunkstore.checksum_validator import compute_file_checksum, verify_file_checksum
from chunkstore.chunk_storage import read_chunk
from chunkstore.manifest import Manifest, read_manifest_file
from common.constants import EXTRACTED_MANIFEST_SUFFIX
from common.exceptions import (
    ChunkStoreException,
    IntegrityError,
    ManifestFormatError,
    MissingChunkError,
    SourceNotFoundError,
    StorageIOError,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


class MergeState(str, Enum):
    """Progress of a single merge call. FAILED and CONFIRMED are terminal."""

    START = "start"
    EXTRACTED = "extracted"
    VERIFIED = "verified"
    RECONSTRUCTED = "reconstructed"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class MergeSession:
    """
    One merge of a chunk set back into its source file.

    Errors raised by ``run`` carry ``stage``: the last state reached before
    the failure. The extracted manifest of an archived handle is always
    removed; a reconstructed output failing the final fingerprint check is
    left on disk for the caller.
    """

    def __init__(self, manifest_handle: Union[str, Path], output_path: Optional[Path] = None):
        self.manifest_handle = Path(manifest_handle)
        self.chunk_dir = self.manifest_handle.parent
        self.requested_output = Path(output_path) if output_path is not None else None
        self.state = MergeState.START
        self.manifest: Optional[Manifest] = None
        self.output_path: Optional[Path] = None
        self._artifacts: Dict[int, Path] = {}

    def run(self) -> Path:
        """
        Execute the whole merge.

        Returns:
            Path of the reconstructed file

        Raises:
            SourceNotFoundError: If the manifest handle does not exist
            ManifestFormatError: If the manifest is malformed
            MissingChunkError: If a chunk is absent from the table or disk
            IntegrityError: If any fingerprint does not match
            StorageIOError: If reading or writing fails
        """
        self.load()
        self._guard(self._verify)
        self._guard(self._reconstruct)
        self._guard(self._confirm)
        logger.info(f"Merged {self.manifest.chunk_count} chunks into {self.output_path}")
        return self.output_path

    def load(self) -> Manifest:
        """Load the manifest without checking any chunk."""
        self._guard(self._extract)
        return self.manifest

    def verify_only(self) -> Manifest:
        """Load the manifest and run the verify-before-write pass."""
        self.load()
        self._guard(self._verify)
        return self.manifest

    def _guard(self, step) -> None:
        reached = self.state
        try:
            step()
        except ChunkStoreException as e:
            self.state = MergeState.FAILED
            e.stage = reached
            logger.error(f"Merge failed after {reached.value}: {e}")
            raise
        except OSError as e:
            self.state = MergeState.FAILED
            logger.error(f"Merge failed after {reached.value}: {e}")
            raise StorageIOError(f"Merge I/O failure: {e}", stage=reached) from e

    def _extract(self) -> None:
        handle = self.manifest_handle
        if not handle.is_file():
            raise SourceNotFoundError(f"Manifest {handle} does not exist", path=handle)

        if archive_codec.is_archive(handle):
            extracted = handle.with_name(f"{handle.stem}{EXTRACTED_MANIFEST_SUFFIX}")
            try:
                archive_codec.extract_to(handle, extracted)
                self.manifest = read_manifest_file(extracted)
            except ArchiveError as e:
                raise ManifestFormatError(str(e), path=handle) from e
            finally:
                if extracted.exists():
                    extracted.unlink()
        else:
            self.manifest = read_manifest_file(handle)

        self.output_path = self.requested_output or self.chunk_dir / self.manifest.file_name
        self.state = MergeState.EXTRACTED
        logger.debug(
            f"Loaded manifest for {self.manifest.file_name} "
            f"[chunks={self.manifest.chunk_count}, mode={self.manifest.compression_mode}]"
        )

    def _verify(self) -> None:
        manifest = self.manifest
        artifacts = {}

        if len(manifest.chunk_list) != manifest.chunk_count:
            raise MissingChunkError(
                f"Manifest lists {len(manifest.chunk_list)} chunks, expected {manifest.chunk_count}"
            )

        for index in range(1, manifest.chunk_count + 1):
            entry = manifest.entry(index)
            if entry is None:
                raise MissingChunkError(f"Chunk {index} is missing from the manifest")

            path = self._artifact_path(entry.artifact_ref)
            if not path.is_file():
                raise MissingChunkError(f"Chunk {index} artifact {path.name} is missing", path=path)

            if not verify_file_checksum(path, entry.fingerprint):
                raise IntegrityError(
                    f"Chunk {index} fingerprint mismatch: expected {entry.fingerprint}",
                    path=path
                )
            artifacts[index] = path

        # Replacing the loaded manifest handle is allowed; chunk artifacts are not.
        if self.output_path.resolve() in {p.resolve() for p in artifacts.values()}:
            raise StorageIOError(f"Output path {self.output_path} would overwrite a chunk artifact")

        self._artifacts = artifacts
        self.state = MergeState.VERIFIED
        logger.debug(f"Verified {len(artifacts)} chunks")

    def _reconstruct(self) -> None:
        partial = self.output_path.with_name(f".{self.output_path.name}.partial")
        try:
            with open(partial, 'wb') as out:
                for index in range(1, self.manifest.chunk_count + 1):
                    out.write(self._payload(index))
            partial.replace(self.output_path)
        finally:
            if partial.exists():
                partial.unlink()
        self.state = MergeState.RECONSTRUCTED

    def _confirm(self) -> None:
        actual = compute_file_checksum(self.output_path)
        if actual != self.manifest.file_hash:
            raise IntegrityError(
                f"Reconstructed file fingerprint mismatch: expected {self.manifest.file_hash}, got {actual}",
                path=self.output_path
            )
        self.state = MergeState.CONFIRMED

    def _artifact_path(self, artifact_ref: str) -> Path:
        if self.manifest.compressed:
            return archive_codec.archive_path_for(self.chunk_dir, artifact_ref)
        return self.chunk_dir / artifact_ref

    def _payload(self, index: int) -> bytes:
        path = self._artifacts[index]
        if not self.manifest.compressed:
            return read_chunk(path)
        try:
            return archive_codec.decompress(path)
        except ArchiveError as e:
            raise IntegrityError(f"Chunk {index} archive is unreadable: {e}", path=path) from e


def merge_file(manifest_handle: Union[str, Path], output_path: Optional[Path] = None) -> Path:
    """
    Reconstruct a split file from its manifest handle.

    Args:
        manifest_handle: Plain manifest or the archive wrapping it
        output_path: Destination (default: ``<handle directory>/<file_name>``)

    Returns:
        Path of the verified reconstructed file
    """
    return MergeSession(manifest_handle, output_path).run()


def verify_manifest(manifest_handle: Union[str, Path]) -> Manifest:
    """
    Check every chunk of a chunk set without writing any output.

    Returns:
        The verified manifest
    """
    return MergeSession(manifest_handle).verify_only()


def load_manifest(manifest_handle: Union[str, Path]) -> Manifest:
    """Load the manifest behind a plain or archived handle."""
    return MergeSession(manifest_handle).load()
