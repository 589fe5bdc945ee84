"""Tests for verified reconstruction of chunk sets."""

import json
import zipfile

import pytest

from chunkstore.merger import MergeSession, MergeState, load_manifest, merge_file, verify_manifest
from chunkstore.splitter import split_file
from common.exceptions import (
    IntegrityError,
    ManifestFormatError,
    MissingChunkError,
    SourceNotFoundError,
    StorageIOError,
)
from common.types import ChunkSpec, ChunkUnit


def flip_byte(path, offset=0):
    data = bytearray(path.read_bytes())
    data[offset] ^= 0xFF
    path.write_bytes(bytes(data))


def chunk_artifact(result, index):
    entry = result.manifest.entry(index)
    if result.manifest.compressed:
        return result.chunk_dir / f'{entry.artifact_ref}.zip'
    return result.chunk_dir / entry.artifact_ref


class TestRoundTrip:
    """Test merge(split(f)) == f."""

    @pytest.mark.parametrize("compress", [False, True])
    @pytest.mark.parametrize("size", [1, 16 * 1024, 100_003, 1_000_000])
    def test_round_trip_identity(self, make_source, storage_root, compress, size):
        source = make_source(size)
        result = split_file(source, ChunkSpec(16, ChunkUnit.KILOBYTE), storage_root, compress=compress)

        output = merge_file(result.manifest_path)

        assert output == result.chunk_dir / source.name
        assert output.read_bytes() == source.path.read_bytes()

    @pytest.mark.parametrize("compress", [False, True])
    def test_empty_file(self, make_source, storage_root, small_spec, compress):
        source = make_source(0, name='empty.txt')
        result = split_file(source, small_spec, storage_root, compress=compress)

        output = merge_file(result.manifest_path)

        assert output.exists()
        assert output.read_bytes() == b""

    def test_source_named_like_manifest(self, make_source, storage_root, small_spec):
        source = make_source(40 * 1024, name='info.json')
        result = split_file(source, small_spec, storage_root)

        output = merge_file(result.manifest_path)

        assert output == result.manifest_path
        assert output.read_bytes() == source.path.read_bytes()
        assert not any(p.name.endswith('.partial') for p in result.chunk_dir.iterdir())

    def test_output_path_override(self, make_source, storage_root, small_spec, tmp_path):
        source = make_source(30_000)
        result = split_file(source, small_spec, storage_root)
        target = tmp_path / 'restored.bin'

        output = merge_file(result.manifest_path, target)

        assert output == target
        assert target.read_bytes() == source.path.read_bytes()

    def test_extracted_manifest_removed(self, make_source, storage_root, small_spec):
        source = make_source(30_000)
        result = split_file(source, small_spec, storage_root, compress=True)

        merge_file(result.manifest_path)

        assert not any(p.name.endswith('.extracted.json') for p in result.chunk_dir.iterdir())

    def test_session_reaches_confirmed(self, make_source, storage_root, small_spec):
        source = make_source(30_000)
        result = split_file(source, small_spec, storage_root)

        session = MergeSession(result.manifest_path)
        session.run()

        assert session.state is MergeState.CONFIRMED


class TestTamperDetection:
    """Test that corrupted or missing chunks stop the merge before output."""

    @pytest.mark.parametrize("compress", [False, True])
    @pytest.mark.parametrize("index,offset", [(1, 0), (2, 100), (3, -1)])
    def test_flipped_byte_detected_before_output(
        self, make_source, storage_root, small_spec, compress, index, offset
    ):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=compress)
        flip_byte(chunk_artifact(result, index), offset)

        with pytest.raises(IntegrityError) as exc_info:
            merge_file(result.manifest_path)

        assert exc_info.value.stage is MergeState.EXTRACTED
        assert not (result.chunk_dir / source.name).exists()

    @pytest.mark.parametrize("compress", [False, True])
    def test_missing_chunk_detected(self, make_source, storage_root, small_spec, compress):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=compress)
        chunk_artifact(result, 2).unlink()

        with pytest.raises(MissingChunkError):
            merge_file(result.manifest_path)

        assert not (result.chunk_dir / source.name).exists()

    def test_missing_table_entry_detected(self, make_source, storage_root, small_spec):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root)
        data = json.loads(result.manifest_path.read_text())
        del data['list']['2']
        result.manifest_path.write_text(json.dumps(data))

        with pytest.raises(MissingChunkError):
            merge_file(result.manifest_path)

    def test_chunk_count_mismatch_detected(self, make_source, storage_root, small_spec):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root)
        data = json.loads(result.manifest_path.read_text())
        data['chunk_count'] = 4
        result.manifest_path.write_text(json.dumps(data))

        with pytest.raises(IntegrityError):
            merge_file(result.manifest_path)

    def test_final_hash_mismatch_leaves_output(self, make_source, storage_root, small_spec):
        """Chunks agree with the table but not with the recorded file hash."""
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root)
        data = json.loads(result.manifest_path.read_text())
        data['file_hash'] = '0' * 64
        result.manifest_path.write_text(json.dumps(data))

        with pytest.raises(IntegrityError) as exc_info:
            merge_file(result.manifest_path)

        output = result.chunk_dir / source.name
        assert exc_info.value.stage is MergeState.RECONSTRUCTED
        assert exc_info.value.path == output
        assert output.read_bytes() == source.path.read_bytes()

    def test_final_hash_mismatch_compressed_removes_extracted_manifest(
        self, make_source, storage_root, small_spec
    ):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=True)
        with zipfile.ZipFile(result.manifest_path) as zf:
            data = json.loads(zf.read('content'))
        data['file_hash'] = '0' * 64
        with zipfile.ZipFile(result.manifest_path, 'w') as zf:
            zf.writestr('content', json.dumps(data))

        with pytest.raises(IntegrityError):
            merge_file(result.manifest_path)

        assert (result.chunk_dir / source.name).exists()
        assert not any(p.name.endswith('.extracted.json') for p in result.chunk_dir.iterdir())


class TestManifestHandles:
    """Test handle validation."""

    def test_missing_handle(self, tmp_path):
        with pytest.raises(SourceNotFoundError) as exc_info:
            merge_file(tmp_path / 'info.json')
        assert exc_info.value.stage is MergeState.START

    def test_malformed_manifest(self, tmp_path):
        handle = tmp_path / 'info.json'
        handle.write_text('{"file_name": 1}')

        with pytest.raises(ManifestFormatError):
            merge_file(handle)

    def test_archive_without_content_entry(self, tmp_path):
        handle = tmp_path / 'manifest.zip'
        with zipfile.ZipFile(handle, 'w') as zf:
            zf.writestr('other', '{}')

        with pytest.raises(ManifestFormatError):
            merge_file(handle)
        assert [p.name for p in tmp_path.iterdir()] == ['manifest.zip']

    def test_corrupted_manifest_archive(self, make_source, storage_root, small_spec, corrupt_archive_entry):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=True)
        corrupt_archive_entry(result.manifest_path)

        with pytest.raises(ManifestFormatError) as exc_info:
            merge_file(result.manifest_path)

        assert exc_info.value.stage is MergeState.START
        assert not (result.chunk_dir / source.name).exists()
        assert not any(p.name.endswith('.extracted.json') for p in result.chunk_dir.iterdir())

    def test_corrupted_chunk_archive_detected(self, make_source, storage_root, small_spec, corrupt_archive_entry):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=True)
        corrupt_archive_entry(chunk_artifact(result, 2))

        with pytest.raises(IntegrityError):
            merge_file(result.manifest_path)
        assert not (result.chunk_dir / source.name).exists()

    def test_output_colliding_with_chunk_rejected(self, make_source, storage_root, small_spec):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root)

        with pytest.raises(StorageIOError):
            merge_file(result.manifest_path, result.chunk_dir / 'chunk.00000001')


class TestVerifyAndLoad:
    """Test verification without output."""

    @pytest.mark.parametrize("compress", [False, True])
    def test_verify_manifest(self, make_source, storage_root, small_spec, compress):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=compress)

        manifest = verify_manifest(result.manifest_path)

        assert manifest == result.manifest
        assert not (result.chunk_dir / source.name).exists()

    def test_verify_manifest_detects_tampering(self, make_source, storage_root, small_spec):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root)
        flip_byte(chunk_artifact(result, 1))

        with pytest.raises(IntegrityError):
            verify_manifest(result.manifest_path)

    def test_load_manifest_from_archive(self, make_source, storage_root, small_spec):
        source = make_source(40 * 1024)
        result = split_file(source, small_spec, storage_root, compress=True)

        assert load_manifest(result.manifest_path) == result.manifest
