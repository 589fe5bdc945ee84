"""Tests for single-entry archive containers."""

import zipfile

import pytest

from chunkstore.archive_codec import (
    ArchiveError,
    compress,
    decompress,
    extract_to,
    generate_archive_name,
    is_archive,
)
from common.constants import ARCHIVE_ENTRY_NAME


def test_compress_creates_single_entry_archive(tmp_path):
    source = tmp_path / 'chunk.00000001'
    source.write_bytes(b"x" * 5000)

    archive = compress(source)

    assert archive.parent == tmp_path
    assert archive.suffix == '.zip'
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == [ARCHIVE_ENTRY_NAME]
    assert decompress(archive) == b"x" * 5000


def test_compress_with_explicit_name(tmp_path):
    source = tmp_path / 'info.json'
    source.write_text('{}')

    archive = compress(source, archive_name='abc123')

    assert archive == tmp_path / 'abc123.zip'


def test_generated_names_do_not_collide(tmp_path):
    source = tmp_path / 'chunk.00000001'
    source.write_bytes(b"data")

    archives = {compress(source) for _ in range(20)}

    assert len(archives) == 20


def test_generate_archive_name_shape():
    millis, suffix = generate_archive_name().split('-')
    assert millis.isdigit()
    assert len(suffix) == 12


def test_extract_to_writes_content(tmp_path):
    source = tmp_path / 'info.json'
    source.write_text('{"a": 1}')
    archive = compress(source, archive_name='manifest')

    target = extract_to(archive, tmp_path / 'extracted.json')

    assert target.read_text() == '{"a": 1}'


def test_is_archive(tmp_path):
    plain = tmp_path / 'plain.json'
    plain.write_text('{}')
    archive = compress(plain)

    assert is_archive(archive)
    assert not is_archive(plain)
    assert not is_archive(tmp_path / 'missing.zip')


def test_decompress_rejects_non_zip(tmp_path):
    bogus = tmp_path / 'bogus.zip'
    bogus.write_bytes(b"not a zip file")

    with pytest.raises(ArchiveError):
        decompress(bogus)


def test_decompress_rejects_archive_without_content_entry(tmp_path):
    archive = tmp_path / 'other.zip'
    with zipfile.ZipFile(archive, 'w') as zf:
        zf.writestr('something-else', b'data')

    with pytest.raises(ArchiveError):
        decompress(archive)


def test_decompress_rejects_corrupted_entry(tmp_path, corrupt_archive_entry):
    source = tmp_path / 'info.json'
    source.write_text('{"file_name": "data.bin", "chunk_count": 3}' * 20)
    archive = compress(source, archive_name='manifest')
    corrupt_archive_entry(archive)

    with pytest.raises(ArchiveError):
        decompress(archive)
