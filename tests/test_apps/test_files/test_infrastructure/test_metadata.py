"""Tests for metadata utilities."""

import zlib
from io import BytesIO

import pytest
from django.core.files.base import ContentFile

from server.apps.files.exceptions import InvalidArgumentError
from server.apps.files.infrastructure.metadata import (
    calculate_checksum,
    get_file_extension,
    get_file_size,
    validate_filename,
)


def test_calculate_checksum_known_values():
    """Test CRC32 checksum against published reference values."""
    assert calculate_checksum(BytesIO(b'123456789')) == 'cbf43926'
    assert calculate_checksum(
        BytesIO(b'The quick brown fox jumps over the lazy dog'),
    ) == '414fa339'


def test_calculate_checksum_empty():
    """Test checksum of an empty stream."""
    assert calculate_checksum(BytesIO(b'')) == '0'


def test_calculate_checksum_spans_chunks():
    """Test that content larger than one chunk is folded completely."""
    payload = bytes(range(256)) * 100  # 25600 bytes, several chunks

    checksum = calculate_checksum(BytesIO(payload))

    assert checksum == format(zlib.crc32(payload), 'x')


def test_calculate_checksum_rewinds():
    """Test that the stream is readable again after checksumming."""
    file_obj = ContentFile(b'test content')
    file_obj.read(4)

    first = calculate_checksum(file_obj)

    assert file_obj.read() == b'test content'
    file_obj.seek(0)
    assert calculate_checksum(file_obj) == first


def test_calculate_checksum_lowercase_hex():
    """Test output format."""
    checksum = calculate_checksum(ContentFile(b'test content'))

    assert checksum == checksum.lower()
    int(checksum, 16)  # Valid hex
    assert len(checksum) <= 8


def test_get_file_size():
    """Test size from .size attribute and from reading the stream."""
    assert get_file_size(ContentFile(b'12345')) == 5

    stream = BytesIO(b'1234567')
    assert get_file_size(stream) == 7
    assert stream.read() == b'1234567'


def test_get_file_extension():
    """Test file extension extraction."""
    assert get_file_extension('test.pdf') == 'pdf'
    assert get_file_extension('test.TXT') == 'TXT'  # Case preserved
    assert get_file_extension('test') == ''  # No extension
    assert get_file_extension('test.tar.gz') == 'gz'  # Last extension
    assert get_file_extension('.bashrc') == ''  # Leading dot only
    assert get_file_extension('name.') == ''  # Trailing dot


@pytest.mark.parametrize('filename', [
    'report.txt',
    'my report (1).pdf',
    '.hidden',
])
def test_validate_filename_valid(filename):
    """Test that plain names pass validation unchanged."""
    assert validate_filename(filename) == filename


@pytest.mark.parametrize('filename', [
    None,
    '',
    '   ',
    'docs/report.txt',
    '..\\report.txt',
    '.',
    '..',
    'bad\x00name.txt',
    'a' * 256,
    'я' * 200 + '.txt',
])
def test_validate_filename_invalid(filename):
    """Test that blank and non-flat names are rejected."""
    with pytest.raises(InvalidArgumentError):
        validate_filename(filename)


def test_validate_filename_length_limit():
    """Test that the limit counts encoded bytes, not characters."""
    assert validate_filename('a' * 251 + '.txt') == 'a' * 251 + '.txt'

    with pytest.raises(InvalidArgumentError, match='too long'):
        validate_filename('я' * 126 + '.txt')  # 256 bytes
