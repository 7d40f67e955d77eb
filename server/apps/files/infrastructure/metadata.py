"""Metadata extraction utilities for files."""

import zlib
from typing import BinaryIO, Final

from server.apps.files.exceptions import InvalidArgumentError

_CHUNK_SIZE: Final = 8192  # 8KB chunks for checksum calculation

# Names that would escape or alias the flat storage directory
_RESERVED_NAMES: Final = frozenset(('.', '..'))

# Common filesystem limit on one path component, in encoded bytes
_FILENAME_MAX_BYTES: Final = 255


def calculate_checksum(file_obj: BinaryIO) -> str:
    """Calculate CRC32 checksum of file.

    Reads file in chunks to handle large files efficiently.
    Resets file pointer to beginning after calculation.

    Args:
        file_obj: File-like object to checksum.

    Returns:
        Lowercase hex CRC32 value, without zero padding.
    """
    crc = 0

    # Reset file pointer to beginning
    file_obj.seek(0)

    # Read in chunks to handle large files
    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        crc = zlib.crc32(chunk, crc)

    # Reset file pointer to beginning for subsequent operations
    file_obj.seek(0)

    return format(crc, 'x')


def get_file_size(file_obj: BinaryIO) -> int:
    """Get file size from file object.

    Args:
        file_obj: File-like object.

    Returns:
        File size in bytes.
    """
    size = getattr(file_obj, 'size', None)
    if size is not None:
        return size
    file_obj.seek(0)
    file_size = len(file_obj.read())
    file_obj.seek(0)
    return file_size


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    The extension is whatever follows the last dot, as written (no case
    folding). A leading dot ('.bashrc') or a trailing dot ('name.') means
    there is no extension.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot (e.g., 'pdf').
        Returns empty string if no extension.
    """
    index = filename.rfind('.')
    if 0 < index < len(filename) - 1:
        return filename[index + 1:]
    return ''


def validate_filename(filename: str | None) -> str:
    """Validate a byte store key.

    The byte store is a single flat directory, so a filename must be a
    plain name: not blank, no path separators, no relative references
    and at most 255 bytes once UTF-8 encoded.

    Args:
        filename: Proposed filename.

    Returns:
        The filename unchanged.

    Raises:
        InvalidArgumentError: If the filename is not a plain name.
    """
    if filename is None or not filename.strip():
        raise InvalidArgumentError('Filename cannot be empty')

    if '/' in filename or '\\' in filename:
        raise InvalidArgumentError(
            f'Filename must not contain path separators: {filename}',
        )

    if filename in _RESERVED_NAMES or '\x00' in filename:
        raise InvalidArgumentError(f'Invalid filename: {filename!r}')

    if len(filename.encode()) > _FILENAME_MAX_BYTES:
        raise InvalidArgumentError(
            f'Filename is too long (maximum: {_FILENAME_MAX_BYTES} bytes)',
        )

    return filename
