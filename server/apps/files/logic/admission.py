"""Upload admission check.

Screens an incoming upload before the storage engine sees it.
Nothing here touches storage or the database.
"""

import logging
from typing import BinaryIO

from django.conf import settings

from server.apps.files.exceptions import (
    PayloadTooLargeError,
    RejectionReason,
    UploadRejectedError,
)
from server.apps.files.infrastructure.metadata import (
    get_file_extension,
    get_file_size,
)

logger = logging.getLogger(__name__)


def get_allowed_extensions() -> tuple[str, ...]:
    """Get the extension allow-list.

    Returns:
        Allowed extensions from settings, without leading dots.
    """
    return tuple(
        getattr(
            settings,
            'FILES_ALLOWED_EXTENSIONS',
            ('jpeg', 'pdf', 'docx', 'txt'),
        ),
    )


def get_max_upload_size() -> int:
    """Get the upload size ceiling.

    Returns:
        Maximum size in bytes from settings or default of 10 MiB.
    """
    return getattr(settings, 'FILES_MAX_UPLOAD_SIZE', 10 * 1024 * 1024)


def admit_upload(file_obj: BinaryIO | None) -> None:
    """Check that an upload may be stored.

    Checks run in order and the first failure wins: empty payload,
    missing filename, extension not allowed, payload too large.

    Args:
        file_obj: Uploaded file; its ``name`` is the target filename.

    Raises:
        UploadRejectedError: With the reason of the first failed check.
        PayloadTooLargeError: If the payload exceeds the size ceiling.
    """
    size_bytes = get_file_size(file_obj) if file_obj is not None else 0
    if size_bytes == 0:
        logger.warning('Upload rejected: empty payload')
        raise UploadRejectedError(
            RejectionReason.EMPTY_PAYLOAD,
            'File is missing or empty',
        )

    filename = getattr(file_obj, 'name', None)
    if not isinstance(filename, str) or not filename.strip():
        logger.warning('Upload rejected: filename is missing')
        raise UploadRejectedError(
            RejectionReason.MISSING_FILENAME,
            'Filename is missing',
        )

    extension = get_file_extension(filename)
    if extension not in get_allowed_extensions():
        logger.warning('Upload rejected: unsupported extension %r', extension)
        raise UploadRejectedError(
            RejectionReason.EXTENSION_NOT_ALLOWED,
            f'File extension is not allowed: {extension!r}',
        )

    max_bytes = get_max_upload_size()
    if size_bytes > max_bytes:
        logger.warning(
            'Upload rejected: %s is too large (%d > %d bytes)',
            filename,
            size_bytes,
            max_bytes,
        )
        raise PayloadTooLargeError(size_bytes, max_bytes)
