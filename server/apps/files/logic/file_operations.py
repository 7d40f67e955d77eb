"""Business logic for file operations.

Every operation touches two stores: the byte store (files addressed by
filename) and the ``File`` table. There is no transaction spanning both.
Each operation orders its steps so that a failure in the second store is
either undone in the first (best effort) or leaves a state that
``check_storage_consistency`` reports.

There is no locking per filename: concurrent upload/rename/delete of the
same filename can race.
"""

import logging
from typing import TYPE_CHECKING, Any, BinaryIO, NamedTuple

from django.core.files.storage import default_storage
from django.db import transaction

from server.apps.files.exceptions import (
    FileConflictError,
    FileForbiddenError,
    FileNotFoundInStoreError,
    StorageFailureError,
)
from server.apps.files.infrastructure.metadata import (
    calculate_checksum,
    get_file_size,
    validate_filename,
)
from server.apps.files.models import File

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import ByteStoreMixin

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)
integrity_logger = logging.getLogger('server.integrity')


class FileInfo(NamedTuple):
    """Public view of a file record in listings."""

    filename: str
    size: int


def _get_storage() -> 'ByteStoreMixin':
    """Get the configured default storage backend.

    Returns:
        Byte store instance from the STORAGES setting.
    """
    return default_storage  # type: ignore[return-value]


def _get_owned_file(filename: str, owner: _User, action: str) -> File:
    """Fetch a file record and check that ``owner`` may change it.

    Args:
        filename: Filename to look up.
        owner: Acting user.
        action: Verb used in log and error messages.

    Returns:
        File instance owned by ``owner``.

    Raises:
        FileNotFoundInStoreError: If no record has this filename.
        FileForbiddenError: If the record belongs to another user.
    """
    try:
        file_instance = File.objects.get(filename=filename)
    except File.DoesNotExist:
        logger.warning('File not found in database: %s', filename)
        raise FileNotFoundInStoreError(
            f'File not found: {filename}',
        ) from None

    if file_instance.owner_id != owner.pk:
        logger.warning(
            'User %s is not allowed to %s file %s',
            owner.username,
            action,
            filename,
        )
        raise FileForbiddenError(
            f'You do not have permission to {action} this file',
        )

    return file_instance


def _report_missing_bytes(filename: str) -> FileNotFoundInStoreError:
    integrity_logger.warning(
        'Record exists but bytes are missing from storage: %s',
        filename,
    )
    return FileNotFoundInStoreError(f'File not found: {filename}')


def upload_file(
    owner: _User,
    file_obj: BinaryIO,
    filename: str | None = None,
) -> File:
    """Store a new file and create its database record.

    Order: write bytes, compute checksum, insert record. If the checksum
    or the insert fails, the written bytes are deleted again (best
    effort; a failed rollback is logged as an orphaned file).

    Args:
        owner: Owner of the new file.
        file_obj: File-like object with the content.
        filename: Target filename, defaults to ``file_obj.name``.

    Returns:
        Created File instance.

    Raises:
        InvalidArgumentError: If the filename is blank or not flat.
        FileConflictError: If the filename is already taken.
        StorageFailureError: If the byte store or database fails.
    """
    if filename is None:
        filename = getattr(file_obj, 'name', None)
    filename = validate_filename(filename)
    storage = _get_storage()

    # Bytes are the source of truth for conflicts
    if storage.exists(filename):
        logger.warning('Upload conflict, file already exists: %s', filename)
        raise FileConflictError(f'File already exists: {filename}')

    if File.objects.filter(filename=filename).exists():
        integrity_logger.warning(
            'Upload blocked by a record without bytes: %s',
            filename,
        )
        raise FileConflictError(f'File already exists: {filename}')

    file_size = get_file_size(file_obj)

    # Step 1: Write bytes
    try:
        saved_name = storage.save(filename, file_obj)
    except FileExistsError as error:
        raise FileConflictError(
            f'File already exists: {filename}',
        ) from error
    except Exception as error:
        raise StorageFailureError(
            f'Failed to store file: {filename}',
        ) from error

    # Step 2: Checksum and database record
    try:
        checksum = calculate_checksum(file_obj)
        with transaction.atomic():
            file_instance = File.objects.create(
                owner=owner,
                filename=saved_name,
                size_bytes=file_size,
                checksum=checksum,
            )
    except Exception as error:
        logger.exception(
            'Failed to record file, rolling back storage write: %s',
            saved_name,
        )
        storage.rollback_upload(saved_name)
        raise StorageFailureError(
            f'Failed to store file: {filename}',
        ) from error

    logger.info(
        'File uploaded: %s (ID: %d, size: %d, owner: %s)',
        saved_name,
        file_instance.id,
        file_size,
        owner.username,
    )
    return file_instance


def download_file(filename: str, owner: _User | None = None) -> bytes:
    """Read the full content of a file.

    Without ``owner`` any stored object can be read by name. With
    ``owner`` the file must have a record owned by that user.

    Args:
        filename: Filename to read.
        owner: Optional user the file must belong to.

    Returns:
        File content.

    Raises:
        InvalidArgumentError: If the filename is blank or not flat.
        FileNotFoundInStoreError: If the bytes (or required record) are missing.
        FileForbiddenError: If ``owner`` is given and does not own the file.
        StorageFailureError: If reading fails.
    """
    validate_filename(filename)
    if owner is not None:
        _get_owned_file(filename, owner, 'download')

    storage = _get_storage()
    if not storage.exists(filename):
        if owner is not None:
            raise _report_missing_bytes(filename)
        logger.warning('File not found in storage: %s', filename)
        raise FileNotFoundInStoreError(f'File not found: {filename}')

    try:
        content = storage.read_bytes(filename)
    except FileNotFoundError as error:
        raise FileNotFoundInStoreError(
            f'File not found: {filename}',
        ) from error
    except Exception as error:
        logger.exception('Failed to read file: %s', filename)
        raise StorageFailureError(
            f'Failed to read file: {filename}',
        ) from error

    logger.debug('File downloaded: %s (%d bytes)', filename, len(content))
    return content


def rename_file(old_filename: str, new_filename: str, owner: _User) -> File:
    """Rename a file in storage and in the database.

    The bytes are moved first (replacing any orphaned object at the new
    name), then the record is updated. If the record update fails the
    bytes are moved back (best effort).

    Args:
        old_filename: Current filename.
        new_filename: New filename.
        owner: Acting user, must own the file.

    Returns:
        Updated File instance.

    Raises:
        FileNotFoundInStoreError: If the record or its bytes are missing.
        FileForbiddenError: If ``owner`` does not own the file.
        InvalidArgumentError: If either filename is blank or not flat.
        FileConflictError: If another record already uses ``new_filename``.
        StorageFailureError: If the move or the record update fails.
    """
    file_instance = _get_owned_file(old_filename, owner, 'rename')
    validate_filename(old_filename)
    validate_filename(new_filename)

    if old_filename == new_filename:
        return file_instance

    storage = _get_storage()
    if not storage.exists(old_filename):
        raise _report_missing_bytes(old_filename)

    if File.objects.filter(filename=new_filename).exists():
        logger.warning(
            'Rename conflict, file already exists: %s',
            new_filename,
        )
        raise FileConflictError(f'File already exists: {new_filename}')

    if storage.exists(new_filename):
        integrity_logger.warning(
            'Overwriting bytes without a record: %s',
            new_filename,
        )

    logger.info('Renaming file %s -> %s', old_filename, new_filename)

    # Step 1: Move bytes
    try:
        storage.move_object(old_filename, new_filename)
    except Exception as error:
        raise StorageFailureError(
            f'Failed to rename file: {old_filename}',
        ) from error

    # Step 2: Update database record
    try:
        with transaction.atomic():
            file_instance.filename = new_filename
            file_instance.save(update_fields=['filename', 'modified_at'])
    except Exception as error:
        logger.exception('Database update failed, moving file back')
        file_instance.filename = old_filename
        _move_back(storage, new_filename, old_filename)
        raise StorageFailureError(
            f'Failed to rename file: {old_filename}',
        ) from error

    logger.info('File renamed: %s -> %s', old_filename, new_filename)
    return file_instance


def _move_back(
    storage: 'ByteStoreMixin',
    current_name: str,
    original_name: str,
) -> None:
    try:
        storage.move_object(current_name, original_name)
    except Exception:
        # Record still points at original_name, bytes live at current_name
        integrity_logger.exception(
            'Failed to move file back, record is stale: %s (bytes at %s)',
            original_name,
            current_name,
        )


def list_files(owner: _User, limit: int = 0) -> list[FileInfo]:
    """List files owned by a user.

    Args:
        owner: Owner of files.
        limit: Maximum number of entries; zero or less means no limit.

    Returns:
        ``(filename, size)`` pairs in primary key order.
    """
    queryset = File.objects.filter(owner=owner).order_by('id').values_list(
        'filename',
        'size_bytes',
    )
    if limit > 0:
        queryset = queryset[:limit]

    return [FileInfo(filename, size) for filename, size in queryset]


def delete_file(filename: str, owner: _User) -> None:
    """Delete a file from storage and from the database.

    Bytes go first, then the record.

    Args:
        filename: Filename to delete.
        owner: Acting user, must own the file.

    Raises:
        FileNotFoundInStoreError: If the record or its bytes are missing.
        FileForbiddenError: If ``owner`` does not own the file.
        StorageFailureError: If the bytes or the record cannot be removed.
    """
    file_instance = _get_owned_file(filename, owner, 'delete')
    storage = _get_storage()

    if not storage.exists(filename):
        raise _report_missing_bytes(filename)

    logger.info('Deleting file: %s (ID: %d)', filename, file_instance.id)

    # Step 1: Delete bytes
    try:
        storage.delete(filename)
    except Exception as error:
        raise StorageFailureError(
            f'Failed to delete file: {filename}',
        ) from error

    # Step 2: Delete database record
    try:
        with transaction.atomic():
            file_instance.delete()
    except Exception as error:
        integrity_logger.exception(
            'Bytes deleted but record remains: %s',
            filename,
        )
        raise StorageFailureError(
            f'Failed to delete file: {filename}',
        ) from error

    logger.info('File deleted: %s', filename)
