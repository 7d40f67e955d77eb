"""Byte store backends.

Both backends keep every object at the top level of the store, keyed by
its filename. They never invent an alternative name for a taken key: the
caller decides what a conflict means.
"""

import logging
from typing import Any, final, override

from django.core.files.move import file_move_safe
from django.core.files.storage import FileSystemStorage
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


class ByteStoreMixin:
    """Shared behaviour for byte store backends.

    Adds to a Django storage backend:
    - Refusal to rename on conflict instead of picking a free name
    - Undo of a write whose record insert failed
    - Whole-object reads and moves
    """

    def get_available_name(
        self,
        name: str,
        max_length: int | None = None,
    ) -> str:
        """Return the name unchanged, or fail if it is taken.

        Args:
            name: Requested storage key.
            max_length: Unused, kept for the Storage API.

        Returns:
            The requested name.

        Raises:
            FileExistsError: If an object already exists under the name.
        """
        if self.exists(name):  # type: ignore[attr-defined]
            raise FileExistsError(name)
        return name

    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Write an object under exactly the requested key.

        Args:
            name: Storage key for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Storage key used (always the requested one).

        Raises:
            FileExistsError: If the key is already taken.
            Exception: If the backend write fails.
        """
        try:
            logger.info('Writing file to storage: %s', name)
            saved_name = super().save(  # type: ignore[misc]
                name,
                content,
                max_length,
            )
            logger.info('Successfully wrote file: %s', saved_name)
        except FileExistsError:
            logger.warning('Storage key already taken: %s', name)
            raise
        except Exception:
            logger.exception('Failed to write file to storage: %s', name)
            raise
        else:
            return saved_name

    def delete(self, name: str) -> None:
        """Delete an object, logging failures before re-raising them.

        Args:
            name: Storage key of file to delete.

        Raises:
            Exception: If the backend delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)  # type: ignore[misc]
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def read_bytes(self, name: str) -> bytes:
        """Read the full content of an object.

        Args:
            name: Storage key.

        Returns:
            Object content.
        """
        with self.open(name, 'rb') as stored:  # type: ignore[attr-defined]
            return stored.read()

    def rollback_upload(self, name: str) -> None:
        """Undo a write whose metadata record could not be created.

        Best effort: a failing delete is logged and swallowed, the caller
        is already reporting the original failure.

        Args:
            name: Storage key written by the failed upload.
        """
        try:
            logger.warning('Removing bytes of failed upload: %s', name)
            self.delete(name)
        except Exception:
            # The file stays in storage without a record;
            # check_storage_consistency reports it
            logger.exception(
                'Failed to rollback upload, orphaned file: %s',
                name,
            )

    def move_object(self, source: str, destination: str) -> None:
        """Move an object, replacing whatever is stored at destination.

        Args:
            source: Source storage key.
            destination: Destination storage key.
        """
        raise NotImplementedError


@final
class LocalFileStorage(ByteStoreMixin, FileSystemStorage):
    """Flat directory on the local filesystem."""

    @override
    def move_object(self, source: str, destination: str) -> None:
        """Rename a file inside the storage directory.

        Args:
            source: Source storage key.
            destination: Destination storage key.

        Raises:
            OSError: If the rename fails.
        """
        try:
            logger.info('Moving file: %s -> %s', source, destination)
            file_move_safe(
                self.path(source),
                self.path(destination),
                allow_overwrite=True,
            )
            logger.info('Moved file: %s -> %s', source, destination)
        except Exception:
            logger.exception('Move failed: %s -> %s', source, destination)
            raise


@final
class S3FileStorage(ByteStoreMixin, S3Storage):
    """S3-compatible bucket (MinIO, R2, AWS)."""

    @override
    def move_object(self, source: str, destination: str) -> None:
        """Copy the object to its new key, then delete the source.

        A failed delete after a successful copy leaves the source behind
        as bytes without a record.

        Args:
            source: Source storage key.
            destination: Destination storage key.

        Raises:
            Exception: If copy or delete fails.
        """
        try:
            logger.info('Moving file: %s -> %s', source, destination)
            self.bucket.copy(
                {'Bucket': self.bucket_name, 'Key': source},
                destination,
            )
            self.delete(source)
            logger.info('Moved file: %s -> %s', source, destination)
        except Exception:
            logger.exception('Move failed: %s -> %s', source, destination)
            raise
