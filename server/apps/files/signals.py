"""Signal handlers for files app."""

import logging

from django.core.files.storage import default_storage
from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.files.models import File

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=File)
def delete_file_from_storage(
    sender: type[File],
    instance: File,
    **kwargs: object,
) -> None:
    """Delete bytes left in storage when a File record is deleted.

    ``delete_file`` removes the bytes before the record, so for it this
    handler finds nothing to do. Deletions through the admin or a cascade
    from the owner's account rely on it to avoid orphaned bytes.

    Args:
        sender: The File model class.
        instance: The File instance being deleted.
        **kwargs: Additional signal arguments.
    """
    filename = instance.filename

    try:
        if default_storage.exists(filename):
            logger.info(
                'Deleting file from storage after DB delete: %s',
                filename,
            )
            default_storage.delete(filename)
    except Exception:
        # Log error but don't raise - DB delete already succeeded
        # check_storage_consistency reports the orphan
        logger.exception(
            'Failed to delete file from storage (orphaned): %s',
            filename,
        )
