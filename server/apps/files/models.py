"""Database models for files app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_FILENAME_MAX_LENGTH: Final = 255
_CHECKSUM_MAX_LENGTH: Final = 8  # CRC32 hex length


@final
class File(models.Model):
    """Metadata record of a file held in the byte store.

    The filename is both the byte store key and the unique identifier
    visible to clients. It is unique across the whole store, not per
    owner: two users can never hold the same filename at the same time.
    """

    # Owner relationship, fixed at creation
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    filename = models.CharField(
        max_length=_FILENAME_MAX_LENGTH,
        unique=True,
        help_text='Key of the byte object in storage',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    checksum = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        help_text='CRC32 of the content, lowercase hex',
    )

    # Timestamps
    uploaded_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        # Listing order must be stable for a fixed store state
        ordering: ClassVar[list[str]] = ['id']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner.username}:{self.filename}'
