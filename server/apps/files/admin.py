"""Django admin configuration for files app."""

from typing import override

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.models import File


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model.

    Records are read-only: renaming here would not move the bytes.
    Deleting is allowed, the post_delete signal removes the bytes.
    """

    list_display = [
        'filename',
        'owner',
        'size_display',
        'checksum',
        'uploaded_at',
    ]

    list_filter = [
        'uploaded_at',
        'owner',
    ]

    search_fields = [
        'filename',
        'checksum',
    ]

    readonly_fields = [
        'filename',
        'owner',
        'size_bytes',
        'checksum',
        'uploaded_at',
        'modified_at',
    ]

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    @override
    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')

    @override
    def has_add_permission(self, request: HttpRequest) -> bool:
        """Disable adding files via admin.

        Files are created by uploads only.

        Args:
            request: HTTP request.

        Returns:
            False - files cannot be added manually.
        """
        return False
