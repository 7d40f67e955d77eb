"""Django app configuration for files app."""

from typing import override

from django.apps import AppConfig


class FilesConfig(AppConfig):
    """Byte store metadata and the file API."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.files'
    verbose_name = 'File storage'

    @override
    def ready(self) -> None:
        """Connect the post_delete handler that removes leftover bytes."""
        from server.apps.files import signals  # noqa: F401
