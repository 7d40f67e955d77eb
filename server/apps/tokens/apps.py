"""Django app configuration for tokens app."""

from django.apps import AppConfig


class TokensConfig(AppConfig):
    """Configuration for tokens app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.tokens'
    verbose_name = 'Tokens'
