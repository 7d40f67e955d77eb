"""Database models for bearer token sessions."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

# 32 random bytes rendered as hex
_TOKEN_VALUE_MAX_LENGTH: Final = 64


@final
class AuthToken(models.Model):
    """Opaque bearer token standing in for a logged-in user.

    A user may hold several active tokens; login reuses the oldest one.
    Tokens past ``expires_at`` are removed by the weekly sweep whether
    active or not.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='auth_tokens',
        db_index=True,
    )

    value = models.CharField(
        max_length=_TOKEN_VALUE_MAX_LENGTH,
        unique=True,
        help_text='Bearer credential sent by clients',
    )

    is_active = models.BooleanField(
        default=True,
        help_text='False once the user logged out',
    )

    expires_at = models.DateTimeField(
        db_index=True,
        help_text='Removed by the sweep after this moment',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Auth Token'  # type: ignore[mutable-override]
        verbose_name_plural = 'Auth Tokens'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['id']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['user', 'is_active'],
                name='tokens_user_active_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        state = 'active' if self.is_active else 'inactive'
        return f'{self.user.username} ({self.value[:8]}, {state})'
