"""Django admin configuration for tokens app."""

from typing import override

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.tokens.models import AuthToken


@admin.register(AuthToken)
class AuthTokenAdmin(admin.ModelAdmin[AuthToken]):
    """Admin interface for AuthToken model."""

    list_display = [
        'value_short',
        'user',
        'is_active',
        'created_at',
        'expires_at',
    ]

    list_filter = [
        'is_active',
        'expires_at',
    ]

    search_fields = [
        'user__username',
    ]

    readonly_fields = [
        'value',
        'user',
        'created_at',
        'expires_at',
    ]

    fieldsets = (
        ('Token Information', {
            'fields': ('value', 'user', 'is_active'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'expires_at'),
        }),
    )

    def value_short(self, obj: AuthToken) -> str:
        """Display truncated token value.

        Args:
            obj: AuthToken instance.

        Returns:
            First 8 characters of the value.
        """
        return obj.value[:8]
    value_short.short_description = 'Token'  # type: ignore[attr-defined]

    @override
    def get_queryset(self, request: HttpRequest) -> QuerySet[AuthToken]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')

    @override
    def has_add_permission(self, request: HttpRequest) -> bool:
        """Disable adding tokens via admin.

        Tokens are issued at login only.

        Args:
            request: HTTP request.

        Returns:
            False - tokens cannot be added manually.
        """
        return False
