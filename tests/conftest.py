"""Shared fixtures for the whole test suite."""

import pytest
from django.contrib.auth import get_user_model

from server.apps.tokens.logic.token_operations import issue_token

User = get_user_model()


@pytest.fixture(autouse=True)
def byte_store_dir(settings, tmp_path):
    """Point the default storage at a fresh temporary directory.

    Args:
        settings: pytest-django settings fixture.
        tmp_path: Per-test temporary directory.

    Returns:
        Path of the storage directory.
    """
    location = tmp_path / 'uploads'
    settings.STORAGES = {
        'default': {
            'BACKEND': (
                'server.apps.files.infrastructure.storage.LocalFileStorage'
            ),
            'OPTIONS': {'location': str(location)},
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }
    return location


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='alice',
        password='alicepass123',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='bob',
        password='bobpass123',
    )


@pytest.fixture
def token(user):
    """Issue an active bearer token for ``user``.

    Returns:
        Token value.
    """
    return issue_token(user)


@pytest.fixture
def auth_headers(token):
    """Request headers authenticating as ``user``.

    Returns:
        Headers dict for the test client.
    """
    return {'Authorization': f'Bearer {token}'}
