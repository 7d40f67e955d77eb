"""Lifecycle of bearer tokens.

Tokens are issued at login, reused while active, deactivated at logout
and deleted by a weekly sweep once expired. Validation looks at the
active flag only, unless ``TOKEN_ENFORCE_EXPIRY`` is enabled.
"""

import logging
import secrets
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Final

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from server.apps.tokens.exceptions import UnauthorizedError
from server.apps.tokens.models import AuthToken

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

# Token value length in bytes (generates 64 hex chars)
_TOKEN_BYTES: Final = 32

# Shown in logs instead of full token values
_LOG_PREFIX_LENGTH: Final = 8


def get_token_lifetime() -> timedelta:
    """Get how long a new token stays valid.

    Returns:
        Lifetime from settings or default of 24 hours.
    """
    return timedelta(hours=getattr(settings, 'TOKEN_LIFETIME_HOURS', 24))


def is_expiry_enforced() -> bool:
    """Check whether validation compares ``expires_at`` with now.

    Returns:
        Flag from settings, False by default (the sweep handles expiry).
    """
    return getattr(settings, 'TOKEN_ENFORCE_EXPIRY', False)


def _short(value: str) -> str:
    return value[:_LOG_PREFIX_LENGTH]


def issue_token(user: 'User') -> str:
    """Create a new active token for the user.

    Does not look for an existing active token, see ``obtain_token``.

    Args:
        user: Owner of the token.

    Returns:
        The new token value.
    """
    token = AuthToken.objects.create(
        user=user,
        value=secrets.token_hex(_TOKEN_BYTES),
        is_active=True,
        expires_at=timezone.now() + get_token_lifetime(),
    )

    logger.info(
        'Token issued for user %s: %s (expires %s)',
        user.username,
        _short(token.value),
        token.expires_at.isoformat(),
    )
    return token.value


def find_active_token(user: 'User') -> AuthToken | None:
    """Get the oldest active token of a user.

    Args:
        user: User to look up.

    Returns:
        AuthToken if the user has an active one, None otherwise.
    """
    tokens = AuthToken.objects.filter(user=user, is_active=True)
    if is_expiry_enforced():
        tokens = tokens.filter(expires_at__gt=timezone.now())
    return tokens.order_by('id').first()


def obtain_token(user: 'User') -> str:
    """Return the user's active token, issuing one if there is none.

    Args:
        user: User who logged in.

    Returns:
        Token value.
    """
    with transaction.atomic():
        existing = find_active_token(user)
        if existing is not None:
            logger.info(
                'Reusing active token for user %s: %s',
                user.username,
                _short(existing.value),
            )
            return existing.value

        return issue_token(user)


def login(username: str, password: str) -> str:
    """Check credentials and return a bearer token.

    Args:
        username: Login of the user.
        password: Raw password.

    Returns:
        Token value, reused when the user already has an active one.

    Raises:
        UnauthorizedError: If the user does not exist or the password
            does not match.
    """
    user_model = get_user_model()
    try:
        user = user_model.objects.get(username=username)
    except user_model.DoesNotExist:
        logger.warning('Login failed, user not found: %s', username)
        raise UnauthorizedError('Bad credentials') from None

    if not user.check_password(password):
        logger.warning('Login failed, wrong password for user: %s', username)
        raise UnauthorizedError('Bad credentials')

    logger.info('User authenticated successfully: %s', username)
    return obtain_token(user)


def _get_token(value: str) -> AuthToken | None:
    try:
        return AuthToken.objects.select_related('user').get(value=value)
    except AuthToken.DoesNotExist:
        return None


def is_valid_token(value: str) -> bool:
    """Check a bearer token value.

    Args:
        value: Token value presented by the client.

    Returns:
        True if a token with this value exists and is active (and, with
        expiry enforcement on, not yet expired).
    """
    token = _get_token(value)
    if token is None or not token.is_active:
        return False

    if is_expiry_enforced() and token.expires_at <= timezone.now():
        logger.info('Token expired: %s', _short(value))
        return False

    return True


def invalidate_token(value: str) -> None:
    """Deactivate a token.

    Unknown values are ignored.

    Args:
        value: Token value to deactivate.
    """
    updated = AuthToken.objects.filter(value=value).update(is_active=False)

    if updated:
        logger.info('Token deactivated: %s', _short(value))
    else:
        logger.warning('Token not found: %s', _short(value))


def resolve_user(value: str) -> 'User | None':
    """Get the owner of a token.

    Args:
        value: Token value.

    Returns:
        User owning the token, None if the value is unknown.
    """
    token = _get_token(value)
    if token is None:
        return None
    return token.user


def sweep_expired_tokens(now: datetime | None = None) -> int:
    """Delete every token whose expiry is in the past.

    Active and inactive tokens are treated the same.

    Args:
        now: Reference time, defaults to the current time.

    Returns:
        Number of tokens deleted.
    """
    cutoff = now or timezone.now()

    deleted, _ = AuthToken.objects.filter(expires_at__lt=cutoff).delete()

    logger.info('Swept %d expired tokens (cutoff %s)', deleted, cutoff)
    return deleted


def count_expired_tokens(now: datetime | None = None) -> int:
    """Count tokens the sweep would delete.

    Args:
        now: Reference time, defaults to the current time.

    Returns:
        Number of expired tokens.
    """
    cutoff = now or timezone.now()
    return AuthToken.objects.filter(expires_at__lt=cutoff).count()


def next_sweep_at(now: datetime | None = None) -> datetime:
    """Compute the next scheduled sweep.

    The sweep runs weekly on ``TOKEN_SWEEP_WEEKDAY`` (Monday is 0) at
    ``TOKEN_SWEEP_HOUR`` in the local ``TIME_ZONE``.

    Args:
        now: Reference time, defaults to the current time.

    Returns:
        Aware datetime in local time, strictly after ``now``.
    """
    local_now = timezone.localtime(now or timezone.now())
    weekday = getattr(settings, 'TOKEN_SWEEP_WEEKDAY', 6)
    hour = getattr(settings, 'TOKEN_SWEEP_HOUR', 0)

    days_ahead = (weekday - local_now.weekday()) % 7
    candidate = _at_local_hour(local_now.date() + timedelta(days=days_ahead), hour)
    if candidate <= local_now:
        candidate = _at_local_hour(candidate.date() + timedelta(days=7), hour)
    return candidate


def _at_local_hour(day: date, hour: int) -> datetime:
    return timezone.make_aware(datetime.combine(day, time(hour=hour)))
