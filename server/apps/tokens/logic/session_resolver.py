"""Resolution of bearer tokens into the acting user of a request."""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Final

from server.apps.tokens.exceptions import UnauthorizedError
from server.apps.tokens.logic.token_operations import (
    is_valid_token,
    resolve_user,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

_BEARER_PREFIX: Final = 'Bearer '

# Checked in order, the first header present wins
_TOKEN_HEADERS: Final = ('Authorization', 'auth-token')


def _strip_bearer(header_value: str) -> str:
    if header_value.startswith(_BEARER_PREFIX):
        return header_value[len(_BEARER_PREFIX):]
    return header_value


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """Get the token value sent with a request.

    ``Authorization`` must use the Bearer scheme. ``auth-token`` may
    carry the value with or without the ``Bearer`` prefix.

    Args:
        headers: Request headers (case-insensitive mapping).

    Returns:
        Token value, or None if no usable header is present.
    """
    authorization = headers.get(_TOKEN_HEADERS[0])
    if authorization and authorization.startswith(_BEARER_PREFIX):
        return _strip_bearer(authorization).strip() or None

    auth_token = headers.get(_TOKEN_HEADERS[1])
    if auth_token:
        return _strip_bearer(auth_token).strip() or None

    return None


def resolve_principal(token_value: str | None) -> 'User':
    """Turn a bearer token into the user acting in this request.

    Args:
        token_value: Token value from the request, if any.

    Returns:
        User owning the token.

    Raises:
        UnauthorizedError: If the token is missing, unknown, inactive,
            or not linked to a user.
    """
    if not token_value:
        logger.warning('Request without bearer token')
        raise UnauthorizedError('Missing token')

    if not is_valid_token(token_value):
        logger.warning('Invalid token received: %s', token_value[:8])
        raise UnauthorizedError('Invalid token')

    user = resolve_user(token_value)
    if user is None:
        # Validated a moment ago: the store changed underneath us
        logger.error('User not found with token: %s', token_value[:8])
        raise UnauthorizedError('User not found')

    return user
