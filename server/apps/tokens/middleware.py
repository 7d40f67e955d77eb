"""Bearer token authentication for the file API."""

import logging
from collections.abc import Callable
from typing import final

from django.conf import settings
from django.http import HttpRequest, HttpResponse

from server.apps.tokens.exceptions import UnauthorizedError
from server.apps.tokens.logic.session_resolver import (
    extract_bearer_token,
    resolve_principal,
)
from server.http import error_response

logger = logging.getLogger(__name__)


def is_exempt_path(path: str) -> bool:
    """Check whether a path skips token resolution.

    Entries of ``TOKEN_AUTH_EXEMPT_PATHS`` ending with a slash match as
    prefixes, other entries must match exactly.

    Args:
        path: Request path.

    Returns:
        True if the request needs no bearer token.
    """
    for exempt in getattr(settings, 'TOKEN_AUTH_EXEMPT_PATHS', ()):
        if exempt.endswith('/'):
            if path.startswith(exempt):
                return True
        elif path == exempt:
            return True
    return False


@final
class BearerTokenMiddleware:
    """Resolve the request's bearer token into ``request.principal``.

    Requests that fail resolution never reach a view: they get a 401
    JSON response. OPTIONS requests and exempt paths pass through
    untouched.
    """

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
    ) -> None:
        """Initialize the middleware.

        Args:
            get_response: Next handler in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Authenticate the request, then pass it on.

        Args:
            request: Incoming request.

        Returns:
            Response of the next handler, or 401.
        """
        if request.method == 'OPTIONS' or is_exempt_path(request.path):
            return self.get_response(request)

        try:
            principal = resolve_principal(extract_bearer_token(request.headers))
        except UnauthorizedError as error:
            return error_response(str(error), status=401)

        request.principal = principal  # type: ignore[attr-defined]
        return self.get_response(request)
