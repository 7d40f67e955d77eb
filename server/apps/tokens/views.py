"""Login and logout endpoints."""

import json
import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from server.apps.tokens.exceptions import UnauthorizedError
from server.apps.tokens.logic.session_resolver import extract_bearer_token
from server.apps.tokens.logic.token_operations import invalidate_token, login
from server.http import error_response

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def login_view(request: HttpRequest) -> JsonResponse:
    """Exchange ``{"login", "password"}`` for a bearer token."""
    try:
        body = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return error_response('Malformed JSON body', status=400)

    username = body.get('login') if isinstance(body, dict) else None
    password = body.get('password') if isinstance(body, dict) else None
    if not username or not password or not str(username).strip():
        return error_response('Missing login or password', status=400)

    try:
        token = login(str(username), str(password))
    except UnauthorizedError as error:
        return error_response(str(error), status=401)

    return JsonResponse({'auth-token': token, 'message': 'Success authorization'})


@csrf_exempt
@require_POST
def logout_view(request: HttpRequest) -> JsonResponse:
    """Deactivate the token the request was authenticated with."""
    token = extract_bearer_token(request.headers)
    if token is None:
        return error_response('Missing token', status=400)

    invalidate_token(token)
    return JsonResponse({'message': 'Logout successful'})
