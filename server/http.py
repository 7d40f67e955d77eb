"""JSON helpers shared by the API views."""

from django.http import JsonResponse


def error_response(message: str, status: int) -> JsonResponse:
    """Build the error body returned by every API endpoint.

    Args:
        message: Human readable description.
        status: HTTP status code, repeated in the body as ``id``.

    Returns:
        JSON response with ``message`` and ``id``.
    """
    return JsonResponse({'message': message, 'id': status}, status=status)
