"""File API endpoints.

Thin HTTP glue: parse the request, call the file operations with the
principal resolved by ``BearerTokenMiddleware``, map failures to status
codes.
"""

import json
import logging
from typing import Final

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.http import content_disposition_header
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from server.apps.files.exceptions import (
    FileConflictError,
    FileForbiddenError,
    FileNotFoundInStoreError,
    FileOperationError,
    InvalidArgumentError,
    PayloadTooLargeError,
    StorageFailureError,
)
from server.apps.files.logic.admission import admit_upload
from server.apps.files.logic.file_operations import (
    delete_file,
    download_file,
    list_files,
    rename_file,
    upload_file,
)
from server.http import error_response

logger = logging.getLogger(__name__)

# More specific classes first
_STATUS_BY_ERROR: Final = (
    (PayloadTooLargeError, 413),
    (InvalidArgumentError, 400),
    (FileForbiddenError, 403),
    (FileNotFoundInStoreError, 404),
    (FileConflictError, 409),
    (StorageFailureError, 500),
)


def _file_error_response(error: FileOperationError) -> JsonResponse:
    status = next(
        (code for error_type, code in _STATUS_BY_ERROR if isinstance(error, error_type)),
        500,
    )
    if status == 500:
        # Details stay in the logs
        logger.error('File operation failed: %s', error)
        return error_response('Internal server error', status=status)
    return error_response(str(error), status=status)


@csrf_exempt
@require_http_methods(['GET', 'POST', 'PUT', 'DELETE'])
def file_view(request: HttpRequest) -> HttpResponse:
    """Upload, download, rename or delete a single file."""
    principal = request.principal  # type: ignore[attr-defined]
    filename = request.GET.get('filename')

    try:
        if request.method == 'POST':
            uploaded = request.FILES.get('file')
            admit_upload(uploaded)
            upload_file(principal, uploaded)
            return JsonResponse({'message': 'Success upload'})

        if request.method == 'GET':
            return _download(request, filename)

        if request.method == 'PUT':
            return _rename(request, filename)

        delete_file(filename, principal)
        return JsonResponse({'message': 'Success delete'})
    except FileOperationError as error:
        return _file_error_response(error)


def _download(request: HttpRequest, filename: str | None) -> HttpResponse:
    owner = None
    if getattr(settings, 'FILES_DOWNLOAD_REQUIRE_OWNERSHIP', False):
        owner = request.principal  # type: ignore[attr-defined]

    content = download_file(filename, owner=owner)
    return HttpResponse(
        content,
        content_type='application/octet-stream',
        headers={
            'Content-Disposition': content_disposition_header(
                as_attachment=True,
                filename=filename,
            ),
        },
    )


def _rename(request: HttpRequest, filename: str | None) -> HttpResponse:
    try:
        body = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return error_response('Malformed JSON body', status=400)

    new_filename = body.get('filename') if isinstance(body, dict) else None
    if new_filename is not None and not isinstance(new_filename, str):
        return error_response('Filename must be a string', status=400)

    rename_file(
        filename,
        new_filename,
        request.principal,  # type: ignore[attr-defined]
    )
    return JsonResponse({'message': 'Success'})


@require_GET
def list_view(request: HttpRequest) -> HttpResponse:
    """List the caller's files as ``[{"filename", "size"}]``."""
    default_limit = getattr(settings, 'FILES_DEFAULT_LIST_LIMIT', 10)
    try:
        limit = int(request.GET.get('limit', default_limit))
    except ValueError:
        return error_response('Limit must be an integer', status=400)

    files = list_files(request.principal, limit)  # type: ignore[attr-defined]
    return JsonResponse(
        [{'filename': info.filename, 'size': info.size} for info in files],
        safe=False,
    )
