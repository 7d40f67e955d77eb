"""Django storage configuration for the byte store.

Two backends share the same behaviour:
- ``local``: one flat directory on the filesystem (default)
- ``s3``: an S3-compatible bucket through django-storages
"""

from typing import Any, Final

from server.settings.components import BASE_DIR, config

_BACKEND: Final = config('FILES_STORAGE_BACKEND', default='local')

if _BACKEND == 's3':
    _DEFAULT_STORAGE: dict[str, Any] = {
        'BACKEND': 'server.apps.files.infrastructure.storage.S3FileStorage',
        'OPTIONS': {
            'bucket_name': config('AWS_STORAGE_BUCKET_NAME'),
            'access_key': config('AWS_ACCESS_KEY_ID'),
            'secret_key': config('AWS_SECRET_ACCESS_KEY'),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='auto',
            ),
            'file_overwrite': False,  # Conflicts are checked explicitly
            'default_acl': None,  # Inherit bucket ACL
        },
    }
else:
    _DEFAULT_STORAGE = {
        'BACKEND': 'server.apps.files.infrastructure.storage.LocalFileStorage',
        'OPTIONS': {
            'location': config(
                'FILES_UPLOAD_DIRECTORY',
                default=str(BASE_DIR.joinpath('uploads')),
            ),
        },
    }

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _DEFAULT_STORAGE,
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
