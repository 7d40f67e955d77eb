"""File upload and download settings."""

from decouple import Csv

from server.settings.components import config

# Extensions are compared case-sensitively, without the leading dot
FILES_ALLOWED_EXTENSIONS = config(
    'FILES_ALLOWED_EXTENSIONS',
    cast=Csv(post_process=tuple),
    default='jpeg,pdf,docx,txt',
)

# 10 MiB
FILES_MAX_UPLOAD_SIZE = config(
    'FILES_MAX_UPLOAD_SIZE',
    cast=int,
    default=10 * 1024 * 1024,
)

# Download by name is not restricted to the owner unless enabled
FILES_DOWNLOAD_REQUIRE_OWNERSHIP = config(
    'FILES_DOWNLOAD_REQUIRE_OWNERSHIP',
    cast=bool,
    default=False,
)

# Default page size for GET /list
FILES_DEFAULT_LIST_LIMIT = config(
    'FILES_DEFAULT_LIST_LIMIT',
    cast=int,
    default=10,
)
