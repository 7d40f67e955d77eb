"""Exceptions for files app.

Every failure of a file operation is a ``FileOperationError`` subclass so
the HTTP layer can map it to a status code in one place.
"""

import enum


class FileOperationError(Exception):
    """Base class for file operation failures."""


class InvalidArgumentError(FileOperationError):
    """Raised for malformed or missing input (blank filename and so on)."""


@enum.unique
class RejectionReason(enum.StrEnum):
    """Why an upload was refused before touching storage."""

    EMPTY_PAYLOAD = 'empty_payload'
    MISSING_FILENAME = 'missing_filename'
    EXTENSION_NOT_ALLOWED = 'extension_not_allowed'
    PAYLOAD_TOO_LARGE = 'payload_too_large'


class UploadRejectedError(InvalidArgumentError):
    """Raised when an upload fails the admission check."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        """Initialize UploadRejectedError.

        Args:
            reason: Machine readable rejection reason.
            message: Human readable description.
        """
        self.reason = reason
        super().__init__(message)


class PayloadTooLargeError(UploadRejectedError):
    """Raised when an upload is bigger than the configured ceiling."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        """Initialize PayloadTooLargeError.

        Args:
            size_bytes: Size of the rejected payload.
            max_bytes: Configured maximum upload size.
        """
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(
            RejectionReason.PAYLOAD_TOO_LARGE,
            f'File is too large: {size_bytes} bytes '
            f'(maximum: {max_bytes} bytes)',
        )


class FileConflictError(FileOperationError):
    """Raised when the target filename is already taken."""


class FileForbiddenError(FileOperationError):
    """Raised when the caller does not own the file."""


class FileNotFoundInStoreError(FileOperationError):
    """Raised when the metadata record or the byte object is missing."""


class StorageFailureError(FileOperationError):
    """Raised when the byte store or the database fails unexpectedly."""
