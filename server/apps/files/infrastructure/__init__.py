"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Byte store backends (local directory, S3-compatible bucket)
- Metadata extraction (size, CRC32 checksum, extension)

Keep infrastructure concerns separate from business logic.
"""
