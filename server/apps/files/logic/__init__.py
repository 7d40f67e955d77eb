"""Business logic layer for files app.

- Upload admission: emptiness, filename, extension and size checks
- File operations: upload, download, rename, list, delete
- Consistency checks between the byte store and the File table

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
