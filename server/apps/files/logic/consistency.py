"""Detection of divergence between the byte store and the File table."""

import logging
from dataclasses import dataclass, field

from django.core.files.storage import default_storage

from server.apps.files.models import File

logger = logging.getLogger(__name__)
integrity_logger = logging.getLogger('server.integrity')


@dataclass(frozen=True)
class ConsistencyReport:
    """Filenames present in only one of the two stores."""

    missing_bytes: list[str] = field(default_factory=list)
    orphaned_bytes: list[str] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """Check whether both stores agree.

        Returns:
            True if no divergence was found.
        """
        return not self.missing_bytes and not self.orphaned_bytes


def _list_stored_names() -> set[str]:
    try:
        _, filenames = default_storage.listdir('')
    except FileNotFoundError:
        # Storage directory not created yet: nothing stored
        return set()
    return set(filenames)


def find_divergence() -> ConsistencyReport:
    """Compare stored objects with file records.

    Returns:
        Report listing records without bytes and bytes without records,
        both sorted by filename.
    """
    stored = _list_stored_names()
    recorded = set(File.objects.values_list('filename', flat=True))

    report = ConsistencyReport(
        missing_bytes=sorted(recorded - stored),
        orphaned_bytes=sorted(stored - recorded),
    )

    for filename in report.missing_bytes:
        integrity_logger.warning('Record without bytes: %s', filename)
    for filename in report.orphaned_bytes:
        integrity_logger.warning('Bytes without record: %s', filename)

    logger.info(
        'Consistency check: %d records, %d objects, %d missing, %d orphaned',
        len(recorded),
        len(stored),
        len(report.missing_bytes),
        len(report.orphaned_bytes),
    )
    return report


def delete_orphaned_bytes(report: ConsistencyReport) -> int:
    """Delete stored objects that have no record.

    Each name is checked again right before deletion so that an upload
    finishing in the meantime is not destroyed.

    Args:
        report: Report produced by ``find_divergence``.

    Returns:
        Number of objects deleted.
    """
    deleted = 0
    for filename in report.orphaned_bytes:
        if File.objects.filter(filename=filename).exists():
            continue
        try:
            default_storage.delete(filename)
        except Exception:
            logger.exception('Failed to delete orphaned file: %s', filename)
            continue
        deleted += 1

    logger.info('Deleted %d orphaned files', deleted)
    return deleted
