"""Management command to report divergence between storage and records."""

import logging
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from server.apps.files.logic.consistency import (
    delete_orphaned_bytes,
    find_divergence,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Compare the byte store with the File table."""

    help = 'Report files present only in storage or only in the database'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--delete-orphans',
            action='store_true',
            help='Delete stored files that have no database record',
        )
        parser.add_argument(
            '--fail-on-divergence',
            action='store_true',
            help='Exit with an error if any divergence is found',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the consistency check.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If divergence remains and --fail-on-divergence
                was given.
        """
        report = find_divergence()

        for filename in report.missing_bytes:
            self.stdout.write(f'Missing bytes: {filename}')
        for filename in report.orphaned_bytes:
            self.stdout.write(f'Orphaned bytes: {filename}')

        remaining_orphans = len(report.orphaned_bytes)
        if options['delete_orphans'] and report.orphaned_bytes:
            deleted = delete_orphaned_bytes(report)
            remaining_orphans -= deleted
            self.stdout.write(f'Deleted {deleted} orphaned files')

        if report.is_consistent:
            self.stdout.write(self.style.SUCCESS('Storage is consistent'))
            return

        summary = (
            f'{len(report.missing_bytes)} records without bytes, '
            f'{remaining_orphans} files without records'
        )
        if options['fail_on_divergence'] and (
            report.missing_bytes or remaining_orphans
        ):
            raise CommandError(summary)
        self.stdout.write(self.style.WARNING(summary))
