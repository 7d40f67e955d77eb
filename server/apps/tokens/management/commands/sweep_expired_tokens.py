"""Management command to delete expired bearer tokens."""

import logging
import time
from datetime import datetime
from typing import Any, Final, final, override

from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.tokens.logic.token_operations import (
    count_expired_tokens,
    next_sweep_at,
    sweep_expired_tokens,
)

logger = logging.getLogger(__name__)

# Upper bound of one sleep, so clock changes are picked up
_MAX_SLEEP_SECONDS: Final = 3600


@final
class Command(BaseCommand):
    """Delete tokens whose expiry has passed, active or not.

    Without --schedule it sweeps once, suitable for cron
    (``0 0 * * 0`` for Sunday midnight). With --schedule it stays in the
    foreground and sweeps at every TOKEN_SWEEP_WEEKDAY/TOKEN_SWEEP_HOUR.
    """

    help = 'Delete expired bearer tokens'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        mode = parser.add_mutually_exclusive_group()
        mode.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many tokens would be deleted without deleting',
        )
        mode.add_argument(
            '--schedule',
            action='store_true',
            help='Keep running and sweep weekly at the configured time',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the sweep.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        if options['schedule']:
            self._run_schedule()
            return

        if options['dry_run']:
            count = count_expired_tokens()
            self.stdout.write(
                self.style.SUCCESS(f'Would delete {count} expired tokens'),
            )
            return

        self._sweep_once()

    def _sweep_once(self) -> None:
        deleted = sweep_expired_tokens()
        self.stdout.write(
            self.style.SUCCESS(f'Deleted {deleted} expired tokens'),
        )

    def _run_schedule(self) -> None:
        try:
            while True:  # noqa: WPS457
                run_at = next_sweep_at()
                self.stdout.write(f'Next token sweep at {run_at.isoformat()}')
                self._sleep_until(run_at)
                try:
                    self._sweep_once()
                except Exception:
                    # Keep the schedule alive
                    logger.exception('Scheduled token sweep failed')
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nToken sweeper stopped'))

    def _sleep_until(self, run_at: datetime) -> None:
        while True:  # noqa: WPS457
            remaining = (run_at - timezone.now()).total_seconds()
            if remaining <= 0:
                return
            time.sleep(min(remaining, _MAX_SLEEP_SECONDS))
