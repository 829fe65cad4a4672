"""
Management command to delete milk records past the retention horizon.

Meant to be scheduled daily, e.g. with cron::

    0 2 * * * cd /srv/milk-tracker && python manage.py purge_old_records

Usage:
    python manage.py purge_old_records
    python manage.py purge_old_records --dry-run
"""

from django.core.management.base import BaseCommand

from apps.milk.services import get_retention_stats, run_retention_sweep


class Command(BaseCommand):
    help = 'Delete milk records created more than RETENTION_MONTHS months ago'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many records would be deleted without deleting them',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            stats = get_retention_stats()
            self.stdout.write(
                f"Records: {stats['total_records']} total, "
                f"{stats['expired_records']} created before {stats['cutoff']:%Y-%m-%d %H:%M}"
            )
            self.stdout.write(
                self.style.WARNING('--dry-run mode: No changes made.')
            )
            return

        deleted = run_retention_sweep()

        if deleted is None:
            self.stderr.write(
                self.style.ERROR('Cleanup failed; it will be retried on the next run.')
            )
            return

        self.stdout.write(
            self.style.SUCCESS(f'Deleted {deleted} old milk record(s).')
        )
