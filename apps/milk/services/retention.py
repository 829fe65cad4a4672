"""
Retention sweep - purge records past the retention horizon.

Age is measured from ``created_at``, not from the record's ``date``: a
back-filled record for an old day survives until six months after it was
entered.

Intended to run once a day (cron, 02:00) through the ``purge_old_records``
management command. The sweep only ever deletes rows, so it can run
alongside normal request handling.
"""

import logging
from datetime import datetime
from typing import Optional

from django.conf import settings

from apps.core.clock import shift_months, system_clock
from apps.milk.models import MilkRecord

logger = logging.getLogger(__name__)


def retention_cutoff(*, clock=system_clock) -> datetime:
    """Records created before this instant are expired."""
    months = settings.MILK_TRACKER['RETENTION_MONTHS']
    return shift_months(clock.now(), -months)


def purge_expired_records(*, clock=system_clock) -> int:
    """
    Delete every record created before the retention cutoff.

    Returns:
        Number of records deleted

    Raises:
        DatabaseError: Propagated; use run_retention_sweep for best-effort runs
    """
    cutoff = retention_cutoff(clock=clock)
    deleted, _ = MilkRecord.objects.filter(created_at__lt=cutoff).delete()
    return deleted


def run_retention_sweep(*, clock=system_clock) -> Optional[int]:
    """
    Best-effort wrapper around purge_expired_records for scheduled runs.

    Any failure is logged and swallowed; the next scheduled run retries.

    Returns:
        Number of records deleted, or None if the sweep failed
    """
    logger.info("Running daily cleanup of old milk records")
    try:
        deleted = purge_expired_records(clock=clock)
    except Exception:
        logger.exception("Milk record cleanup failed")
        return None

    logger.info("Deleted %d old milk records", deleted)
    return deleted


def get_retention_stats(*, clock=system_clock) -> dict:
    """
    Count records on either side of the retention cutoff.

    Returns:
        Dictionary with total_records, expired_records, active_records
        and the cutoff instant
    """
    cutoff = retention_cutoff(clock=clock)
    total_records = MilkRecord.objects.count()
    expired_records = MilkRecord.objects.filter(created_at__lt=cutoff).count()

    return {
        'total_records': total_records,
        'expired_records': expired_records,
        'active_records': total_records - expired_records,
        'cutoff': cutoff,
    }
