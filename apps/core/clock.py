"""
Clock abstraction.

Services never read wall-clock time directly; they take a ``clock`` keyword
argument defaulting to :data:`system_clock`. Tests pass a :class:`FixedClock`
so "today" and the validation window are deterministic.

Example::

    from apps.core.clock import FixedClock

    clock = FixedClock(datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc))
    record, is_new = get_or_create_today_record(user=user, clock=clock)
"""

import calendar
from datetime import date, datetime

from django.utils import timezone


class Clock:
    """Source of the current instant."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        """Current calendar day in the project time zone."""
        return timezone.localdate(self.now())


class SystemClock(Clock):
    """Wall-clock time via ``django.utils.timezone``."""

    def now(self) -> datetime:
        return timezone.now()


class FixedClock(Clock):
    """Always returns the same instant. Naive datetimes are made aware."""

    def __init__(self, instant: datetime):
        if timezone.is_naive(instant):
            instant = timezone.make_aware(instant)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


system_clock = SystemClock()


def shift_months(value, months: int):
    """
    Move a date or datetime by whole calendar months.

    The day of month is clamped to the target month's length, so
    ``shift_months(date(2024, 8, 31), -6)`` is ``date(2024, 2, 29)``.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
