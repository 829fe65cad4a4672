"""
Statistics service - milk record aggregations.

All functions are read-only and return plain dictionaries suitable for
JSON responses. Empty record sets produce zeroed statistics, never errors.
"""

import calendar
import math
from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db.models import Sum, Avg, Count, Q, QuerySet
from django.db.models.functions import ExtractDay

from apps.accounts.models import User
from apps.milk.models import MilkRecord, MilkStatus
from .exceptions import InvalidPeriodError

TWO_PLACES = Decimal('0.01')


def _as_liters(value) -> Decimal:
    """Round an aggregate to 2 decimals; None (empty set) becomes zero."""
    if value is None:
        return Decimal('0.00')
    return Decimal(str(value)).quantize(TWO_PLACES)


def records_in_range(
    *,
    user: User,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> QuerySet:
    """The user's records with ``start_date <= date <= end_date`` (bounds optional)."""
    queryset = MilkRecord.objects.filter(user=user)

    if start_date:
        queryset = queryset.filter(date__gte=start_date)
    if end_date:
        queryset = queryset.filter(date__lte=end_date)

    return queryset


def summarize_records(queryset: QuerySet) -> dict:
    """
    Totals, mean and per-status counts over any record queryset.

    Returns:
        Dictionary with:
        - total_liters: Decimal
        - average_liters: Decimal
        - total_records: int
        - received_count / not_received_count / partial_count: int
        - auto_marked_count: int - records still awaiting confirmation
    """
    totals = queryset.aggregate(
        total_liters=Sum('liters'),
        average_liters=Avg('liters'),
        total_records=Count('id'),
        received_count=Count('id', filter=Q(status=MilkStatus.RECEIVED)),
        not_received_count=Count('id', filter=Q(status=MilkStatus.NOT_RECEIVED)),
        partial_count=Count('id', filter=Q(status=MilkStatus.PARTIAL)),
        auto_marked_count=Count('id', filter=Q(is_auto_marked=True)),
    )

    return {
        'total_liters': _as_liters(totals['total_liters']),
        'average_liters': _as_liters(totals['average_liters']),
        'total_records': totals['total_records'],
        'received_count': totals['received_count'],
        'not_received_count': totals['not_received_count'],
        'partial_count': totals['partial_count'],
        'auto_marked_count': totals['auto_marked_count'],
    }


def get_range_statistics(
    *,
    user: User,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> dict:
    """
    Statistics for the user's records within an optional date range.

    Example:
        >>> stats = get_range_statistics(user=user, start_date=date(2024, 3, 1))
        >>> stats['total_liters']
        Decimal('42.50')
    """
    queryset = records_in_range(user=user, start_date=start_date, end_date=end_date)
    return summarize_records(queryset)


def list_records(
    *,
    user: User,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    page_size: Optional[int] = None
) -> dict:
    """
    One page of the user's records, newest date first.

    Out-of-range paging input is clamped rather than rejected: page to
    [1, total_pages], page size to [1, MAX_PAGE_SIZE].

    Returns:
        Dictionary with:
        - records: list[MilkRecord]
        - pagination: dict with current_page, page_size, total_pages,
          total_records, has_next, has_prev
    """
    tracker = settings.MILK_TRACKER
    if page_size is None:
        page_size = tracker['DEFAULT_PAGE_SIZE']

    page_size = min(tracker['MAX_PAGE_SIZE'], max(1, page_size))

    queryset = records_in_range(user=user, start_date=start_date, end_date=end_date)
    total_records = queryset.count()
    total_pages = math.ceil(total_records / page_size)

    page = min(max(1, page), max(1, total_pages))
    offset = (page - 1) * page_size

    records = list(queryset.order_by('-date')[offset:offset + page_size])

    return {
        'records': records,
        'pagination': {
            'current_page': page,
            'page_size': page_size,
            'total_pages': total_pages,
            'total_records': total_records,
            'has_next': page < total_pages,
            'has_prev': page > 1,
        },
    }


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    if not 1 <= month <= 12:
        raise InvalidPeriodError("Month must be between 1 and 12")
    if not date.min.year <= year <= date.max.year:
        raise InvalidPeriodError("Invalid year")

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def get_monthly_breakdown(*, user: User, year: int, month: int) -> dict:
    """
    Per-day and month-wide statistics for one calendar month.

    This operation:
    1. Groups the month's records by (day of month, status)
    2. Folds the groups into one entry per day, ascending
    3. Summarizes the whole month in day counts

    Returns:
        Dictionary with:
        - year, month: int
        - daily_stats: list of {day, statuses: [{status, count, total_liters}],
          daily_total}
        - monthly_overview: {total_liters, average_liters, total_days,
          received_days, missed_days, partial_days}

    Raises:
        InvalidPeriodError: If month is not 1-12
    """
    start_date, end_date = month_bounds(year, month)
    queryset = records_in_range(user=user, start_date=start_date, end_date=end_date)

    grouped = (
        queryset
        .annotate(day=ExtractDay('date'))
        .values('day', 'status')
        .annotate(count=Count('id'), total_liters=Sum('liters'))
        .order_by('day', 'status')
    )

    daily = {}
    for row in grouped:
        entry = daily.setdefault(row['day'], {
            'day': row['day'],
            'statuses': [],
            'daily_total': Decimal('0.00'),
        })
        liters = _as_liters(row['total_liters'])
        entry['statuses'].append({
            'status': row['status'],
            'count': row['count'],
            'total_liters': liters,
        })
        entry['daily_total'] += liters

    summary = summarize_records(queryset)

    return {
        'year': year,
        'month': month,
        'daily_stats': [daily[day] for day in sorted(daily)],
        'monthly_overview': {
            'total_liters': summary['total_liters'],
            'average_liters': summary['average_liters'],
            'total_days': summary['total_records'],
            'received_days': summary['received_count'],
            'missed_days': summary['not_received_count'],
            'partial_days': summary['partial_count'],
        },
    }
