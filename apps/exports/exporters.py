"""
Export rendering for milk records.

Turns an ordered set of records into a downloadable CSV file or a
human-readable text summary that can be shared from the phone.

Example:
    Exporting March as CSV::

        from apps.exports.exporters import build_export

        export = build_export(
            user=request.user,
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 31),
            export_format='csv',
        )
        export.filename      # 'milk-records-2024-03-01-2024-03-31.csv'
        export.content_type  # 'text/csv'
"""

import csv
import io
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from apps.accounts.models import User
from apps.milk.models import MilkStatus
from apps.milk.services import records_in_range
from .exceptions import InvalidExportFormatError

CSV_HEADER = ['Date', 'Liters', 'Status', 'Type', 'Notes', 'AutoMarked', 'CreatedAt']

EXPORT_FORMATS = ('text', 'csv')

EMPTY_SUMMARY = "No milk records found for the specified period."


@dataclass
class ExportResult:
    data: str
    filename: str
    content_type: str


def format_liters(value) -> str:
    """Liters without trailing zeros: 2.00 -> '2', 1.50 -> '1.5'."""
    return f"{Decimal(value).normalize():f}"


def _status_label(status: str) -> str:
    return status[:1].upper() + status[1:]


def generate_csv(records) -> str:
    """
    One CSV row per record, in the order given.

    An empty record set produces the header row alone.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADER)

    for record in records:
        writer.writerow([
            record.date.isoformat(),
            format_liters(record.liters),
            record.status,
            record.milk_type,
            record.notes or '',
            'Yes' if record.is_auto_marked else 'No',
            record.created_at.isoformat(),
        ])

    return buffer.getvalue()


def generate_text_summary(
    records,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> str:
    """
    Plain-text report: totals, per-status day counts, then each day ascending.

    Each day line reads ``YYYY-MM-DD: <liters>L - <Status>[ (Auto)]``,
    followed by an indented ``Note:`` line when the record has notes.
    """
    records = sorted(records, key=lambda record: record.date)
    if not records:
        return EMPTY_SUMMARY

    total_liters = sum((record.liters for record in records), Decimal('0'))
    average_liters = total_liters / len(records)
    received = sum(1 for r in records if r.status == MilkStatus.RECEIVED)
    missed = sum(1 for r in records if r.status == MilkStatus.NOT_RECEIVED)
    partial = sum(1 for r in records if r.status == MilkStatus.PARTIAL)

    lines = [
        "Milk Tracker - Milk Delivery Summary",
        "=====================================",
        "",
    ]

    if start_date and end_date:
        lines.append(f"Period: {start_date} to {end_date}")

    lines += [
        f"Total Records: {len(records)}",
        f"Total Milk Received: {total_liters:.2f} liters",
        f"Average per Day: {average_liters:.2f} liters",
        "",
        "Delivery Status:",
        f"- Received: {received} days",
        f"- Missed: {missed} days",
        f"- Partial: {partial} days",
        "",
        "Daily Records:",
        "==============",
    ]

    for record in records:
        auto = " (Auto)" if record.is_auto_marked else ""
        lines.append(
            f"{record.date.isoformat()}: {format_liters(record.liters)}L"
            f" - {_status_label(record.status)}{auto}"
        )
        if record.notes:
            lines.append(f"  Note: {record.notes}")

    return "\n".join(lines) + "\n"


def build_export(
    *,
    user: User,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    export_format: str = 'text'
) -> ExportResult:
    """
    Render the user's records in a date range.

    Raises:
        InvalidExportFormatError: If export_format is not 'text' or 'csv'
    """
    if export_format not in EXPORT_FORMATS:
        raise InvalidExportFormatError("Invalid format. Use 'text' or 'csv'")

    records = list(
        records_in_range(user=user, start_date=start_date, end_date=end_date)
        .order_by('date')
    )
    period = f"{start_date or 'all'}-{end_date or 'all'}"

    if export_format == 'csv':
        return ExportResult(
            data=generate_csv(records),
            filename=f"milk-records-{period}.csv",
            content_type='text/csv',
        )

    return ExportResult(
        data=generate_text_summary(records, start_date, end_date),
        filename=f"milk-summary-{period}.txt",
        content_type='text/plain',
    )
