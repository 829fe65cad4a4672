"""
Milk records services - Business logic layer.

This package contains all business operations for the milk app:
- Daily record reconciliation (upsert, auto-create today, confirm, delete)
- Bulk creation with per-entry outcomes
- Statistics and monthly breakdowns
- Retention sweep
"""

from .record_management import (
    upsert_record_for_date,
    get_or_create_today_record,
    get_record,
    confirm_record,
    delete_record,
    bulk_create_records,
    BulkOutcome,
    BulkItemResult,
    BulkCreateResult,
)

from .statistics import (
    records_in_range,
    summarize_records,
    get_range_statistics,
    list_records,
    get_monthly_breakdown,
)

from .retention import (
    retention_cutoff,
    purge_expired_records,
    run_retention_sweep,
    get_retention_stats,
)

from .exceptions import (
    MilkServiceError,
    RecordValidationError,
    BulkValidationError,
    RecordNotFoundError,
    DuplicateRecordError,
    InvalidPeriodError,
)

__all__ = [
    # Reconciliation
    'upsert_record_for_date',
    'get_or_create_today_record',
    'get_record',
    'confirm_record',
    'delete_record',
    'bulk_create_records',
    'BulkOutcome',
    'BulkItemResult',
    'BulkCreateResult',
    # Statistics
    'records_in_range',
    'summarize_records',
    'get_range_statistics',
    'list_records',
    'get_monthly_breakdown',
    # Retention
    'retention_cutoff',
    'purge_expired_records',
    'run_retention_sweep',
    'get_retention_stats',
    # Exceptions
    'MilkServiceError',
    'RecordValidationError',
    'BulkValidationError',
    'RecordNotFoundError',
    'DuplicateRecordError',
    'InvalidPeriodError',
]
