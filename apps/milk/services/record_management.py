"""
Daily record reconciliation - create, update, auto-mark, confirm, delete.

A user has at most one MilkRecord per calendar day. The unique
``(user, date)`` constraint in the database is what enforces it; the
services here translate a lost creation race into DuplicateRecordError
instead of letting the IntegrityError surface as a server error.

Auto-marking:
    The first time "today" is requested and no record exists, one is created
    with ``is_auto_marked=True`` (1 liter, received). Any later user edit or an
    explicit confirm clears the flag, and nothing sets it back.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from rest_framework import serializers

from apps.accounts.models import User
from apps.core.clock import system_clock
from apps.core.validation import (
    ValidationResult,
    parse_quantity,
    parse_record_date,
    validate_date,
    validate_quantity,
)
from apps.milk.models import MilkRecord, MilkStatus, MilkType
from .exceptions import (
    BulkValidationError,
    DuplicateRecordError,
    RecordNotFoundError,
    RecordValidationError,
)

logger = logging.getLogger(__name__)

NOTES_MAX_LENGTH = 200

DEFAULT_LITERS = Decimal('1.00')

RECORD_DEFAULTS = {
    'liters': DEFAULT_LITERS,
    'status': MilkStatus.RECEIVED,
    'milk_type': MilkType.COW,
    'notes': '',
}


def max_bulk_records() -> int:
    return settings.MILK_TRACKER['MAX_BULK_RECORDS']


def _validate_choice(value, choices, label) -> ValidationResult:
    result = ValidationResult()
    # Blank means "not provided"
    if value not in (None, '') and value not in choices.values:
        result.errors.append(f"{label} must be one of: {', '.join(choices.values)}")
    return result


def _validate_notes(value) -> ValidationResult:
    result = ValidationResult()
    if value is None:
        return result
    if not isinstance(value, str):
        result.errors.append("Notes must be text")
    elif len(value.strip()) > NOTES_MAX_LENGTH:
        result.errors.append(f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
    return result


def _record_errors(*, record_date, liters, status, notes, milk_type, today, liters_required) -> list:
    """Run every applicable validator and collect all reasons."""
    errors = validate_date(record_date, today=today).errors
    if liters_required or liters is not None:
        errors += validate_quantity(liters).errors
    errors += _validate_choice(status, MilkStatus, "Status").errors
    errors += _validate_choice(milk_type, MilkType, "Milk type").errors
    errors += _validate_notes(notes).errors
    return errors


def _provided_fields(*, liters, status, notes, milk_type) -> dict:
    """
    Only the fields the caller actually sent.

    ``None`` means "not provided". Blank status / milk type are treated as not
    provided; an empty notes string is a real value and clears the notes.
    """
    changes = {}
    if liters is not None:
        changes['liters'] = parse_quantity(liters).quantize(Decimal('0.01'))
    if status:
        changes['status'] = status
    if milk_type:
        changes['milk_type'] = milk_type
    if notes is not None:
        changes['notes'] = notes.strip()
    return changes


def upsert_record_for_date(
    *,
    user: User,
    date=None,
    liters=None,
    status: Optional[str] = None,
    notes: Optional[str] = None,
    milk_type: Optional[str] = None,
    clock=system_clock
) -> tuple[MilkRecord, bool]:
    """
    Add or update the user's record for a calendar day.

    This operation:
    1. Validates date window, quantity (when given), status, milk type, notes
    2. Normalizes the date to a calendar day
    3. Existing record: merges only the provided fields, clears auto-mark
    4. No record: creates one with defaults for missing fields

    Args:
        user: Owner of the record
        date: Day of delivery (date, datetime or ISO string)
        liters: Quantity 0-50 (optional)
        status: received / not_received / partial (optional)
        notes: Free text up to 200 characters (optional)
        milk_type: cow / buffalo / packet / other (optional)
        clock: Supplies "today" for the date window check

    Returns:
        Tuple of (record, created)

    Raises:
        RecordValidationError: If any field is invalid (all reasons listed)
        DuplicateRecordError: If a concurrent request created the record first
    """
    errors = _record_errors(
        record_date=date,
        liters=liters,
        status=status,
        notes=notes,
        milk_type=milk_type,
        today=clock.today(),
        liters_required=False,
    )
    if errors:
        raise RecordValidationError("Invalid milk record", errors=errors)

    record_date = parse_record_date(date)
    changes = _provided_fields(
        liters=liters,
        status=status,
        notes=notes,
        milk_type=milk_type,
    )

    with transaction.atomic():
        record = (
            MilkRecord.objects
            .select_for_update()
            .filter(user=user, date=record_date)
            .first()
        )
        if record is not None:
            for field_name, value in changes.items():
                setattr(record, field_name, value)
            record.is_auto_marked = False
            record.save()
            logger.debug("Updated milk record %s for %s", record.id, record_date)
            return record, False

    values = {**RECORD_DEFAULTS, **changes}
    try:
        with transaction.atomic():
            record = MilkRecord.objects.create(
                user=user,
                date=record_date,
                is_auto_marked=False,
                **values
            )
    except IntegrityError:
        logger.warning(
            "Concurrent create conflict for user %s on %s", user.id, record_date
        )
        raise DuplicateRecordError("Record already exists for this date")

    logger.debug("Created milk record %s for %s", record.id, record_date)
    return record, True


def get_or_create_today_record(*, user: User, clock=system_clock) -> tuple[MilkRecord, bool]:
    """
    Return today's record, creating an auto-marked one if missing.

    Uses the ORM's get_or_create, which falls back to a re-read when a
    concurrent insert wins the unique constraint, so both callers end up
    with the same row.

    Returns:
        Tuple of (record, is_new)
    """
    today = clock.today()
    record, is_new = MilkRecord.objects.get_or_create(
        user=user,
        date=today,
        defaults={
            'liters': DEFAULT_LITERS,
            'status': MilkStatus.RECEIVED,
            'milk_type': MilkType.COW,
            'is_auto_marked': True,
        }
    )
    if is_new:
        logger.info("Auto-created today's record %s for user %s", record.id, user.id)
    return record, is_new


def get_record(*, user: User, record_id: UUID) -> MilkRecord:
    """
    Fetch one of the user's records.

    Raises:
        RecordNotFoundError: If absent or owned by someone else
    """
    try:
        return MilkRecord.objects.get(id=record_id, user=user)
    except MilkRecord.DoesNotExist:
        raise RecordNotFoundError("Record not found")


@transaction.atomic
def confirm_record(*, user: User, record_id: UUID) -> MilkRecord:
    """
    Ratify an auto-marked record. Other fields are left untouched.

    Idempotent: confirming a confirmed record succeeds and changes nothing
    but ``updated_at``.

    Raises:
        RecordNotFoundError: If absent or owned by someone else
    """
    try:
        record = MilkRecord.objects.select_for_update().get(id=record_id, user=user)
    except MilkRecord.DoesNotExist:
        raise RecordNotFoundError("Record not found")

    record.confirm()
    logger.debug("Confirmed milk record %s", record.id)
    return record


@transaction.atomic
def delete_record(*, user: User, record_id: UUID) -> dict:
    """
    Delete one of the user's records.

    Returns:
        Snapshot of the deleted record

    Raises:
        RecordNotFoundError: If absent or owned by someone else
    """
    record = get_record(user=user, record_id=record_id)
    snapshot = record.snapshot()
    record.delete()

    logger.info("Deleted milk record %s for user %s", snapshot['id'], user.id)
    return snapshot


# =============================================================================
# Bulk creation
# =============================================================================

class BulkOutcome:
    CREATED = 'created'
    CONFLICTED = 'conflicted'
    REJECTED = 'rejected'


@dataclass
class BulkItemResult:
    """What happened to one entry of a bulk request."""

    index: int
    outcome: str
    date: Optional[date] = None
    record: Optional[MilkRecord] = None
    errors: list = field(default_factory=list)


@dataclass
class BulkCreateResult:
    """Per-entry outcomes of a bulk request that passed validation."""

    items: list = field(default_factory=list)

    @property
    def total_requested(self) -> int:
        return len(self.items)

    @property
    def created_count(self) -> int:
        return sum(1 for item in self.items if item.outcome == BulkOutcome.CREATED)

    @property
    def conflicted_count(self) -> int:
        return sum(1 for item in self.items if item.outcome == BulkOutcome.CONFLICTED)

    @property
    def is_partial(self) -> bool:
        """True when at least one entry hit an existing date."""
        return self.conflicted_count > 0


# true/false, 1/0 and their string spellings; null means false
_auto_mark_flag = serializers.BooleanField(allow_null=True)


def _prepare_bulk_entry(entry, today) -> tuple[dict, list]:
    if not isinstance(entry, dict):
        return {}, ["Record must be an object"]

    errors = _record_errors(
        record_date=entry.get('date'),
        liters=entry.get('liters'),
        status=entry.get('status'),
        notes=entry.get('notes'),
        milk_type=entry.get('milk_type'),
        today=today,
        liters_required=True,
    )
    try:
        is_auto_marked = bool(_auto_mark_flag.to_internal_value(entry.get('is_auto_marked')))
    except serializers.ValidationError:
        errors.append("Auto-marked flag must be true or false")
    if errors:
        return {}, errors

    values = {
        **RECORD_DEFAULTS,
        **_provided_fields(
            liters=entry.get('liters'),
            status=entry.get('status'),
            notes=entry.get('notes'),
            milk_type=entry.get('milk_type'),
        ),
        'date': parse_record_date(entry['date']),
        'is_auto_marked': is_auto_marked,
    }
    return values, []


def bulk_create_records(*, user: User, entries, clock=system_clock) -> BulkCreateResult:
    """
    Create many records at once (data migration, backfill).

    Every entry is validated before anything is written. If one fails,
    BulkValidationError lists each failing index and no record is created.

    Once validation passes the inserts are deliberately not atomic as a
    group: each entry runs in its own savepoint, so entries whose date
    already has a record come back as ``conflicted`` while the rest are
    kept.

    Args:
        user: Owner of the new records
        entries: List of dicts with date, liters and optional status,
            notes, milk_type, is_auto_marked
        clock: Supplies "today" for the date window check

    Returns:
        BulkCreateResult with one BulkItemResult per entry

    Raises:
        RecordValidationError: If entries is empty, not a list, or too long
        BulkValidationError: If any entry is invalid
    """
    if not isinstance(entries, (list, tuple)) or not entries:
        raise RecordValidationError("Records array is required")

    limit = max_bulk_records()
    if len(entries) > limit:
        raise RecordValidationError(f"Cannot create more than {limit} records at once")

    today = clock.today()
    prepared = []
    rejected = []
    for index, entry in enumerate(entries):
        values, errors = _prepare_bulk_entry(entry, today)
        if errors:
            rejected.append(BulkItemResult(
                index=index,
                outcome=BulkOutcome.REJECTED,
                errors=errors,
            ))
        prepared.append(values)

    if rejected:
        raise BulkValidationError(
            "Validation errors in records",
            errors=[{'index': item.index, 'errors': item.errors} for item in rejected],
        )

    result = BulkCreateResult()
    for index, values in enumerate(prepared):
        try:
            with transaction.atomic():
                record = MilkRecord.objects.create(user=user, **values)
        except IntegrityError:
            result.items.append(BulkItemResult(
                index=index,
                outcome=BulkOutcome.CONFLICTED,
                date=values['date'],
                errors=["Record already exists for this date"],
            ))
        else:
            result.items.append(BulkItemResult(
                index=index,
                outcome=BulkOutcome.CREATED,
                date=values['date'],
                record=record,
            ))

    logger.info(
        "Bulk create for user %s: %d created, %d conflicted",
        user.id,
        result.created_count,
        result.conflicted_count,
    )
    return result
