"""
Validation rules for user and milk record input.

Every validator returns a :class:`ValidationResult` instead of raising, so
callers can run several validators and report all reasons at once::

    date_check = validate_date(payload.get('date'), today=clock.today())
    quantity_check = validate_quantity(payload.get('liters'))
    errors = date_check.errors + quantity_check.errors
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .clock import shift_months

MAX_LITERS = Decimal('50')
DATE_WINDOW_MONTHS = 12

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_]+$')
PHONE_PATTERN = re.compile(r'^[0-9]{10}$')


@dataclass
class ValidationResult:
    """Outcome of a single validator."""

    errors: list = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_record_date(value):
    """
    Convert user input to a calendar date, dropping any time of day.

    Accepts ``date``, ``datetime`` and ISO-8601 strings (date or datetime).
    Returns None when the value cannot be parsed or is not a real date.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        parsed = parse_date(text)
        if parsed is not None:
            return parsed
        parsed = parse_datetime(text.replace('Z', '+00:00'))
    except ValueError:
        # Well-formed but impossible, e.g. 2023-02-30
        return None
    if parsed is None:
        return None
    if timezone.is_aware(parsed):
        parsed = timezone.localtime(parsed)
    return parsed.date()


def parse_quantity(value):
    """Return ``value`` as a Decimal, or None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        quantity = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not quantity.is_finite():
        return None
    return quantity


def validate_date(value, *, today: date) -> ValidationResult:
    """Date must parse and fall within one year either side of ``today``."""
    result = ValidationResult()

    if _is_blank(value):
        result.errors.append('Date is required')
        return result

    parsed = parse_record_date(value)
    if parsed is None:
        result.errors.append('Invalid date format')
        return result

    if parsed < shift_months(today, -DATE_WINDOW_MONTHS):
        result.errors.append('Date cannot be more than one year in the past')
    if parsed > shift_months(today, DATE_WINDOW_MONTHS):
        result.errors.append('Date cannot be more than one year in the future')

    return result


def validate_quantity(value) -> ValidationResult:
    """Quantity must be a number between 0 and 50 liters."""
    result = ValidationResult()

    if _is_blank(value):
        result.errors.append('Milk quantity is required')
        return result

    quantity = parse_quantity(value)
    if quantity is None:
        result.errors.append('Milk quantity must be a valid number')
        return result

    if quantity < 0:
        result.errors.append('Milk quantity cannot be negative')
    if quantity > MAX_LITERS:
        result.errors.append(f'Milk quantity cannot exceed {MAX_LITERS} liters')

    return result


def validate_username(value) -> ValidationResult:
    result = ValidationResult()
    if value is not None and not isinstance(value, str):
        value = str(value)

    if _is_blank(value):
        result.errors.append('Username is required')
        return result

    if len(value) < USERNAME_MIN_LENGTH:
        result.errors.append(
            f'Username must be at least {USERNAME_MIN_LENGTH} characters long'
        )
    if len(value) > USERNAME_MAX_LENGTH:
        result.errors.append(
            f'Username must be no more than {USERNAME_MAX_LENGTH} characters long'
        )
    if not USERNAME_PATTERN.match(value):
        result.errors.append(
            'Username can only contain letters, numbers, and underscores'
        )

    return result


def validate_phone(value) -> ValidationResult:
    result = ValidationResult()
    if value is not None and not isinstance(value, str):
        value = str(value)

    if _is_blank(value):
        result.errors.append('Phone number is required')
    elif not PHONE_PATTERN.match(value):
        result.errors.append('Phone number must be exactly 10 digits')

    return result


def validate_password(value) -> ValidationResult:
    result = ValidationResult()

    if not value:
        result.errors.append('Password is required')
        return result

    if len(value) < PASSWORD_MIN_LENGTH:
        result.errors.append(
            f'Password must be at least {PASSWORD_MIN_LENGTH} characters long'
        )
    if len(value) > PASSWORD_MAX_LENGTH:
        result.errors.append(
            f'Password must be no more than {PASSWORD_MAX_LENGTH} characters long'
        )

    return result
