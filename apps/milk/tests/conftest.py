import pytest
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.core.clock import FixedClock
from apps.milk.models import MilkRecord, MilkStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def clock():
    """Clock pinned to 2024-03-15 09:00 UTC."""
    return FixedClock(datetime(2024, 3, 15, 9, 0, tzinfo=dt_timezone.utc))


@pytest.fixture
def milk_user(db):
    """Create and return a user who records deliveries."""
    return User.objects.create_user(
        username='milkuser',
        phone='9876543210',
        password='TestPass123',
    )


@pytest.fixture
def other_milk_user(db):
    """Create and return another user."""
    return User.objects.create_user(
        username='neighbour',
        phone='9876543211',
        password='TestPass123',
    )


@pytest.fixture
def milk_client(api_client, milk_user):
    """Return an API client authenticated as milk_user."""
    refresh = RefreshToken.for_user(milk_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def milk_record(db, milk_user):
    """A confirmed 2-liter record for 2024-03-10."""
    return MilkRecord.objects.create(
        user=milk_user,
        date=date(2024, 3, 10),
        liters=Decimal('2.00'),
        status=MilkStatus.RECEIVED,
    )


@pytest.fixture
def march_records(db, milk_user):
    """Four records in March 2024 with mixed statuses."""
    rows = [
        (date(2024, 3, 1), Decimal('2.00'), MilkStatus.RECEIVED, False),
        (date(2024, 3, 2), Decimal('0.00'), MilkStatus.NOT_RECEIVED, False),
        (date(2024, 3, 3), Decimal('1.50'), MilkStatus.PARTIAL, False),
        (date(2024, 3, 4), Decimal('2.50'), MilkStatus.RECEIVED, True),
    ]
    return [
        MilkRecord.objects.create(
            user=milk_user,
            date=day,
            liters=liters,
            status=status,
            is_auto_marked=auto,
        )
        for day, liters, status, auto in rows
    ]
