import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.milk.models import MilkRecord, MilkStatus, MilkType


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def export_user(db):
    """Create and return a user with records to export."""
    return User.objects.create_user(
        username='exporter',
        phone='9812345670',
        password='TestPass123',
    )


@pytest.fixture
def export_client(api_client, export_user):
    """Return an API client authenticated as export_user."""
    refresh = RefreshToken.for_user(export_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def export_records(db, export_user):
    """Three records, created out of date order."""
    return [
        MilkRecord.objects.create(
            user=export_user,
            date=date(2024, 3, 2),
            liters=Decimal('0.00'),
            status=MilkStatus.NOT_RECEIVED,
            notes='milkman on leave',
        ),
        MilkRecord.objects.create(
            user=export_user,
            date=date(2024, 3, 1),
            liters=Decimal('2.00'),
            status=MilkStatus.RECEIVED,
            milk_type=MilkType.BUFFALO,
        ),
        MilkRecord.objects.create(
            user=export_user,
            date=date(2024, 3, 3),
            liters=Decimal('1.50'),
            status=MilkStatus.PARTIAL,
            is_auto_marked=True,
        ),
    ]


@pytest.fixture
def other_export_user(db):
    """Create and return a user without records."""
    return User.objects.create_user(
        username='someoneelse',
        phone='9812345671',
        password='TestPass123',
    )
