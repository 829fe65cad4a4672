import pytest
from datetime import timedelta
from decimal import Decimal
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from apps.milk.models import MilkRecord, MilkStatus


def _day(offset=0):
    """ISO date relative to the real today (the API uses the system clock)."""
    return (timezone.localdate() + timedelta(days=offset)).isoformat()


# =============================================================================
# Add / Update Tests
# =============================================================================

@pytest.mark.django_db
class TestAddRecord:
    """Tests for POST /api/milk/add/"""

    def test_add_creates_record(self, milk_client, milk_user):
        url = reverse('milk:add-record')
        data = {'date': _day(-1), 'liters': '2.5', 'status': 'received', 'notes': 'on time'}
        response = milk_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Milk record created successfully'
        assert response.data['record']['liters'] == Decimal('2.50')
        assert response.data['record']['is_auto_marked'] is False
        assert MilkRecord.objects.filter(user=milk_user).count() == 1

    def test_add_same_date_updates(self, milk_client, milk_user):
        url = reverse('milk:add-record')
        milk_client.post(url, {'date': _day(-1), 'liters': 2}, format='json')

        response = milk_client.post(
            url, {'date': _day(-1), 'status': 'partial'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Milk record updated successfully'
        assert response.data['record']['status'] == 'partial'
        assert response.data['record']['liters'] == Decimal('2.00')
        assert MilkRecord.objects.filter(user=milk_user).count() == 1

    def test_add_invalid_record(self, milk_client):
        url = reverse('milk:add-record')
        response = milk_client.post(
            url, {'date': _day(-1), 'liters': 60}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['details'] == ['Milk quantity cannot exceed 50 liters']

    def test_add_without_date(self, milk_client):
        url = reverse('milk:add-record')
        response = milk_client.post(url, {'liters': 1}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'Date is required' in response.data['details']

    def test_blank_status_keeps_previous(self, milk_client):
        url = reverse('milk:add-record')
        milk_client.post(url, {'date': _day(-1), 'status': 'partial'}, format='json')

        response = milk_client.post(
            url, {'date': _day(-1), 'status': '', 'liters': 3}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['record']['status'] == 'partial'
        assert response.data['record']['liters'] == Decimal('3.00')

    def test_lost_creation_race_is_409(self, milk_client, milk_user, monkeypatch):
        real_create = MilkRecord.objects.create

        def create_after_competitor(**kwargs):
            MilkRecord(user=kwargs['user'], date=kwargs['date']).save()
            return real_create(**kwargs)

        monkeypatch.setattr(MilkRecord.objects, 'create', create_after_competitor)

        response = milk_client.post(
            reverse('milk:add-record'), {'date': _day(-1)}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Record already exists for this date'

    def test_add_unauthenticated(self, api_client, db):
        url = reverse('milk:add-record')
        response = api_client.post(url, {'date': _day()}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Today / Confirm Tests
# =============================================================================

@pytest.mark.django_db
class TestTodayRecord:
    """Tests for GET /api/milk/today/"""

    def test_first_call_auto_creates(self, milk_client):
        url = reverse('milk:today')
        response = milk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_new'] is True
        assert response.data['message'] == "Auto-created today's record"
        assert response.data['record']['is_auto_marked'] is True
        assert response.data['record']['date'] == _day()

    def test_second_call_returns_same_record(self, milk_client, milk_user):
        url = reverse('milk:today')
        first = milk_client.get(url)
        second = milk_client.get(url)

        assert second.data['is_new'] is False
        assert 'message' not in second.data
        assert second.data['record']['id'] == first.data['record']['id']
        assert MilkRecord.objects.filter(user=milk_user).count() == 1


@pytest.mark.django_db
class TestConfirmRecord:
    """Tests for /api/milk/records/<id>/confirm/"""

    def test_confirm_clears_auto_mark(self, milk_client):
        record_id = milk_client.get(reverse('milk:today')).data['record']['id']
        url = reverse('milk:record-confirm', kwargs={'record_id': record_id})

        response = milk_client.put(url)
        again = milk_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['record']['is_auto_marked'] is False
        assert again.status_code == status.HTTP_200_OK

    def test_confirm_other_users_record(self, milk_client, other_milk_user):
        record = MilkRecord.objects.create(user=other_milk_user, date=timezone.localdate())
        url = reverse('milk:record-confirm', kwargs={'record_id': record.id})

        response = milk_client.put(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Record Detail Tests
# =============================================================================

@pytest.mark.django_db
class TestRecordDetail:
    """Tests for /api/milk/records/<id>/"""

    def test_get_record(self, milk_client, milk_record):
        url = reverse('milk:record-detail', kwargs={'record_id': milk_record.id})
        response = milk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(milk_record.id)

    def test_delete_record(self, milk_client, milk_record):
        url = reverse('milk:record-detail', kwargs={'record_id': milk_record.id})
        response = milk_client.delete(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Record deleted successfully'
        assert response.data['deleted_record']['id'] == str(milk_record.id)
        assert not MilkRecord.objects.filter(id=milk_record.id).exists()

    def test_delete_other_users_record(self, api_client, milk_record, other_milk_user):
        api_client.force_authenticate(user=other_milk_user)
        url = reverse('milk:record-detail', kwargs={'record_id': milk_record.id})

        response = api_client.delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert MilkRecord.objects.filter(id=milk_record.id).exists()


# =============================================================================
# Bulk Create Tests
# =============================================================================

@pytest.mark.django_db
class TestBulkCreate:
    """Tests for POST /api/milk/bulk-create/"""

    def test_all_created(self, milk_client, milk_user):
        url = reverse('milk:bulk-create')
        records = [{'date': _day(-offset), 'liters': 1} for offset in range(1, 4)]

        response = milk_client.post(url, {'records': records}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Successfully created 3 records'
        assert response.data['created_records'] == 3
        assert all(item['outcome'] == 'created' for item in response.data['results'])
        assert MilkRecord.objects.filter(user=milk_user).count() == 3

    def test_partial_success(self, milk_client, milk_user):
        MilkRecord.objects.create(user=milk_user, date=timezone.localdate() - timedelta(days=2))
        url = reverse('milk:bulk-create')
        records = [{'date': _day(-offset), 'liters': 1} for offset in range(1, 4)]

        response = milk_client.post(url, {'records': records}, format='json')

        assert response.status_code == status.HTTP_207_MULTI_STATUS
        assert response.data['created_records'] == 2
        assert response.data['conflicted_records'] == 1
        assert response.data['error'] == 'Some records already exist for the specified dates'
        conflicted = response.data['results'][1]
        assert conflicted['outcome'] == 'conflicted'
        assert conflicted['record_id'] is None

    def test_same_date_twice_is_partial(self, milk_client, milk_user):
        url = reverse('milk:bulk-create')
        records = [{'date': _day(-1), 'liters': 1}, {'date': _day(-1), 'liters': 2}]

        response = milk_client.post(url, {'records': records}, format='json')

        assert response.status_code == status.HTTP_207_MULTI_STATUS
        assert [item['outcome'] for item in response.data['results']] == [
            'created', 'conflicted'
        ]
        assert MilkRecord.objects.filter(user=milk_user).count() == 1

    def test_invalid_entry_rejects_all(self, milk_client, milk_user):
        url = reverse('milk:bulk-create')
        records = [
            {'date': _day(-1), 'liters': 1},
            {'date': _day(-2), 'liters': 60},
        ]

        response = milk_client.post(url, {'records': records}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Validation errors in records'
        assert response.data['details'][0]['index'] == 1
        assert MilkRecord.objects.filter(user=milk_user).count() == 0

    def test_missing_records(self, milk_client):
        url = reverse('milk:bulk-create')
        response = milk_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Records array is required'

    def test_too_many_records(self, milk_client):
        url = reverse('milk:bulk-create')
        records = [{'date': _day(-offset), 'liters': 1} for offset in range(101)]

        response = milk_client.post(url, {'records': records}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Cannot create more than 100 records at once'


# =============================================================================
# Listing and Statistics Tests
# =============================================================================

@pytest.mark.django_db
class TestRecordList:
    """Tests for GET /api/milk/records/"""

    def test_list_with_statistics(self, milk_client, march_records):
        url = reverse('milk:record-list')
        response = milk_client.get(url, {'start_date': '2024-03-01', 'end_date': '2024-03-31'})

        assert response.status_code == status.HTTP_200_OK
        assert [r['date'] for r in response.data['records']] == [
            '2024-03-04', '2024-03-03', '2024-03-02', '2024-03-01'
        ]
        assert response.data['pagination']['total_records'] == 4
        assert response.data['statistics']['total_liters'] == Decimal('6.00')

    def test_list_only_own_records(self, api_client, march_records, other_milk_user):
        api_client.force_authenticate(user=other_milk_user)
        response = api_client.get(reverse('milk:record-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['records'] == []
        assert response.data['statistics']['total_records'] == 0

    def test_huge_page_number(self, milk_client, march_records):
        url = reverse('milk:record-list')
        response = milk_client.get(url, {'page': 10**20, 'page_size': 3})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pagination']['current_page'] == 2
        assert len(response.data['records']) == 1

    def test_list_invalid_range(self, milk_client):
        url = reverse('milk:record-list')
        response = milk_client.get(url, {'start_date': '2024-03-10', 'end_date': '2024-03-01'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestStatisticsEndpoints:

    def test_range_statistics(self, milk_client, march_records):
        url = reverse('milk:statistics')
        response = milk_client.get(url, {'start_date': '2024-03-02', 'end_date': '2024-03-03'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_records'] == 2
        assert response.data['partial_count'] == 1

    def test_monthly_stats(self, milk_client, march_records):
        url = reverse('milk:monthly-stats', kwargs={'year': 2024, 'month': 3})
        response = milk_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['daily_stats']) == 4
        assert response.data['monthly_overview']['missed_days'] == 1

    def test_monthly_stats_bad_month(self, milk_client):
        url = reverse('milk:monthly-stats', kwargs={'year': 2024, 'month': 13})
        response = milk_client.get(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Retention Command Tests
# =============================================================================

@pytest.mark.django_db
class TestPurgeOldRecordsCommand:

    def test_dry_run_deletes_nothing(self, march_records, capsys):
        MilkRecord.objects.update(created_at=timezone.now() - timedelta(days=400))

        call_command('purge_old_records', '--dry-run')

        out = capsys.readouterr().out
        assert 'Records: 4 total, 4 created before' in out
        assert MilkRecord.objects.count() == 4

    def test_purges_expired(self, march_records, capsys):
        MilkRecord.objects.filter(status=MilkStatus.RECEIVED).update(
            created_at=timezone.now() - timedelta(days=400)
        )

        call_command('purge_old_records')

        assert 'Deleted 2 old milk record(s).' in capsys.readouterr().out
        assert MilkRecord.objects.count() == 2
