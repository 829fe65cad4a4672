import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


# =============================================================================
# Sign-up Tests
# =============================================================================

@pytest.mark.django_db
class TestSignup:
    """Tests for POST /api/auth/signup/"""

    def test_signup_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('users:signup')
        data = {
            'username': 'NewUser',
            'phone': '9123456780',
            'password': 'secret1',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'User created successfully'
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['username'] == 'newuser'
        assert 'password' not in response.data['user']
        assert User.objects.filter(username='newuser').exists()

    def test_signup_missing_fields(self, api_client):
        """All three fields are required."""
        url = reverse('users:signup')
        response = api_client.post(url, {'username': 'someone'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'All fields are required'

    def test_signup_reports_every_invalid_field(self, api_client):
        """Invalid username, phone and password are reported together."""
        url = reverse('users:signup')
        data = {'username': 'ab', 'phone': '12345', 'password': '123'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        details = response.data['details']
        assert 'Username must be at least 3 characters long' in details
        assert 'Phone number must be exactly 10 digits' in details
        assert 'Password must be at least 6 characters long' in details

    def test_signup_duplicate_username(self, api_client, user):
        """Username comparison ignores case."""
        url = reverse('users:signup')
        data = {
            'username': 'TESTUSER',
            'phone': '9111111111',
            'password': 'secret1',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'User already exists'
        assert response.data['details'] == ['Username taken']

    def test_signup_duplicate_phone(self, api_client, user):
        """Cannot register with an existing phone number."""
        url = reverse('users:signup')
        data = {
            'username': 'freshname',
            'phone': user.phone,
            'password': 'secret1',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['details'] == ['Phone number already registered']


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_with_username(self, api_client, user):
        """Login with the username in any case."""
        url = reverse('users:login')
        response = api_client.post(url, {'identifier': 'TestUser', 'password': 'TestPass123'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['username'] == user.username

    def test_login_with_phone(self, api_client, user):
        """Login with the phone number."""
        url = reverse('users:login')
        response = api_client.post(url, {'identifier': user.phone, 'password': 'TestPass123'})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_wrong_password(self, api_client, user):
        """Login fails with wrong password."""
        url = reverse('users:login')
        response = api_client.post(url, {'identifier': user.username, 'password': 'WrongPass'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid credentials'

    def test_login_unknown_user(self, api_client, db):
        """Unknown identifiers get the same answer as wrong passwords."""
        url = reverse('users:login')
        response = api_client.post(url, {'identifier': 'nobody', 'password': 'whatever'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid credentials'

    def test_login_inactive_user(self, api_client, user_inactive):
        """Deactivated accounts cannot log in."""
        url = reverse('users:login')
        response = api_client.post(url, {'identifier': 'inactive', 'password': 'TestPass123'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_fields(self, api_client, db):
        url = reverse('users:login')
        response = api_client.post(url, {'identifier': 'testuser'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Logout / Token Tests
# =============================================================================

@pytest.mark.django_db
class TestLogout:
    """Tests for POST /api/auth/logout/"""

    def test_logout_success(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Logout successful'

    def test_logout_with_valid_refresh(self, authenticated_client, user):
        url = reverse('users:logout')
        refresh = RefreshToken.for_user(user)
        response = authenticated_client.post(url, {'refresh': str(refresh)})

        assert response.status_code == status.HTTP_200_OK

    def test_logout_with_garbage_refresh(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url, {'refresh': 'not-a-token'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_unauthenticated(self, api_client, db):
        url = reverse('users:logout')
        response = api_client.post(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_refresh(self, api_client, user):
        url = reverse('users:token-refresh')
        refresh = RefreshToken.for_user(user)
        response = api_client.post(url, {'refresh': str(refresh)})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


# =============================================================================
# Profile Tests
# =============================================================================

@pytest.mark.django_db
class TestProfile:
    """Tests for /api/auth/profile/"""

    def test_get_profile(self, authenticated_client, user):
        url = reverse('users:profile')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['username'] == user.username
        assert response.data['user']['phone'] == user.phone

    def test_get_profile_unauthenticated(self, api_client, db):
        url = reverse('users:profile')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_username(self, authenticated_client, user):
        url = reverse('users:profile')
        response = authenticated_client.patch(url, {'username': 'Renamed_1'})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.username == 'renamed_1'

    def test_update_own_values_is_allowed(self, authenticated_client, user):
        """Keeping your own username and phone is not a conflict."""
        url = reverse('users:profile')
        response = authenticated_client.put(
            url, {'username': user.username, 'phone': user.phone}
        )

        assert response.status_code == status.HTTP_200_OK

    def test_update_to_taken_phone(self, authenticated_client, other_user):
        url = reverse('users:profile')
        response = authenticated_client.patch(url, {'phone': other_user.phone})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_update_nothing(self, authenticated_client):
        url = reverse('users:profile')
        response = authenticated_client.patch(url, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'No valid fields to update'

    def test_update_invalid_phone(self, authenticated_client):
        url = reverse('users:profile')
        response = authenticated_client.patch(url, {'phone': '12ab'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'Phone number must be exactly 10 digits' in response.data['details']


# =============================================================================
# Change Password Tests
# =============================================================================

@pytest.mark.django_db
class TestChangePassword:
    """Tests for POST /api/auth/change-password/"""

    def test_change_password_success(self, authenticated_client, user):
        url = reverse('users:change-password')
        data = {'current_password': 'TestPass123', 'new_password': 'NewPass456'}
        response = authenticated_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.check_password('NewPass456')

    def test_change_password_wrong_current(self, authenticated_client, user):
        url = reverse('users:change-password')
        data = {'current_password': 'WrongPass', 'new_password': 'NewPass456'}
        response = authenticated_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        user.refresh_from_db()
        assert user.check_password('TestPass123')

    def test_change_password_too_short(self, authenticated_client):
        url = reverse('users:change-password')
        data = {'current_password': 'TestPass123', 'new_password': '123'}
        response = authenticated_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Health Check
# =============================================================================

@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /api/health/"""

    def test_health_is_public(self, api_client):
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'OK'
        assert 'timestamp' in response.json()

    def test_plain_http_is_not_redirected(self, api_client, settings):
        assert settings.SECURE_SSL_REDIRECT is False

        response = api_client.get(reverse('health-check'), secure=False)

        assert response.status_code == status.HTTP_200_OK
