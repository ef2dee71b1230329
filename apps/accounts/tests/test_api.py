import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Valid credentials return JWT tokens and the staff profile."""
        url = reverse('users:login')
        data = {
            'email': 'waiter@example.com',
            'password': 'TestPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['role'] == 'waiter'

    def test_login_updates_last_login(self, api_client, user):
        """Successful login records last_login."""
        assert user.last_login is None

        url = reverse('users:login')
        api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_wrong_password(self, api_client, user):
        """Wrong password is rejected."""
        url = reverse('users:login')
        data = {
            'email': 'waiter@example.com',
            'password': 'WrongPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid credentials'

    def test_login_unknown_email(self, api_client, db):
        """Unknown email is rejected the same way as a wrong password."""
        url = reverse('users:login')
        data = {
            'email': 'nobody@example.com',
            'password': 'TestPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_account(self, api_client, user_inactive):
        """Deactivated staff cannot log in."""
        url = reverse('users:login')
        data = {
            'email': 'inactive@example.com',
            'password': 'TestPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_fields(self, api_client, db):
        """Missing fields return validation errors."""
        url = reverse('users:login')
        response = api_client.post(url, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data
        assert 'password' in response.data

    def test_login_defaults_to_own_station(self, api_client, user):
        """Without a station the staff role is used."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.data['station'] == 'waiter'

    def test_chef_cannot_sign_in_as_waiter(self, api_client, chef):
        """Kitchen staff cannot open the floor station."""
        url = reverse('users:login')
        data = {
            'email': chef.email,
            'password': 'TestPass123!',
            'station': 'waiter',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'tokens' not in response.data

    def test_manager_can_sign_in_anywhere(self, api_client, manager):
        """Managers may cover the kitchen station."""
        url = reverse('users:login')
        data = {
            'email': manager.email,
            'password': 'TestPass123!',
            'station': 'chef',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['station'] == 'chef'

    def test_unknown_station(self, api_client, user):
        url = reverse('users:login')
        data = {
            'email': user.email,
            'password': 'TestPass123!',
            'station': 'guest',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'station' in response.data


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        """Authenticated staff can read their own profile."""
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['role'] == 'waiter'

    def test_get_current_user_unauthenticated(self, api_client):
        """Anonymous requests are rejected."""
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestUserManager:
    """Tests for the custom user manager."""

    def test_create_user_requires_email(self):
        """Email is mandatory."""
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='TestPass123!')

    def test_create_superuser_is_manager(self):
        """Superusers default to the manager role."""
        admin = User.objects.create_superuser(
            email='admin@example.com',
            password='TestPass123!',
        )

        assert admin.is_manager
        assert admin.is_staff
        assert admin.is_superuser

    def test_display_name_falls_back_to_email(self):
        """Display name defaults to the email prefix."""
        staff = User.objects.create_user(email='anna@example.com', password='x')

        assert staff.get_display_name() == 'anna'
