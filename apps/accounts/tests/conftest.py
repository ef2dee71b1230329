import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, StaffRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a waiter."""
    return User.objects.create_user(
        email='waiter@example.com',
        password='TestPass123!',
        display_name='Test Waiter',
        role=StaffRole.WAITER,
    )


@pytest.fixture
def manager(db):
    """Create and return a manager."""
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        display_name='Test Manager',
        role=StaffRole.MANAGER,
    )


@pytest.fixture
def chef(db):
    """Create and return a chef."""
    return User.objects.create_user(
        email='chef@example.com',
        password='TestPass123!',
        display_name='Test Chef',
        role=StaffRole.CHEF,
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive staff member."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        display_name='Inactive Waiter',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return API client authenticated as the waiter."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
