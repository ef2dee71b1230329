import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, StaffRole
from apps.billing.calculator import BillingCalculator
from apps.billing.models import OrderStatus
from apps.billing.services import create_order, update_order_status


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def calculator():
    """Calculator at the standard 18% rate."""
    return BillingCalculator(tax_rate=Decimal('0.18'))


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def waiter(db):
    return User.objects.create_user(
        email='waiter@example.com',
        password='TestPass123!',
        display_name='Test Waiter',
        role=StaffRole.WAITER,
    )


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        display_name='Test Manager',
        role=StaffRole.MANAGER,
    )


@pytest.fixture
def chef(db):
    return User.objects.create_user(
        email='chef@example.com',
        password='TestPass123!',
        display_name='Test Chef',
        role=StaffRole.CHEF,
    )


@pytest.fixture
def waiter_client(waiter):
    """Return API client authenticated as the waiter."""
    return _client_for(waiter)


@pytest.fixture
def chef_client(chef):
    """Return API client authenticated as the chef."""
    return _client_for(chef)


@pytest.fixture
def order_items():
    """Two lines: 250 x 1 and 40 x 2 (subtotal 330)."""
    return [
        {'name': 'Paneer Tikka', 'price': Decimal('250'), 'quantity': 1},
        {'name': 'Naan', 'price': Decimal('40'), 'quantity': 2},
    ]


@pytest.fixture
def order(waiter, order_items, calculator):
    """Pending order for table 4 with the standard two lines."""
    return create_order(
        waiter=waiter,
        table_number=4,
        items=order_items,
        calculator=calculator,
    )


@pytest.fixture
def served_order(order):
    """The standard order, served and ready to bill."""
    return update_order_status(order_id=order.id, status=OrderStatus.SERVED)
