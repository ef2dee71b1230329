"""
Service layer tests for accounts app.

Tests authenticate_user for credential checks, station rules
and last_login bookkeeping.
"""

import pytest

from apps.accounts.models import StaffRole
from apps.accounts.services import (
    authenticate_user,
    can_use_station,
    InvalidCredentialsError,
    InactiveAccountError,
    StationNotPermittedError,
)


@pytest.mark.django_db
class TestAuthenticateUser:

    def test_returns_user_and_records_login(self, user):
        result = authenticate_user(email=user.email, password='TestPass123!')

        assert result == user
        user.refresh_from_db()
        assert user.last_login is not None

    def test_email_domain_case_ignored(self, user):
        result = authenticate_user(email='waiter@EXAMPLE.com', password='TestPass123!')

        assert result == user

    def test_wrong_password(self, user):
        with pytest.raises(InvalidCredentialsError):
            authenticate_user(email=user.email, password='nope')

    def test_inactive(self, user_inactive):
        with pytest.raises(InactiveAccountError):
            authenticate_user(email=user_inactive.email, password='TestPass123!')

    def test_own_station(self, chef):
        assert authenticate_user(
            email=chef.email,
            password='TestPass123!',
            station=StaffRole.CHEF,
        ) == chef

    def test_other_station_rejected_without_login(self, chef):
        with pytest.raises(StationNotPermittedError):
            authenticate_user(
                email=chef.email,
                password='TestPass123!',
                station=StaffRole.WAITER,
            )

        chef.refresh_from_db()
        assert chef.last_login is None


@pytest.mark.django_db
class TestCanUseStation:

    @pytest.mark.parametrize('station', [StaffRole.MANAGER, StaffRole.WAITER, StaffRole.CHEF])
    def test_manager_covers_every_station(self, manager, station):
        assert can_use_station(manager, station)

    def test_waiter_only_own_station(self, user):
        assert can_use_station(user, StaffRole.WAITER)
        assert not can_use_station(user, StaffRole.CHEF)
        assert not can_use_station(user, StaffRole.MANAGER)
