"""Staff sign-in for the floor, kitchen and manager stations."""

import logging
from typing import Optional

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import StaffRole
from .exceptions import (
    InvalidCredentialsError,
    InactiveAccountError,
    StationNotPermittedError,
)

User = get_user_model()

logger = logging.getLogger(__name__)


def can_use_station(user, station: str) -> bool:
    """Managers may sign in at any station; other staff only at their own."""
    return user.role == StaffRole.MANAGER or user.role == station


@transaction.atomic
def authenticate_user(*, email: str, password: str, station: Optional[str] = None) -> User:
    """
    Sign a staff member in, optionally at a specific station.

    A station is one of the staff roles (manager, waiter, chef). When given,
    the staff member must be allowed to work it; the row is locked while
    last_login is recorded.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Account is deactivated
        StationNotPermittedError: Role does not cover the requested station
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(email=User.objects.normalize_email(email))
        )
    except User.DoesNotExist:
        logger.info("Rejected sign-in for unknown email %s", email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.check_password(password):
        logger.info("Rejected sign-in for %s: wrong password", user.email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    if station and not can_use_station(user, station):
        logger.warning(
            "%s (%s) tried to sign in at the %s station",
            user.email, user.role, station
        )
        raise StationNotPermittedError(
            f"A {user.get_role_display().lower()} cannot sign in as {station}"
        )

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info(
        "%s signed in at the %s station",
        user.email, station or user.role
    )
    return user
