"""
Accounts services - Business logic layer.

This package contains staff authentication operations.
"""

from .user_authentication import authenticate_user, can_use_station

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    StationNotPermittedError,
)

__all__ = [
    'authenticate_user',
    'can_use_station',
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'StationNotPermittedError',
]
