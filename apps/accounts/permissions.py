"""
Role-based permission classes shared by the restaurant apps.

Managers and waiters run the floor (orders and bills); chefs may read
orders but not create or bill them.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import StaffRole


class IsManager(BasePermission):
    """Allow only managers."""

    message = 'Only managers can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == StaffRole.MANAGER)


class IsWaiterOrManager(BasePermission):
    """
    Allow write access to waiters and managers.

    Read-only requests are allowed for any authenticated staff member.

    Usage:
        permission_classes = [IsAuthenticated, IsWaiterOrManager]
    """

    message = 'Only waiters and managers can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return user.role in (StaffRole.WAITER, StaffRole.MANAGER)
