"""
Domain exceptions for billing app.

This module defines the exception hierarchy for order and bill errors.
Services and the calculator raise the plain domain exceptions; views
translate them into the HTTP-facing APIException subclasses below.

Exception Hierarchy:
    BillingServiceError (base)
    ├── InvalidItem
    ├── InvalidAdjustment
    ├── EmptyOrderError
    ├── InvalidStatusTransitionError
    ├── OrderNotFoundError
    ├── OrderItemNotFoundError
    ├── BillNotFoundError
    ├── DuplicateBillError
    └── OrderNotBillableError
"""
from rest_framework.exceptions import APIException


class BillingServiceError(Exception):
    """Base exception for billing service errors."""
    pass


class InvalidItem(BillingServiceError):
    """
    Raised for a malformed line item.

    Negative price, non-positive or fractional quantity, or a missing field.

    Example:
        raise InvalidItem("Item 2 quantity must be at least 1")
    """

    pass


class InvalidAdjustment(BillingServiceError):
    """
    Raised for a negative tip, discount, subtotal or tax, or a discount
    larger than the amount due.
    """

    pass


class EmptyOrderError(BillingServiceError):
    """Order must contain at least one item."""
    pass


class InvalidStatusTransitionError(BillingServiceError):
    """Order or item status cannot change from its current state."""
    pass


class OrderNotFoundError(BillingServiceError):
    """Order does not exist."""
    pass


class OrderItemNotFoundError(BillingServiceError):
    """Item does not belong to the order."""
    pass


class BillNotFoundError(BillingServiceError):
    """Bill does not exist."""
    pass


class DuplicateBillError(BillingServiceError):
    """A bill already exists for this order."""
    pass


class OrderNotBillableError(BillingServiceError):
    """Order must be served or completed before billing."""
    pass


class ServiceUnavailableError(APIException):
    """Backing store unavailable while numbering a record."""
    status_code = 503
    default_detail = 'Service temporarily unavailable, try again later.'
    default_code = 'service_unavailable'
