"""Order management service - numbering, line items and totals."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.sequences.services import SequenceGenerator, ORDER_NUMBER
from apps.billing.calculator import BillingCalculator, to_decimal, to_money
from apps.billing.models import Order, OrderItem, OrderStatus, ItemStatus
from apps.billing.exceptions import (
    EmptyOrderError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    OrderItemNotFoundError,
)

logger = logging.getLogger(__name__)


def get_order_by_id(*, order_id: UUID) -> Order:
    """
    Get order with items and waiter loaded.

    Raises:
        OrderNotFoundError: If order doesn't exist
    """
    try:
        return (
            Order.objects
            .select_related('waiter')
            .prefetch_related('items')
            .get(id=order_id)
        )
    except Order.DoesNotExist:
        raise OrderNotFoundError("Order not found")


@transaction.atomic
def create_order(
    *,
    waiter: Optional[User],
    table_number: int,
    items: list[dict],
    customer_name: str = '',
    special_instructions: str = '',
    sequences: Optional[SequenceGenerator] = None,
    calculator: Optional[BillingCalculator] = None,
) -> Order:
    """
    Create a numbered order with its line items and totals.

    This operation:
    1. Validates the items (before a number is consumed)
    2. Takes the next 'orderNumber' from the sequence generator
    3. Creates the order and its items
    4. Computes subtotal/tax/total from the stored items

    Args:
        waiter: Staff member taking the order
        table_number: Table the order is for
        items: List of dicts with name, price, quantity and optional note
        customer_name: Optional customer name
        special_instructions: Optional kitchen instructions
        sequences: Sequence generator (defaults to the default database)
        calculator: Billing calculator (defaults to the configured tax rate)

    Returns:
        Created Order instance

    Raises:
        EmptyOrderError: If no items are given
        InvalidItem: If any item is malformed
        StorageUnavailable: If the order number cannot be issued
    """
    if not items:
        raise EmptyOrderError("Order must contain at least one item")

    calculator = calculator or BillingCalculator()
    sequences = sequences or SequenceGenerator()

    # Validate raw input first so a bad item never burns an order number
    calculator.compute_order_totals(items)

    order = Order.objects.create(
        order_number=sequences.get_next(ORDER_NUMBER),
        table_number=table_number,
        waiter=waiter,
        customer_name=customer_name,
        special_instructions=special_instructions,
    )

    OrderItem.objects.bulk_create([
        _build_item(order, item) for item in items
    ])

    _recalculate(order, calculator)

    logger.info(
        "Created order #%s for table %s (%s items, total %s)",
        order.order_number, table_number, len(items), order.total
    )
    return order


@transaction.atomic
def add_order_item(
    *,
    order_id: UUID,
    name: str,
    price: Decimal,
    quantity: int,
    note: str = '',
    calculator: Optional[BillingCalculator] = None,
) -> Order:
    """
    Add a line item to an open order and recompute its totals.

    Raises:
        OrderNotFoundError: If order doesn't exist
        InvalidStatusTransitionError: If order is closed or already billed
        InvalidItem: If the item is malformed
    """
    calculator = calculator or BillingCalculator()
    order = _lock_order(order_id)
    _ensure_editable(order)

    item = {'name': name, 'price': price, 'quantity': quantity, 'note': note}
    calculator.compute_order_totals([item])

    _build_item(order, item).save()
    _recalculate(order, calculator)

    logger.info("Added %s x %s to order #%s", quantity, name, order.order_number)
    return order


@transaction.atomic
def remove_order_item(
    *,
    order_id: UUID,
    item_id: UUID,
    calculator: Optional[BillingCalculator] = None,
) -> Order:
    """
    Remove a line item from an open order and recompute its totals.

    Raises:
        OrderNotFoundError: If order doesn't exist
        OrderItemNotFoundError: If item is not part of the order
        InvalidStatusTransitionError: If order is closed or already billed
    """
    order = _lock_order(order_id)
    _ensure_editable(order)

    deleted, _ = OrderItem.objects.filter(order=order, id=item_id).delete()
    if not deleted:
        raise OrderItemNotFoundError("Item not found in this order")

    _recalculate(order, calculator or BillingCalculator())

    logger.info("Removed item %s from order #%s", item_id, order.order_number)
    return order


@transaction.atomic
def update_order_status(*, order_id: UUID, status: str) -> Order:
    """
    Move an order to a new status.

    Completed and cancelled orders are final.

    Raises:
        OrderNotFoundError: If order doesn't exist
        InvalidStatusTransitionError: If order is closed or status unknown
    """
    if status not in OrderStatus.values:
        raise InvalidStatusTransitionError(f"Unknown order status: {status}")

    order = _lock_order(order_id)
    if order.is_closed and order.status != status:
        raise InvalidStatusTransitionError(
            f"Cannot change status of a {order.status} order"
        )

    previous = order.status
    order.status = status
    order.save(update_fields=['status', 'updated_at'])

    logger.info("Order #%s: %s -> %s", order.order_number, previous, status)
    return order


@transaction.atomic
def update_item_status(
    *,
    order_id: UUID,
    item_id: UUID,
    status: str,
    calculator: Optional[BillingCalculator] = None,
) -> OrderItem:
    """
    Update the kitchen status of a single line item.

    Cancelling an item (or restoring a cancelled one) changes what the
    order charges, so totals are recomputed in that case.

    Raises:
        OrderNotFoundError: If order doesn't exist
        OrderItemNotFoundError: If item is not part of the order
        InvalidStatusTransitionError: If order is closed or status unknown
    """
    if status not in ItemStatus.values:
        raise InvalidStatusTransitionError(f"Unknown item status: {status}")

    order = _lock_order(order_id)
    if order.is_closed:
        raise InvalidStatusTransitionError(
            f"Cannot update items of a {order.status} order"
        )

    try:
        item = order.items.get(id=item_id)
    except OrderItem.DoesNotExist:
        raise OrderItemNotFoundError("Item not found in this order")

    affects_totals = ItemStatus.CANCELLED in (item.status, status)
    if affects_totals and hasattr(order, 'bill'):
        raise InvalidStatusTransitionError("Cannot cancel items of a billed order")

    item.status = status
    item.save(update_fields=['status'])

    if affects_totals:
        _recalculate(order, calculator or BillingCalculator())

    return item


def recalculate_order_totals(
    *,
    order: Order,
    calculator: Optional[BillingCalculator] = None,
) -> Order:
    """Recompute and save an order's totals from its stored items."""
    return _recalculate(order, calculator or BillingCalculator())


def _lock_order(order_id):
    try:
        return Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError("Order not found")


def _ensure_editable(order):
    if order.is_closed:
        raise InvalidStatusTransitionError(
            f"Cannot modify items of a {order.status} order"
        )
    if hasattr(order, 'bill'):
        raise InvalidStatusTransitionError("Cannot modify items of a billed order")


def _build_item(order, item):
    # Prices are stored in cents; totals are derived from the stored value
    return OrderItem(
        order=order,
        name=item.get('name', ''),
        price=to_money(to_decimal(item['price'])),
        quantity=item['quantity'],
        note=item.get('note') or '',
    )


def _recalculate(order, calculator):
    items = OrderItem.objects.filter(order=order).exclude(status=ItemStatus.CANCELLED)
    order.apply_totals(calculator.compute_order_totals(items))
    order.save(update_fields=['subtotal', 'tax', 'total', 'updated_at'])
    return order
