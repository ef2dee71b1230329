"""Bill management service - numbering, adjustments and payment state."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.accounts.models import User
from apps.sequences.services import SequenceGenerator, BILL_NUMBER
from apps.billing.calculator import BillingCalculator, ZERO, to_decimal, to_money
from apps.billing.models import Bill, Order, ItemStatus, PaymentStatus
from apps.billing.exceptions import (
    BillNotFoundError,
    DuplicateBillError,
    OrderNotFoundError,
    OrderNotBillableError,
)

logger = logging.getLogger(__name__)

AMOUNT_FIELDS = ('subtotal', 'tax', 'tip', 'discount')


def get_bill_by_id(*, bill_id: UUID) -> Bill:
    """
    Get bill with its order and waiter loaded.

    Raises:
        BillNotFoundError: If bill doesn't exist
    """
    try:
        return Bill.objects.select_related('order', 'waiter').get(id=bill_id)
    except Bill.DoesNotExist:
        raise BillNotFoundError("Bill not found")


@transaction.atomic
def create_bill(
    *,
    order_id: UUID,
    waiter: Optional[User],
    payment_method: str,
    tip: Decimal = Decimal('0'),
    discount: Decimal = Decimal('0'),
    subtotal: Optional[Decimal] = None,
    tax: Optional[Decimal] = None,
    payment_status: str = PaymentStatus.UNPAID,
    customer_name: str = '',
    customer_phone: str = '',
    sequences: Optional[SequenceGenerator] = None,
    calculator: Optional[BillingCalculator] = None,
) -> Bill:
    """
    Create a numbered bill for a served order.

    This operation:
    1. Locks the order and checks it can be billed (once)
    2. Defaults subtotal/tax to the order's values
    3. Validates tip/discount and computes the total
    4. Takes the next 'billNumber' from the sequence generator
    5. Marks the order paid when the bill is created as paid

    Args:
        order_id: UUID of the order being billed
        waiter: Staff member issuing the bill
        payment_method: cash, card or upi
        tip: Optional tip (default 0)
        discount: Optional discount (default 0)
        subtotal: Override for the order subtotal
        tax: Override for the order tax
        payment_status: Initial payment status (default unpaid)
        customer_name: Optional customer name
        customer_phone: Optional customer phone
        sequences: Sequence generator (defaults to the default database)
        calculator: Billing calculator

    Returns:
        Created Bill instance

    Raises:
        OrderNotFoundError: If order doesn't exist
        DuplicateBillError: If the order already has a bill
        OrderNotBillableError: If the order is not served or completed
        InvalidAdjustment: If amounts are negative or discount exceeds the total
        StorageUnavailable: If the bill number cannot be issued
    """
    calculator = calculator or BillingCalculator()
    sequences = sequences or SequenceGenerator()

    try:
        order = Order.objects.select_for_update().get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError("Order not found")

    if Bill.objects.filter(order=order).exists():
        raise DuplicateBillError("A bill already exists for this order")

    if not order.is_billable:
        raise OrderNotBillableError(
            "Order must be served or completed before creating a bill"
        )

    amounts = {
        'subtotal': order.subtotal if subtotal is None else subtotal,
        'tax': order.tax if tax is None else tax,
        'tip': tip,
        'discount': discount,
    }
    # Validate raw input, then total the cent-rounded amounts that get stored
    calculator.compute_bill_totals(**amounts)
    amounts = _as_money(amounts)
    totals = calculator.compute_bill_totals(**amounts)

    try:
        with transaction.atomic():
            bill = Bill.objects.create(
                bill_number=sequences.get_next(BILL_NUMBER),
                order=order,
                total=totals['total'],
                payment_method=payment_method,
                payment_status=payment_status,
                customer_name=customer_name,
                customer_phone=customer_phone,
                waiter=waiter,
                **amounts,
            )
    except IntegrityError:
        raise DuplicateBillError("A bill already exists for this order")

    if payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
        _sync_order_payment(order, bill)

    logger.info(
        "Created bill #%s for order #%s (total %s, %s)",
        bill.bill_number, order.order_number, bill.total, bill.payment_status
    )
    return bill


@transaction.atomic
def update_bill(
    *,
    bill_id: UUID,
    subtotal: Optional[Decimal] = None,
    tax: Optional[Decimal] = None,
    tip: Optional[Decimal] = None,
    discount: Optional[Decimal] = None,
    payment_method: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
    calculator: Optional[BillingCalculator] = None,
) -> Bill:
    """
    Update bill fields (only non-None values).

    Whenever subtotal, tax, tip or discount is given, the total is
    recomputed from the resulting amounts. A transition to paid (or
    refunded) is mirrored on the order.

    Raises:
        BillNotFoundError: If bill doesn't exist
        InvalidAdjustment: If amounts are negative or discount exceeds the total
    """
    try:
        bill = Bill.objects.select_for_update().select_related('order').get(id=bill_id)
    except Bill.DoesNotExist:
        raise BillNotFoundError("Bill not found")

    changes = {
        'subtotal': subtotal,
        'tax': tax,
        'tip': tip,
        'discount': discount,
    }
    update_fields = ['updated_at']

    if any(value is not None for value in changes.values()):
        amounts = {
            field: getattr(bill, field) if value is None else value
            for field, value in changes.items()
        }
        calculator = calculator or BillingCalculator()
        calculator.compute_bill_totals(**amounts)
        amounts = _as_money(amounts)
        totals = calculator.compute_bill_totals(**amounts)

        for field, value in amounts.items():
            setattr(bill, field, value)
        bill.total = totals['total']
        update_fields.extend(AMOUNT_FIELDS + ('total',))

    if payment_method is not None:
        bill.payment_method = payment_method
        update_fields.append('payment_method')
    if customer_name is not None:
        bill.customer_name = customer_name
        update_fields.append('customer_name')
    if customer_phone is not None:
        bill.customer_phone = customer_phone
        update_fields.append('customer_phone')

    status_changed = payment_status is not None and payment_status != bill.payment_status
    if payment_status is not None:
        bill.payment_status = payment_status
        update_fields.append('payment_status')

    bill.save(update_fields=update_fields)

    if status_changed and payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
        _sync_order_payment(bill.order, bill)

    if status_changed:
        logger.info("Bill #%s marked %s", bill.bill_number, payment_status)
    return bill


def get_bill_summary(*, bill_id: UUID) -> dict:
    """
    Get a printable summary of a bill.

    Returns:
        dict: bill, order number, table number, item lines and amounts.

    Raises:
        BillNotFoundError: If bill doesn't exist
    """
    bill = get_bill_by_id(bill_id=bill_id)
    # Cancelled items are not charged
    items = list(bill.order.items.exclude(status=ItemStatus.CANCELLED))

    return {
        'bill': bill,
        'order_number': bill.order.order_number,
        'table_number': bill.order.table_number,
        'item_count': sum(item.quantity for item in items),
        'items': items,
        'subtotal': bill.subtotal,
        'tax': bill.tax,
        'tip': bill.tip,
        'discount': bill.discount,
        'total': bill.total,
        'is_paid': bill.payment_status == PaymentStatus.PAID,
    }


def _as_money(amounts):
    return {
        field: ZERO if value is None else to_money(to_decimal(value))
        for field, value in amounts.items()
    }


def _sync_order_payment(order, bill):
    order.payment_status = bill.payment_status
    order.payment_method = bill.payment_method
    order.save(update_fields=['payment_status', 'payment_method', 'updated_at'])
