"""
Billing Calculator
==================

Derives monetary totals for orders and bills.

Rounding rules:
    - All arithmetic is done in ``Decimal``; floats are converted through
      ``str`` so ``33.333`` stays ``33.333``.
    - Every derived amount is rounded to cents with ``ROUND_HALF_UP``.
    - Tax is computed from the *unrounded* subtotal, then rounded.
    - The order total is the rounded subtotal plus the rounded tax, so a
      stored ``{subtotal, tax, total}`` triple always adds up.

Example:
    Order and bill totals::

        calculator = BillingCalculator()
        totals = calculator.compute_order_totals([
            {'price': Decimal('250'), 'quantity': 1},
            {'price': Decimal('40'), 'quantity': 2},
        ])
        # {'subtotal': Decimal('330.00'), 'tax': Decimal('59.40'), 'total': Decimal('389.40')}

        calculator.compute_bill_totals(
            totals['subtotal'], totals['tax'], tip=Decimal('50'), discount=Decimal('20')
        )
        # {'total': Decimal('419.40')}
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings

from .exceptions import InvalidItem, InvalidAdjustment


CENT = Decimal('0.01')
ZERO = Decimal('0.00')
DEFAULT_TAX_RATE = Decimal('0.18')

# Largest amount a money column (10 digits, 2 decimal places) can store
MAX_AMOUNT = Decimal('99999999.99')


def to_money(value):
    """Round a Decimal to cents (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value):
    """Convert a number to Decimal without picking up float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary amount")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class BillingCalculator:
    """
    Pure calculator for order and bill totals.

    Holds no state besides the tax rate, so one instance can be shared
    freely. The rate defaults to ``settings.BILLING_TAX_RATE`` (18%).

    Methods:
        compute_order_totals: subtotal, tax and total from line items.
        compute_bill_totals: bill total from subtotal, tax, tip and discount.
    """

    def __init__(self, tax_rate=None):
        if tax_rate is None:
            tax_rate = getattr(settings, 'BILLING_TAX_RATE', DEFAULT_TAX_RATE)
        self.tax_rate = to_decimal(tax_rate)

    def compute_order_totals(self, items):
        """
        Compute subtotal, tax and total for a sequence of line items.

        Args:
            items: Iterable of mappings or objects exposing ``price``
                (non-negative) and ``quantity`` (positive integer).
                An empty iterable yields zero totals.

        Returns:
            dict: ``{'subtotal', 'tax', 'total'}`` as cent-rounded Decimals.

        Raises:
            InvalidItem: If any item has a missing or non-numeric field,
                a negative price, or a non-positive quantity, or if an
                amount would not fit a money column (MAX_AMOUNT).
        """
        raw_subtotal = Decimal('0')
        for position, item in enumerate(items):
            price, quantity = self._line_values(item, position)
            raw_subtotal += price * quantity

        if raw_subtotal > MAX_AMOUNT:
            raise InvalidItem(f"Order subtotal exceeds the maximum of {MAX_AMOUNT}")

        tax = to_money(raw_subtotal * self.tax_rate)
        subtotal = to_money(raw_subtotal)
        total = to_money(subtotal + tax)

        if total > MAX_AMOUNT:
            raise InvalidItem(f"Order total {total} exceeds the maximum of {MAX_AMOUNT}")

        return {
            'subtotal': subtotal,
            'tax': tax,
            'total': total,
        }

    def compute_bill_totals(self, subtotal, tax, tip=0, discount=0):
        """
        Compute a bill total from its components.

        ``total = round(subtotal + tax + tip - discount, 2)``. Calling it
        again with unchanged inputs yields the same total.

        Args:
            subtotal: Order subtotal.
            tax: Order tax.
            tip: Optional tip (default 0).
            discount: Optional discount (default 0).

        Returns:
            dict: ``{'total'}`` as a cent-rounded Decimal.

        Raises:
            InvalidAdjustment: If any component is negative, non-numeric or
                above MAX_AMOUNT, or the total falls outside 0..MAX_AMOUNT.
        """
        amounts = {}
        for field, value in (
            ('subtotal', subtotal),
            ('tax', tax),
            ('tip', tip),
            ('discount', discount),
        ):
            amount = ZERO if value is None else self._amount(value, field)
            if amount < 0:
                raise InvalidAdjustment(f"{field.capitalize()} cannot be negative")
            if amount > MAX_AMOUNT:
                raise InvalidAdjustment(
                    f"{field.capitalize()} exceeds the maximum of {MAX_AMOUNT}"
                )
            amounts[field] = amount

        total = to_money(
            amounts['subtotal'] + amounts['tax'] + amounts['tip'] - amounts['discount']
        )
        if total < 0:
            raise InvalidAdjustment(
                f"Discount {amounts['discount']} exceeds the amount due"
            )
        if total > MAX_AMOUNT:
            raise InvalidAdjustment(f"Bill total {total} exceeds the maximum of {MAX_AMOUNT}")

        return {'total': total}

    def _line_values(self, item, position):
        if isinstance(item, Mapping):
            price = item.get('price')
            quantity = item.get('quantity')
        else:
            price = getattr(item, 'price', None)
            quantity = getattr(item, 'quantity', None)

        if price is None or quantity is None:
            raise InvalidItem(f"Item {position} needs both price and quantity")

        try:
            price = to_decimal(price)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidItem(f"Item {position} has a non-numeric price")

        if not price.is_finite():
            raise InvalidItem(f"Item {position} has a non-numeric price")
        if price < 0:
            raise InvalidItem(f"Item {position} has a negative price")
        if price > MAX_AMOUNT:
            raise InvalidItem(f"Item {position} price exceeds the maximum of {MAX_AMOUNT}")

        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidItem(f"Item {position} quantity must be a whole number")
        if quantity <= 0:
            raise InvalidItem(f"Item {position} quantity must be at least 1")

        return price, quantity

    def _amount(self, value, field):
        try:
            amount = to_decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAdjustment(f"{field.capitalize()} must be a number")
        if not amount.is_finite():
            raise InvalidAdjustment(f"{field.capitalize()} must be a number")
        return amount
