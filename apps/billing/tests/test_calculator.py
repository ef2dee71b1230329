"""
Tests for BillingCalculator.

Covers order totals (rounding, tax on the raw subtotal, empty orders),
bill totals (tip, discount, idempotence) and input validation.
"""

import pytest
from decimal import Decimal
from types import SimpleNamespace

from apps.billing.calculator import BillingCalculator, MAX_AMOUNT, to_decimal, to_money
from apps.billing.exceptions import InvalidItem, InvalidAdjustment


# ============================================================================
# ORDER TOTALS
# ============================================================================

class TestComputeOrderTotals:

    def test_standard_order(self, calculator, order_items):
        totals = calculator.compute_order_totals(order_items)

        assert totals == {
            'subtotal': Decimal('330.00'),
            'tax': Decimal('59.40'),
            'total': Decimal('389.40'),
        }

    def test_empty_order_is_zero(self, calculator):
        totals = calculator.compute_order_totals([])

        assert totals['subtotal'] == Decimal('0.00')
        assert totals['tax'] == Decimal('0.00')
        assert totals['total'] == Decimal('0.00')

    def test_subtotal_and_tax_rounded_separately(self, calculator):
        """33.333 x 3 = 99.999: subtotal 100.00, tax 17.99982 -> 18.00."""
        totals = calculator.compute_order_totals([{'price': 33.333, 'quantity': 3}])

        assert totals['subtotal'] == Decimal('100.00')
        assert totals['tax'] == Decimal('18.00')
        assert totals['total'] == Decimal('118.00')

    def test_total_is_sum_of_rounded_parts(self, calculator):
        totals = calculator.compute_order_totals([
            {'price': Decimal('0.05'), 'quantity': 1},
            {'price': Decimal('10.07'), 'quantity': 3},
        ])

        assert totals['total'] == totals['subtotal'] + totals['tax']

    def test_half_cent_rounds_up(self, calculator):
        """2.25 x 0.18 = 0.405 -> 0.41."""
        totals = calculator.compute_order_totals([{'price': Decimal('2.25'), 'quantity': 1}])

        assert totals['tax'] == Decimal('0.41')

    def test_float_prices_are_exact(self, calculator):
        totals = calculator.compute_order_totals([{'price': 0.1, 'quantity': 3}])

        assert totals['subtotal'] == Decimal('0.30')

    def test_accepts_item_objects(self, calculator):
        items = [SimpleNamespace(price=Decimal('250'), quantity=1)]

        assert calculator.compute_order_totals(items)['total'] == Decimal('295.00')

    def test_custom_tax_rate(self):
        calculator = BillingCalculator(tax_rate=Decimal('0.05'))

        totals = calculator.compute_order_totals([{'price': Decimal('100'), 'quantity': 1}])

        assert totals['tax'] == Decimal('5.00')

    def test_default_rate_from_settings(self, settings):
        settings.BILLING_TAX_RATE = Decimal('0.10')

        assert BillingCalculator().tax_rate == Decimal('0.10')


class TestInvalidItems:

    @pytest.mark.parametrize('item', [
        {'price': Decimal('-1'), 'quantity': 1},
        {'price': Decimal('10'), 'quantity': 0},
        {'price': Decimal('10'), 'quantity': -2},
        {'price': Decimal('10'), 'quantity': 1.5},
        {'price': Decimal('10'), 'quantity': True},
        {'price': 'ten', 'quantity': 1},
        {'price': Decimal('NaN'), 'quantity': 1},
        {'quantity': 1},
        {'price': Decimal('10')},
    ])
    def test_rejected(self, calculator, item):
        with pytest.raises(InvalidItem):
            calculator.compute_order_totals([item])

    def test_error_names_position(self, calculator):
        items = [
            {'price': Decimal('10'), 'quantity': 1},
            {'price': Decimal('10'), 'quantity': 0},
        ]

        with pytest.raises(InvalidItem, match='Item 1'):
            calculator.compute_order_totals(items)

    def test_largest_storable_total_accepted(self, calculator):
        """84745762.70 + 18% tax = 99999999.99, the largest money value."""
        totals = calculator.compute_order_totals([
            {'price': Decimal('84745762.70'), 'quantity': 1},
        ])

        assert totals['total'] == MAX_AMOUNT

    def test_total_above_storable_maximum(self, calculator):
        with pytest.raises(InvalidItem, match='maximum'):
            calculator.compute_order_totals([
                {'price': Decimal('99999999.99'), 'quantity': 100},
            ])

    def test_tax_pushes_total_over_maximum(self, calculator):
        with pytest.raises(InvalidItem):
            calculator.compute_order_totals([
                {'price': Decimal('90000000.00'), 'quantity': 1},
            ])

    def test_price_above_storable_maximum(self, calculator):
        with pytest.raises(InvalidItem, match='Item 0 price'):
            calculator.compute_order_totals([{'price': Decimal('1E+30'), 'quantity': 1}])

    def test_huge_quantity(self, calculator):
        with pytest.raises(InvalidItem):
            calculator.compute_order_totals([{'price': Decimal('1'), 'quantity': 10 ** 40}])

    def test_zero_price_allowed(self, calculator):
        totals = calculator.compute_order_totals([{'price': Decimal('0'), 'quantity': 2}])

        assert totals['total'] == Decimal('0.00')


# ============================================================================
# BILL TOTALS
# ============================================================================

class TestComputeBillTotals:

    def test_tip_and_discount(self, calculator):
        totals = calculator.compute_bill_totals(330, 59.4, tip=50, discount=20)

        assert totals == {'total': Decimal('419.40')}

    def test_defaults_to_no_adjustments(self, calculator):
        totals = calculator.compute_bill_totals(Decimal('330.00'), Decimal('59.40'))

        assert totals['total'] == Decimal('389.40')

    def test_idempotent(self, calculator):
        first = calculator.compute_bill_totals(Decimal('330'), Decimal('59.40'), tip=Decimal('50'))
        second = calculator.compute_bill_totals(Decimal('330'), Decimal('59.40'), tip=Decimal('50'))

        assert first == second

    def test_discount_to_exactly_zero(self, calculator):
        totals = calculator.compute_bill_totals(Decimal('100'), Decimal('18'), discount=Decimal('118'))

        assert totals['total'] == Decimal('0.00')

    @pytest.mark.parametrize('kwargs', [
        {'tip': Decimal('-1')},
        {'discount': Decimal('-5')},
        {'discount': Decimal('500')},
        {'tip': 'lots'},
    ])
    def test_invalid_adjustments(self, calculator, kwargs):
        with pytest.raises(InvalidAdjustment):
            calculator.compute_bill_totals(Decimal('330'), Decimal('59.40'), **kwargs)

    def test_tip_above_storable_maximum(self, calculator):
        with pytest.raises(InvalidAdjustment, match='Tip'):
            calculator.compute_bill_totals(Decimal('10'), Decimal('1.80'), tip=Decimal('1E+9'))

    def test_bill_total_above_storable_maximum(self, calculator):
        with pytest.raises(InvalidAdjustment, match='Bill total'):
            calculator.compute_bill_totals(
                Decimal('84745762.70'),
                Decimal('15254237.29'),
                tip=Decimal('1.00'),
            )

    def test_bill_total_at_maximum(self, calculator):
        totals = calculator.compute_bill_totals(Decimal('84745762.70'), Decimal('15254237.29'))

        assert totals['total'] == MAX_AMOUNT

    def test_negative_subtotal_rejected(self, calculator):
        with pytest.raises(InvalidAdjustment, match='Subtotal'):
            calculator.compute_bill_totals(Decimal('-1'), Decimal('0'))


class TestHelpers:

    def test_to_money_half_up(self):
        assert to_money(Decimal('1.005')) == Decimal('1.01')
        assert to_money(Decimal('1.004')) == Decimal('1.00')

    def test_to_decimal_float_via_str(self):
        assert to_decimal(59.4) == Decimal('59.4')

    def test_to_decimal_rejects_bool(self):
        with pytest.raises(TypeError):
            to_decimal(True)
