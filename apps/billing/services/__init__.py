"""
Billing services - Business logic layer.

This package contains all order and bill operations:
- Order creation, line items and status
- Bill creation, adjustments and payment state

Totals always come from BillingCalculator and numbers from
SequenceGenerator; nothing is recomputed implicitly on save.
"""

# Order Management
from .order_management import (
    get_order_by_id,
    create_order,
    add_order_item,
    remove_order_item,
    update_order_status,
    update_item_status,
    recalculate_order_totals,
)

# Bill Management
from .bill_management import (
    get_bill_by_id,
    create_bill,
    update_bill,
    get_bill_summary,
)

__all__ = [
    # Order Management Services
    'get_order_by_id',
    'create_order',
    'add_order_item',
    'remove_order_item',
    'update_order_status',
    'update_item_status',
    'recalculate_order_totals',
    # Bill Management Services
    'get_bill_by_id',
    'create_bill',
    'update_bill',
    'get_bill_summary',
]
