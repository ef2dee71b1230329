"""
Billing App - Orders, Bills and Totals

Numbered orders and bills for table service. Order and bill numbers come
from the sequences app; every monetary total is derived by BillingCalculator
with an explicit call before the record is saved.

Key Features:
- Order numbering and 18% tax calculation
- Line item add/remove with total recomputation
- One bill per served order, with tip and discount
- Payment status mirrored from bill to order

Architecture:
- Calculator: BillingCalculator (pure, Decimal arithmetic)
- Models: Order, OrderItem, Bill
- Services: order_management, bill_management
- Views: OrderViewSet, BillViewSet
- Exceptions: Domain exception hierarchy
"""
