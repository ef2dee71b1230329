from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in-progress', 'In progress'
    READY = 'ready', 'Ready'
    SERVED = 'served', 'Served'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class ItemStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PREPARING = 'preparing', 'Preparing'
    READY = 'ready', 'Ready'
    SERVED = 'served', 'Served'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentStatus(models.TextChoices):
    UNPAID = 'unpaid', 'Unpaid'
    PAID = 'paid', 'Paid'
    REFUNDED = 'refunded', 'Refunded'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    CARD = 'card', 'Card'
    UPI = 'upi', 'UPI'


# Orders in these states are closed for edits
CLOSED_ORDER_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

# Orders in these states can be billed
BILLABLE_ORDER_STATUSES = (OrderStatus.SERVED, OrderStatus.COMPLETED)


def money_field(**kwargs):
    return models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        **kwargs
    )


class Order(models.Model):
    """Table order with derived subtotal/tax/total."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Issued by SequenceGenerator ('orderNumber')
    order_number = models.PositiveBigIntegerField(unique=True, editable=False)

    table_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING
    )

    # Derived by BillingCalculator whenever items change
    subtotal = money_field(default=Decimal('0.00'))
    tax = money_field(default=Decimal('0.00'))
    total = money_field(default=Decimal('0.00'))

    # Payment
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID
    )
    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        blank=True
    )

    customer_name = models.CharField(max_length=100, blank=True)
    special_instructions = models.TextField(blank=True)

    waiter = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        indexes = [
            models.Index(fields=['status', 'created_at'], name='orders_status_created_idx'),
            models.Index(fields=['table_number'], name='orders_table_idx'),
            models.Index(fields=['payment_status'], name='orders_payment_status_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Order #{self.order_number} - table {self.table_number} ({self.status})"

    @property
    def is_closed(self):
        return self.status in CLOSED_ORDER_STATUSES

    @property
    def is_billable(self):
        return self.status in BILLABLE_ORDER_STATUSES

    def apply_totals(self, totals):
        """Copy a calculator result onto the order (does not save)."""
        self.subtotal = totals['subtotal']
        self.tax = totals['tax']
        self.total = totals['total']


class OrderItem(models.Model):
    """Line item of an order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items'
    )

    name = models.CharField(max_length=200)
    price = money_field()
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    note = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=20,
        choices=ItemStatus.choices,
        default=ItemStatus.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.quantity} x {self.name} @ {self.price}"

    @property
    def line_total(self):
        return self.price * self.quantity


class Bill(models.Model):
    """Bill for a served order, with tip and discount."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Issued by SequenceGenerator ('billNumber')
    bill_number = models.PositiveBigIntegerField(unique=True, editable=False)

    order = models.OneToOneField(
        Order,
        on_delete=models.CASCADE,
        related_name='bill'
    )

    # Amounts (total derived by BillingCalculator)
    subtotal = money_field()
    tax = money_field()
    tip = money_field(default=Decimal('0.00'))
    discount = money_field(default=Decimal('0.00'))
    total = money_field()

    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID
    )

    customer_name = models.CharField(max_length=100, blank=True)
    customer_phone = models.CharField(max_length=30, blank=True)

    waiter = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bills'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bills'
        indexes = [
            models.Index(fields=['payment_status', 'created_at'], name='bills_status_created_idx'),
            models.Index(fields=['waiter', 'created_at'], name='bills_waiter_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Bill #{self.bill_number} - {self.total} ({self.payment_status})"
