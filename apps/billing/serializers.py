from decimal import Decimal

from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from .models import (
    Order,
    OrderItem,
    Bill,
    OrderStatus,
    ItemStatus,
    PaymentStatus,
    PaymentMethod,
)


# Upper bound on the quantity of a single order line
MAX_ITEM_QUANTITY = 1000


def money_input(**kwargs):
    return serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0'),
        **kwargs
    )


class DateRangeFilterMixin:
    """Reject a date_to that lies before date_from."""

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to:
            if date_from > date_to:
                raise serializers.ValidationError({
                    'date_to': 'End date must be after start date'
                })

        return attrs


# =============================================================================
# Input Serializers
# =============================================================================

class OrderFilterSerializer(DateRangeFilterMixin, serializers.Serializer):
    """
    Validate query parameters for order filtering.

    Query Parameters:
        status (str): Filter by order status
        table_number (int): Filter by table
        date_from (date): Orders created on or after this date
        date_to (date): Orders created on or before this date
    """

    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    table_number = serializers.IntegerField(min_value=1, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class BillFilterSerializer(DateRangeFilterMixin, serializers.Serializer):
    """
    Validate query parameters for bill filtering.

    Query Parameters:
        payment_status (str): Filter by payment status
        date_from (date): Bills created on or after this date
        date_to (date): Bills created on or before this date
    """

    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices,
        required=False
    )
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class OrderItemInputSerializer(serializers.Serializer):
    """One line item in an order request."""

    name = serializers.CharField(max_length=200)
    price = money_input()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_ITEM_QUANTITY)
    note = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class OrderCreateSerializer(serializers.Serializer):
    """
    Validate input for creating an order.

    Fields:
        table_number (int): Table the order is for
        items (list): At least one line item
        customer_name (str): Optional customer name
        special_instructions (str): Optional kitchen notes
    """

    table_number = serializers.IntegerField(min_value=1)
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    customer_name = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=''
    )
    special_instructions = serializers.CharField(
        required=False, allow_blank=True, default=''
    )


class OrderStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class ItemStatusInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ItemStatus.choices)


class BillCreateSerializer(serializers.Serializer):
    """
    Validate input for creating a bill.

    Subtotal and tax default to the order's stored values when omitted.
    """

    order = serializers.UUIDField()
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID
    )
    subtotal = money_input(required=False)
    tax = money_input(required=False)
    tip = money_input(default=Decimal('0'))
    discount = money_input(default=Decimal('0'))
    customer_name = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=''
    )
    customer_phone = serializers.CharField(
        max_length=30, required=False, allow_blank=True, default=''
    )


class BillUpdateSerializer(serializers.Serializer):
    """Partial bill update; only the provided fields change."""

    subtotal = money_input(required=False)
    tax = money_input(required=False)
    tip = money_input(required=False)
    discount = money_input(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    customer_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    customer_phone = serializers.CharField(max_length=30, required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class OrderItemSerializer(serializers.ModelSerializer):
    """Serializer for order line items."""

    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            'id',
            'name',
            'price',
            'quantity',
            'line_total',
            'note',
            'status',
            'created_at',
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Full order with items and waiter."""

    items = OrderItemSerializer(many=True, read_only=True)
    waiter = UserMinimalSerializer(read_only=True)
    bill_id = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'table_number',
            'status',
            'items',
            'subtotal',
            'tax',
            'total',
            'payment_status',
            'payment_method',
            'customer_name',
            'special_instructions',
            'waiter',
            'bill_id',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_bill_id(self, obj):
        bill = getattr(obj, 'bill', None)
        return str(bill.id) if bill else None


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists."""

    waiter_name = serializers.SerializerMethodField()
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'order_number',
            'table_number',
            'status',
            'total',
            'payment_status',
            'item_count',
            'waiter_name',
            'created_at',
        ]
        read_only_fields = fields

    def get_waiter_name(self, obj):
        return obj.waiter.get_display_name() if obj.waiter else None


class BillSerializer(serializers.ModelSerializer):
    """Bill with its order number and waiter."""

    order_number = serializers.IntegerField(source='order.order_number', read_only=True)
    table_number = serializers.IntegerField(source='order.table_number', read_only=True)
    waiter = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Bill
        fields = [
            'id',
            'bill_number',
            'order',
            'order_number',
            'table_number',
            'subtotal',
            'tax',
            'tip',
            'discount',
            'total',
            'payment_method',
            'payment_status',
            'customer_name',
            'customer_phone',
            'waiter',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BillSummarySerializer(serializers.Serializer):
    """Serializer for the printable bill summary."""

    bill = BillSerializer()
    order_number = serializers.IntegerField()
    table_number = serializers.IntegerField()
    item_count = serializers.IntegerField()
    items = OrderItemSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=10, decimal_places=2)
    tax = serializers.DecimalField(max_digits=10, decimal_places=2)
    tip = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2)
    total = serializers.DecimalField(max_digits=10, decimal_places=2)
    is_paid = serializers.BooleanField()
