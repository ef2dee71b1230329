# ==========================================
# apps/billing/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import Order, OrderItem, Bill, PaymentStatus
from .services import recalculate_order_totals


PAYMENT_BADGE_COLORS = {
    PaymentStatus.UNPAID: ('#E5C49A', '#2C1810'),
    PaymentStatus.PAID: ('#6B8E5E', 'white'),
    PaymentStatus.REFUNDED: ('#A47449', 'white'),
}


def payment_badge(obj):
    bg, fg = PAYMENT_BADGE_COLORS.get(obj.payment_status, ('#ccc', '#666'))
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, obj.get_payment_status_display()
    )


class OrderItemInline(admin.TabularInline):
    """Inline admin for line items within an order."""
    model = OrderItem
    extra = 0
    fields = ['name', 'price', 'quantity', 'status', 'note']
    readonly_fields = ['name', 'price', 'quantity', 'status']

    def has_add_permission(self, request, obj=None):
        """Items are added through the order service so totals stay derived."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin interface for Orders.

    Amounts are read-only; they are derived from the items by
    BillingCalculator.
    """

    list_display = [
        'order_number',
        'table_number',
        'status',
        'total',
        'payment_status_badge',
        'waiter',
        'created_at',
    ]
    list_filter = ['status', 'payment_status', 'created_at']
    search_fields = ['order_number', 'customer_name', 'waiter__email']
    readonly_fields = [
        'order_number',
        'subtotal',
        'tax',
        'total',
        'created_at',
        'updated_at',
    ]
    inlines = [OrderItemInline]
    date_hierarchy = 'created_at'
    actions = ['recalculate_totals']

    fieldsets = (
        ('Order', {
            'fields': (
                'order_number',
                'table_number',
                'status',
                'waiter',
            )
        }),
        ('Amounts', {
            'fields': ('subtotal', 'tax', 'total')
        }),
        ('Payment', {
            'fields': ('payment_status', 'payment_method')
        }),
        ('Customer', {
            'fields': ('customer_name', 'special_instructions'),
            'classes': ('collapse',),
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def payment_status_badge(self, obj):
        return payment_badge(obj)
    payment_status_badge.short_description = 'Payment'
    payment_status_badge.admin_order_field = 'payment_status'

    @admin.action(description='Recalculate totals from items')
    def recalculate_totals(self, request, queryset):
        for order in queryset:
            recalculate_order_totals(order=order)
        self.message_user(request, f'Recalculated totals for {queryset.count()} order(s).')

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('waiter')


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    """Admin interface for Bills."""

    list_display = [
        'bill_number',
        'get_order_number',
        'total',
        'payment_method',
        'payment_status_badge',
        'waiter',
        'created_at',
    ]
    list_filter = ['payment_status', 'payment_method', 'created_at']
    search_fields = ['bill_number', 'order__order_number', 'customer_name', 'customer_phone']
    readonly_fields = [
        'bill_number',
        'order',
        'subtotal',
        'tax',
        'tip',
        'discount',
        'total',
        'created_at',
        'updated_at',
    ]
    date_hierarchy = 'created_at'

    def get_order_number(self, obj):
        return obj.order.order_number
    get_order_number.short_description = 'Order'
    get_order_number.admin_order_field = 'order__order_number'

    def payment_status_badge(self, obj):
        return payment_badge(obj)
    payment_status_badge.short_description = 'Payment'
    payment_status_badge.admin_order_field = 'payment_status'

    def has_add_permission(self, request):
        """Bills are numbered by the bill service."""
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('order', 'waiter')
