from django.db.models import Count, Q
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsWaiterOrManager
from apps.sequences.exceptions import StorageUnavailable
from .models import Order, Bill, ItemStatus
from .serializers import (
    OrderSerializer,
    OrderListSerializer,
    OrderItemSerializer,
    BillSerializer,
    BillSummarySerializer,
    # Input serializers
    OrderFilterSerializer,
    BillFilterSerializer,
    OrderCreateSerializer,
    OrderItemInputSerializer,
    OrderStatusInputSerializer,
    ItemStatusInputSerializer,
    BillCreateSerializer,
    BillUpdateSerializer,
)
from .services import (
    create_order,
    add_order_item,
    remove_order_item,
    update_order_status,
    update_item_status,
    create_bill,
    update_bill,
    get_bill_summary,
)
from .exceptions import (
    BillingServiceError,
    OrderNotFoundError,
    OrderItemNotFoundError,
    BillNotFoundError,
    ServiceUnavailableError,
)

UUID_PATTERN = r'[0-9a-fA-F-]{36}'
NOT_FOUND_ERRORS = (OrderNotFoundError, OrderItemNotFoundError, BillNotFoundError)


def api_error(exc):
    """Translate a domain exception into its HTTP-facing APIException."""
    if isinstance(exc, StorageUnavailable):
        return ServiceUnavailableError()
    if isinstance(exc, NOT_FOUND_ERRORS):
        return NotFound(str(exc))
    return ValidationError(str(exc))


class BillingPagination(PageNumberPagination):
    """Pagination for orders and bills."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for table orders.

    list: Get orders (filter by status, table, date range)
    create: Create a numbered order with items
    retrieve: Get a specific order with its items
    add_item: Add a line item
    remove_item: Remove a line item
    update_status: Move the order to a new status
    item_status: Update the kitchen status of one item
    """

    queryset = Order.objects.select_related('waiter').prefetch_related('items')
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, IsWaiterOrManager]
    pagination_class = BillingPagination
    lookup_value_regex = UUID_PATTERN

    def get_permissions(self):
        """Kitchen staff may update item status."""
        if self.action == 'item_status':
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        """Filter orders using input serializer validation."""
        queryset = super().get_queryset()

        if self.action != 'list':
            return queryset

        filter_serializer = OrderFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'table_number' in params:
            queryset = queryset.filter(table_number=params['table_number'])
        if 'date_from' in params:
            queryset = queryset.filter(created_at__date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(created_at__date__lte=params['date_to'])

        return queryset.annotate(
            item_count=Count('items', filter=~Q(items__status=ItemStatus.CANCELLED))
        ).order_by('-created_at', '-order_number')

    def get_serializer_class(self):
        if self.action == 'list':
            return OrderListSerializer
        return OrderSerializer

    @extend_schema(request=OrderCreateSerializer, responses={201: OrderSerializer})
    def create(self, request, *args, **kwargs):
        """
        Create an order.

        POST /api/orders/
        Body: {"table_number": 4, "items": [{"name": "Dosa", "price": "120.00", "quantity": 2}]}
        """
        input_serializer = OrderCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        try:
            order = create_order(
                waiter=request.user,
                table_number=data['table_number'],
                items=data['items'],
                customer_name=data['customer_name'],
                special_instructions=data['special_instructions'],
            )
        except (BillingServiceError, StorageUnavailable) as e:
            raise api_error(e)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OrderItemInputSerializer, responses={201: OrderSerializer})
    @action(detail=True, methods=['post'], url_path='items')
    def add_item(self, request, pk=None):
        """
        Add a line item and return the updated order.

        POST /api/orders/{id}/items/
        """
        input_serializer = OrderItemInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            order = add_order_item(order_id=pk, **input_serializer.validated_data)
        except BillingServiceError as e:
            raise api_error(e)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=['delete'], url_path=rf'items/(?P<item_id>{UUID_PATTERN})')
    def remove_item(self, request, pk=None, item_id=None):
        """
        Remove a line item and return the updated order.

        DELETE /api/orders/{id}/items/{item_id}/
        """
        try:
            order = remove_order_item(order_id=pk, item_id=item_id)
        except BillingServiceError as e:
            raise api_error(e)

        return Response(OrderSerializer(order).data)

    @extend_schema(request=OrderStatusInputSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def update_status(self, request, pk=None):
        """
        Move an order to a new status.

        POST /api/orders/{id}/status/
        Body: {"status": "served"}
        """
        input_serializer = OrderStatusInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            order = update_order_status(
                order_id=pk,
                status=input_serializer.validated_data['status']
            )
        except BillingServiceError as e:
            raise api_error(e)

        return Response(OrderSerializer(order).data)

    @extend_schema(request=ItemStatusInputSerializer, responses={200: OrderItemSerializer})
    @action(
        detail=True,
        methods=['post'],
        url_path=rf'items/(?P<item_id>{UUID_PATTERN})/status'
    )
    def item_status(self, request, pk=None, item_id=None):
        """
        Update the kitchen status of one item.

        POST /api/orders/{id}/items/{item_id}/status/
        Body: {"status": "ready"}
        """
        input_serializer = ItemStatusInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        try:
            item = update_item_status(
                order_id=pk,
                item_id=item_id,
                status=input_serializer.validated_data['status']
            )
        except BillingServiceError as e:
            raise api_error(e)

        return Response(OrderItemSerializer(item).data)


class BillViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for bills.

    list: Get bills (filter by payment status, date range)
    create: Bill a served order
    retrieve: Get a specific bill
    partial_update: Adjust amounts or payment state
    summary: Printable bill summary
    """

    queryset = Bill.objects.select_related('order', 'waiter')
    serializer_class = BillSerializer
    permission_classes = [IsAuthenticated, IsWaiterOrManager]
    pagination_class = BillingPagination
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        """Filter bills using input serializer validation."""
        queryset = super().get_queryset()

        if self.action != 'list':
            return queryset

        filter_serializer = BillFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'payment_status' in params:
            queryset = queryset.filter(payment_status=params['payment_status'])
        if 'date_from' in params:
            queryset = queryset.filter(created_at__date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(created_at__date__lte=params['date_to'])

        return queryset

    @extend_schema(request=BillCreateSerializer, responses={201: BillSerializer})
    def create(self, request, *args, **kwargs):
        """
        Bill a served order.

        POST /api/bills/
        Body: {"order": "<uuid>", "payment_method": "cash", "tip": "50", "discount": "20"}
        """
        input_serializer = BillCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = dict(input_serializer.validated_data)

        try:
            bill = create_bill(
                order_id=data.pop('order'),
                waiter=request.user,
                **data
            )
        except (BillingServiceError, StorageUnavailable) as e:
            raise api_error(e)

        return Response(BillSerializer(bill).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=BillUpdateSerializer, responses={200: BillSerializer})
    def partial_update(self, request, pk=None):
        """
        Adjust a bill. The total is recomputed when an amount changes.

        PATCH /api/bills/{id}/
        Body: {"payment_status": "paid"}
        """
        input_serializer = BillUpdateSerializer(data=request.data, partial=True)
        input_serializer.is_valid(raise_exception=True)

        try:
            bill = update_bill(bill_id=pk, **input_serializer.validated_data)
        except BillingServiceError as e:
            raise api_error(e)

        return Response(BillSerializer(bill).data)

    @extend_schema(responses={200: BillSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """
        Get a printable summary of the bill.

        GET /api/bills/{id}/summary/
        """
        try:
            summary = get_bill_summary(bill_id=pk)
        except BillingServiceError as e:
            raise api_error(e)

        return Response(BillSummarySerializer(summary).data)
