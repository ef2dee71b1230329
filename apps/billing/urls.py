from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'billing'

router = DefaultRouter()
router.register(r'orders', views.OrderViewSet, basename='order')
router.register(r'bills', views.BillViewSet, basename='bill')

urlpatterns = [
    # Order routes
    # GET    /api/orders/                               - List orders
    # POST   /api/orders/                               - Create order
    # GET    /api/orders/{id}/                          - Get order details
    # POST   /api/orders/{id}/items/                    - Add item
    # DELETE /api/orders/{id}/items/{item_id}/          - Remove item
    # POST   /api/orders/{id}/status/                   - Update order status
    # POST   /api/orders/{id}/items/{item_id}/status/   - Update item status

    # Bill routes
    # GET    /api/bills/                                - List bills
    # POST   /api/bills/                                - Create bill
    # GET    /api/bills/{id}/                           - Get bill details
    # PATCH  /api/bills/{id}/                           - Adjust bill
    # GET    /api/bills/{id}/summary/                   - Bill summary

    path('', include(router.urls)),
]
