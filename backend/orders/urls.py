from django.urls import path
from .views import order_list_create, order_detail, order_status, storefront_order

urlpatterns = [
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/status/', order_status, name='order-status'),
    path('storefront/orders/', storefront_order, name='storefront-order'),
]
