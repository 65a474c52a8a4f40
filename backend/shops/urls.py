from django.urls import path
from .views import shop_list_create, shop_detail, shop_me, storefront

urlpatterns = [
    path('shops/', shop_list_create, name='shop-list-create'),
    path('shops/me/', shop_me, name='shop-me'),
    path('shops/<int:pk>/', shop_detail, name='shop-detail'),
    path('storefront/<str:subdomain>/', storefront, name='storefront'),
]
