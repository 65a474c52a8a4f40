from django.urls import path
from .views import (
    category_list_create, category_detail,
    product_list_create, product_detail, product_by_slug,
    product_images, product_image_delete, save_ai_image,
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/save-ai-image/', save_ai_image, name='product-save-ai-image'),
    path('products/by-slug/<str:shop_subdomain>/<str:slug>/', product_by_slug, name='product-by-slug'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/images/', product_images, name='product-images'),
    path('products/<int:pk>/images/<int:image_id>/', product_image_delete, name='product-image-delete'),
]
