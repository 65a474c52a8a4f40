from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ['product', 'quantity', 'unit_price', 'total_price', 'size', 'color']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'shop', 'customer_name', 'customer_phone', 'status', 'payment_method', 'created_at']
    list_filter = ['status', 'payment_method', 'shop', 'created_at']
    search_fields = ['customer_name', 'customer_phone', 'shop__name']
    ordering = ['-created_at']
    inlines = [OrderItemInline]
