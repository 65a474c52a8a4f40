from django.contrib import admin
from .models import Shop


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ['name', 'subdomain', 'owner', 'plan', 'is_active', 'created_at']
    list_filter = ['plan', 'is_active', 'template', 'created_at']
    search_fields = ['name', 'subdomain', 'slug', 'custom_domain', 'owner__username']
    filter_horizontal = ['staff']
    ordering = ['name']
