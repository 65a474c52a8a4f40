from django.contrib import admin
from django.utils.safestring import mark_safe
from .models import Category, Product, ProductImage


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'shop', 'slug', 'sort_order', 'created_at']
    list_filter = ['shop', 'created_at']
    search_fields = ['name', 'slug', 'shop__name']
    ordering = ['shop', 'sort_order', 'name']


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 0
    fields = ['image', 'preview', 'sort_order']
    readonly_fields = ['preview']

    def preview(self, obj):
        if obj.pk and obj.image:
            return mark_safe(f'<img src="{obj.image.url}" style="max-height: 80px;" />')
        return '-'


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'shop', 'category', 'price', 'stock', 'is_featured', 'is_active', 'created_at']
    list_filter = ['is_active', 'is_featured', 'shop', 'created_at']
    search_fields = ['name', 'slug', 'description', 'shop__name']
    ordering = ['-created_at']
    inlines = [ProductImageInline]
