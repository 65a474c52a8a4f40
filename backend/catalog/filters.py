import django_filters
from django.db.models import Q
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter set for the product list and the storefront catalog"""
    search = django_filters.CharFilter(method='filter_search')
    category = django_filters.NumberFilter(field_name='category_id')
    category_slug = django_filters.CharFilter(field_name='category__slug', lookup_expr='iexact')
    is_featured = django_filters.BooleanFilter(field_name='is_featured')
    is_active = django_filters.BooleanFilter(field_name='is_active')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    in_stock = django_filters.BooleanFilter(method='filter_in_stock')
    shop = django_filters.NumberFilter(field_name='shop_id')
    subdomain = django_filters.CharFilter(field_name='shop__subdomain', lookup_expr='iexact')

    class Meta:
        model = Product
        fields = ['search', 'category', 'category_slug', 'is_featured', 'is_active',
                  'min_price', 'max_price', 'in_stock', 'shop', 'subdomain']

    def filter_search(self, queryset, name, value):
        """Search in name and description"""
        if not value or not value.strip():
            return queryset
        term = value.strip()
        return queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))

    def filter_in_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(stock__gt=0)
        return queryset.filter(stock=0)
