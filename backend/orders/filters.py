import django_filters
from django.db.models import Q
from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Filter set for the order list"""
    shop = django_filters.NumberFilter(field_name='shop_id')
    status = django_filters.ChoiceFilter(choices=Order.STATUS_CHOICES)
    payment_method = django_filters.ChoiceFilter(choices=Order.PAYMENT_METHOD_CHOICES)
    search = django_filters.CharFilter(method='filter_search')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = ['shop', 'status', 'payment_method', 'search', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        """Search in customer name and phone"""
        if not value or not value.strip():
            return queryset
        term = value.strip()
        return queryset.filter(Q(customer_name__icontains=term) | Q(customer_phone__icontains=term))
