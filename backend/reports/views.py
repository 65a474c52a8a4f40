import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, DecimalField, Sum
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.catalog.models import Product
from backend.core.model_cache import cache_dashboard, get_cached_dashboard
from backend.core.permissions import resolve_shop_scope
from backend.credits.models import UserCredit
from backend.orders.models import Order, OrderItem

logger = logging.getLogger('backend.reports')

RECENT_ORDERS_LIMIT = 5
REVENUE_WINDOW_DAYS = 30


def _revenue(items):
    return items.aggregate(
        total=Sum('total_price', output_field=DecimalField())
    )['total'] or Decimal('0.00')


def build_dashboard_stats(shop_id=None):
    """Product, order and revenue figures for one shop (all shops when None)"""
    products = Product.objects.all()
    orders = Order.objects.all()
    if shop_id:
        products = products.filter(shop_id=shop_id)
        orders = orders.filter(shop_id=shop_id)

    by_status = {code: 0 for code, _ in Order.STATUS_CHOICES}
    for row in orders.values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    revenue_items = OrderItem.objects.filter(order__in=orders, order__status__in=Order.REVENUE_STATUSES)
    since = timezone.now() - timedelta(days=REVENUE_WINDOW_DAYS)

    recent_orders = []
    for order in orders.prefetch_related('items').order_by('-created_at', '-id')[:RECENT_ORDERS_LIMIT]:
        recent_orders.append({
            'id': order.id,
            'customer_name': order.customer_name,
            'status': order.status,
            'total': str(order.get_total()),
            'created_at': order.created_at.isoformat(),
        })

    return {
        'products': {
            'total': products.count(),
            'active': products.filter(is_active=True).count(),
            'out_of_stock': products.filter(stock=0).count(),
        },
        'orders': {
            'total': orders.count(),
            'pending': by_status['pending'],
            'by_status': by_status,
        },
        'revenue': {
            'total': str(_revenue(revenue_items)),
            'last_30_days': str(_revenue(revenue_items.filter(order__created_at__gte=since))),
        },
        'recent_orders': recent_orders,
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Dashboard stats of the caller's shop; admins may pick one with ?shop="""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    shop_id = scope.shop_id
    if scope.is_admin:
        shop_param = request.query_params.get('shop')
        if shop_param:
            try:
                shop_id = int(shop_param)
            except ValueError:
                return Response({'error': 'Invalid shop id'}, status=status.HTTP_400_BAD_REQUEST)

    stats = get_cached_dashboard(shop_id)
    if stats is None:
        stats = build_dashboard_stats(shop_id)
        cache_dashboard(shop_id, stats)
        logger.debug(f"Built dashboard stats for shop {shop_id or 'all'}")

    # Credit balance is per user and not part of the cached stats
    balance = UserCredit.objects.filter(user=request.user).values_list('balance', flat=True).first()
    return Response(dict(stats, credits={'balance': balance or 0}))
