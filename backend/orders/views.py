import logging
import re
from decimal import Decimal, InvalidOperation
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db import transaction
from django.shortcuts import get_object_or_404
from backend.catalog.models import Product
from backend.core.permissions import resolve_shop_scope
from backend.core.utils import create_audit_log
from backend.shops.models import Shop
from .filters import OrderFilter
from .models import Order, OrderItem
from .serializers import OrderSerializer, OrderStatusSerializer
from .whatsapp import generate_whatsapp_cart_url

logger = logging.getLogger('backend.orders')

PHONE_REGEX = re.compile(r'^[+]?[0-9]{8,15}$')
STOREFRONT_ORDER_NOTE = 'Order via WhatsApp'
# Bounds of OrderItem.unit_price / total_price (max_digits 10 / 12, 2 places)
MAX_ITEM_PRICE = Decimal('99999999.99')
MAX_ITEM_TOTAL = Decimal('9999999999.99')
MAX_ITEM_QUANTITY = 10000
MAX_DB_ID = 2 ** 63 - 1


def _order_queryset():
    return Order.objects.select_related('shop').prefetch_related('items__product')


def _serializer_context(request, scope):
    context = {'request': request}
    if not scope.is_admin:
        context['shop'] = scope.shop
    return context


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders of the caller's shop or create an order"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        filterset = OrderFilter(request.query_params, queryset=scope.filter_queryset(_order_queryset()))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        orders = filterset.qs.order_by('-created_at', '-id')
        return Response(OrderSerializer(orders, many=True).data)

    serializer = OrderSerializer(data=request.data, context=_serializer_context(request, scope))
    if serializer.is_valid():
        order = serializer.save()
        create_audit_log(
            request=request,
            action='order_create',
            model_name='Order',
            object_id=str(order.id),
            object_name=order.customer_name,
            changes={'items': order.items.count(), 'total': str(order.get_total())},
            shop=order.shop
        )
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, update or delete an order"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        order = get_object_or_404(scope.filter_queryset(_order_queryset()), pk=pk)
        return Response(OrderSerializer(order).data)

    order = get_object_or_404(Order, pk=pk)
    if not scope.can_modify(order):
        return Response(
            {'error': 'You do not have permission to modify this order'},
            status=status.HTTP_403_FORBIDDEN
        )

    if request.method in ('PUT', 'PATCH'):
        old_status = order.status
        serializer = OrderSerializer(
            order, data=request.data, partial=request.method == 'PATCH',
            context=_serializer_context(request, scope)
        )
        if serializer.is_valid():
            serializer.save()
            changes = {}
            if old_status != order.status:
                changes['status'] = {'old': old_status, 'new': order.status}
            create_audit_log(
                request=request,
                action='update',
                model_name='Order',
                object_id=str(order.id),
                object_name=order.customer_name,
                changes=changes,
                shop=order.shop
            )
            return Response(OrderSerializer(order).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    shop = order.shop
    order_id, customer_name = order.id, order.customer_name
    order.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='Order',
        object_id=str(order_id),
        object_name=customer_name,
        shop=shop
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def order_status(request, pk):
    """Change the status of an order"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    order = get_object_or_404(Order, pk=pk)
    if not scope.can_modify(order):
        return Response({'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    if not request.data.get('status'):
        return Response({'error': 'Status is required'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = order.status
    order.status = serializer.validated_data['status']
    order.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request,
        action='order_status',
        model_name='Order',
        object_id=str(order.id),
        object_name=order.customer_name,
        changes={'status': {'old': old_status, 'new': order.status}},
        shop=order.shop
    )
    logger.info(f"Order {order.id} status {old_status} -> {order.status}")
    return Response(OrderSerializer(order).data)


def normalize_phone(phone):
    """Keep digits, preserving a leading '+'"""
    trimmed = str(phone or '').strip()
    digits = re.sub(r'\D', '', trimmed)
    return f'+{digits}' if trimmed.startswith('+') else digits


def _to_decimal(value):
    """Finite Decimal for value, None for anything else (NaN and Infinity included)"""
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return number if number.is_finite() else None


def _clean_storefront_items(raw_items):
    """Keep items with a product id, a positive quantity and a non-negative price"""
    items = []
    for raw in raw_items if isinstance(raw_items, list) else []:
        if not isinstance(raw, dict) or not raw.get('productId'):
            continue
        quantity = _to_decimal(raw.get('quantity'))
        price = _to_decimal(raw.get('price'))
        if quantity is None or price is None or quantity <= 0 or price < 0:
            continue
        if quantity > MAX_ITEM_QUANTITY or price > MAX_ITEM_PRICE:
            continue
        quantity = int(quantity) or 1
        price = price.quantize(Decimal('0.01'))
        if price * quantity > MAX_ITEM_TOTAL:
            continue
        try:
            product_id = int(raw['productId'])
        except (TypeError, ValueError):
            continue
        if not 1 <= product_id <= MAX_DB_ID:
            continue
        items.append({
            'product_id': product_id,
            'quantity': quantity,
            'price': price,
            'size': str(raw.get('size') or ''),
            'color': str(raw.get('color') or ''),
        })
    return items


@api_view(['POST'])
@permission_classes([AllowAny])
def storefront_order(request):
    """Public checkout from a storefront; the customer continues on WhatsApp"""
    data = request.data
    customer_name = str(data.get('customerName') or '').strip()
    customer_phone = normalize_phone(data.get('customerPhone'))
    customer_address = str(data.get('customerAddress') or '').strip()

    if len(customer_name) < 2:
        return Response({'error': 'Customer name is required'}, status=status.HTTP_400_BAD_REQUEST)
    if len(customer_name) > 100:
        return Response({'error': 'Customer name must be 100 characters or less'}, status=status.HTTP_400_BAD_REQUEST)
    if not PHONE_REGEX.match(customer_phone):
        return Response({'error': 'A valid phone number is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        shop_id = int(data.get('shopId'))
    except (TypeError, ValueError):
        shop_id = 0
    if not 1 <= shop_id <= MAX_DB_ID:
        return Response({'error': 'Shop id is required'}, status=status.HTTP_400_BAD_REQUEST)

    items = _clean_storefront_items(data.get('items'))
    if not items:
        return Response({'error': 'At least one valid item is required'}, status=status.HTTP_400_BAD_REQUEST)

    shop = Shop.objects.filter(pk=shop_id, is_active=True).first()
    if shop is None:
        return Response({'error': 'Shop not found'}, status=status.HTTP_404_NOT_FOUND)

    product_ids = {item['product_id'] for item in items}
    products = {p.id: p for p in Product.objects.filter(shop=shop, id__in=product_ids)}
    missing = product_ids - set(products)
    if missing:
        logger.warning(f"Storefront order for shop {shop.id} references foreign products {sorted(missing)}")
        return Response(
            {'error': 'Some products do not belong to this shop'},
            status=status.HTTP_400_BAD_REQUEST
        )

    with transaction.atomic():
        order = Order.objects.create(
            shop=shop,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_address=customer_address,
            status='pending',
            payment_method='cod',
            notes=STOREFRONT_ORDER_NOTE,
        )
        for item in items:
            OrderItem.objects.create(
                order=order,
                product=products[item['product_id']],
                quantity=item['quantity'],
                unit_price=item['price'],
                total_price=item['price'] * item['quantity'],
                size=item['size'],
                color=item['color'],
            )

    create_audit_log(
        request=request,
        action='storefront_order',
        model_name='Order',
        object_id=str(order.id),
        object_name=customer_name,
        changes={'items': len(items), 'total': str(order.get_total())},
        shop=shop
    )
    logger.info(f"Storefront order {order.id} created for shop {shop.subdomain}")

    whatsapp_url = generate_whatsapp_cart_url(
        shop.whatsapp_number,
        shop.name,
        [
            {
                'product_name': products[item['product_id']].name,
                'price': item['price'],
                'quantity': item['quantity'],
                'size': item['size'],
                'color': item['color'],
            }
            for item in items
        ],
    )
    response_data = OrderSerializer(order).data
    response_data['whatsappUrl'] = whatsapp_url
    return Response(response_data, status=status.HTTP_201_CREATED)
