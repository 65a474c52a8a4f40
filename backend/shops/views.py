import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly, AllowAny
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from backend.core.model_cache import get_cached_storefront, cache_storefront
from backend.core.permissions import resolve_shop_scope, get_user_shop
from backend.core.utils import create_audit_log
from backend.catalog.models import Category, Product
from backend.catalog.serializers import CategorySerializer, ProductListSerializer
from .models import Shop
from .serializers import ShopSerializer, ShopPublicSerializer

logger = logging.getLogger('backend.shops')

# Fields only platform admins may change
ADMIN_ONLY_FIELDS = ('owner', 'plan')
SHOP_FILTER_FIELDS = ('subdomain', 'slug', 'custom_domain')


def _strip_admin_fields(data):
    if hasattr(data, 'copy'):
        data = data.copy()
    for field in ADMIN_ONLY_FIELDS:
        data.pop(field, None)
    return data


def _tracked(shop):
    return {
        'name': shop.name,
        'subdomain': shop.subdomain,
        'is_active': shop.is_active,
        'plan': shop.plan,
        'template': shop.template,
    }


def _save_shop(request, shop, data, partial):
    old_data = _tracked(shop)
    serializer = ShopSerializer(shop, data=data, partial=partial)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    new_data = _tracked(shop)
    changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
    create_audit_log(
        request=request,
        action='update',
        model_name='Shop',
        object_id=str(shop.id),
        object_name=shop.name,
        changes=changes,
        shop=shop
    )
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def shop_list_create(request):
    """List shops or create a new shop (platform admins only)"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        shops = Shop.objects.select_related('owner').prefetch_related('staff')
        if scope.is_public:
            shops = shops.filter(is_active=True)
        shops = scope.filter_queryset(shops, shop_field='pk')

        for field in SHOP_FILTER_FIELDS:
            value = request.query_params.get(field)
            if value:
                shops = shops.filter(**{f'{field}__iexact': value.strip()})

        if scope.is_public:
            return Response(ShopPublicSerializer(shops, many=True).data)
        return Response(ShopSerializer(shops, many=True).data)

    if not scope.is_admin:
        logger.warning(f"User {request.user.id} tried to create a shop without admin rights")
        return Response(
            {'error': 'Only platform administrators can create shops'},
            status=status.HTTP_403_FORBIDDEN
        )

    serializer = ShopSerializer(data=request.data)
    if serializer.is_valid():
        shop = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Shop',
            object_id=str(shop.id),
            object_name=shop.name,
            changes={'subdomain': shop.subdomain, 'owner': shop.owner_id},
            shop=shop
        )
        logger.info(f"Shop {shop.subdomain} created for owner {shop.owner_id}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
def shop_detail(request, pk):
    """Retrieve, update or delete a shop"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        if scope.is_public:
            shop = get_object_or_404(Shop, pk=pk, is_active=True)
            return Response(ShopPublicSerializer(shop).data)
        shop = get_object_or_404(Shop, pk=pk)
        if scope.can_modify(shop, shop_field='pk'):
            return Response(ShopSerializer(shop).data)
        return Response(ShopPublicSerializer(shop).data)

    shop = get_object_or_404(Shop, pk=pk)

    if request.method == 'DELETE':
        if not scope.is_admin:
            logger.warning(f"User {request.user.id} tried to delete shop {shop.id}")
            return Response(
                {'error': 'Only platform administrators can delete shops'},
                status=status.HTTP_403_FORBIDDEN
            )
        shop_id, shop_name = shop.id, shop.name
        shop.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Shop',
            object_id=str(shop_id),
            object_name=shop_name,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    if not scope.can_modify(shop, shop_field='pk'):
        return Response(
            {'error': 'You do not have permission to modify this shop'},
            status=status.HTTP_403_FORBIDDEN
        )
    data = request.data if scope.is_admin else _strip_admin_fields(request.data)
    return _save_shop(request, shop, data, partial=request.method == 'PATCH')


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def shop_me(request):
    """The caller's own shop (dashboard settings)"""
    shop = get_user_shop(request.user)
    if shop is None:
        return Response({'error': 'No shop associated with your account'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(ShopSerializer(shop).data)

    data = _strip_admin_fields(request.data)
    return _save_shop(request, shop, data, partial=request.method == 'PATCH')


@api_view(['GET'])
@permission_classes([AllowAny])
def storefront(request, subdomain):
    """Public storefront bundle: shop, categories and featured products"""
    cached_data = get_cached_storefront(subdomain)
    if cached_data is not None:
        return Response(cached_data)

    shop = Shop.objects.filter(subdomain__iexact=subdomain, is_active=True).first()
    if shop is None:
        return Response({'error': 'Shop not found'}, status=status.HTTP_404_NOT_FOUND)

    categories = Category.objects.filter(shop=shop).annotate(
        active_product_count=Count('products', filter=Q(products__is_active=True))
    ).order_by('sort_order', 'name')
    featured = Product.objects.filter(
        shop=shop, is_active=True, is_featured=True
    ).select_related('category').prefetch_related('images').order_by('-created_at')

    data = {
        'shop': ShopPublicSerializer(shop).data,
        'categories': CategorySerializer(categories, many=True).data,
        'featured_products': ProductListSerializer(featured, many=True).data,
    }
    cache_storefront(subdomain, data)
    return Response(data)
