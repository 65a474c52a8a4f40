import logging
import time
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly, AllowAny
from django.core.files.base import ContentFile
from django.core.paginator import Paginator
from django.db.models import Count, Max, Q
from django.shortcuts import get_object_or_404
import requests
from backend.core.permissions import resolve_shop_scope
from backend.core.utils import create_audit_log, parse_positive_int
from backend.studio.uploads import UploadError, validate_image_file, fetch_image, extension_for_content_type
from .filters import ProductFilter
from .models import Category, Product, ProductImage
from .serializers import (
    CategorySerializer, ProductSerializer, ProductListSerializer, ProductImageSerializer
)

logger = logging.getLogger('backend.catalog')

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _serializer_context(request, scope):
    context = {'request': request}
    if not scope.is_admin and scope.shop is not None:
        # Non-admin writes are pinned to the caller's shop
        context['shop'] = scope.shop
    return context


def _forbidden(entity):
    return Response(
        {'error': f'You do not have permission to modify this {entity}'},
        status=status.HTTP_403_FORBIDDEN
    )


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def category_list_create(request):
    """List categories or create a new category"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        categories = Category.objects.annotate(
            active_product_count=Count('products', filter=Q(products__is_active=True))
        )
        shop_id = request.query_params.get('shop')
        subdomain = request.query_params.get('subdomain')

        if scope.is_public:
            if not shop_id and not subdomain:
                return Response(
                    {'error': 'shop or subdomain parameter is required'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            categories = categories.filter(shop__is_active=True)

        if shop_id:
            categories = categories.filter(shop_id=parse_positive_int(shop_id, 0))
        if subdomain:
            categories = categories.filter(shop__subdomain__iexact=subdomain)

        categories = scope.filter_queryset(categories).order_by('sort_order', 'name')
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)

    serializer = CategorySerializer(data=request.data, context=_serializer_context(request, scope))
    if serializer.is_valid():
        category = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Category',
            object_id=str(category.id),
            object_name=category.name,
            changes={'name': category.name, 'slug': category.slug},
            shop=category.shop
        )
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        queryset = Category.objects.all()
        if scope.is_public:
            queryset = queryset.filter(shop__is_active=True)
        category = get_object_or_404(scope.filter_queryset(queryset), pk=pk)
        return Response(CategorySerializer(category).data)

    category = get_object_or_404(Category, pk=pk)
    if not scope.can_modify(category):
        return _forbidden('category')

    if request.method in ('PUT', 'PATCH'):
        old_data = {'name': category.name, 'slug': category.slug, 'sort_order': category.sort_order}
        serializer = CategorySerializer(
            category, data=request.data, partial=request.method == 'PATCH',
            context=_serializer_context(request, scope)
        )
        if serializer.is_valid():
            serializer.save()
            new_data = {'name': category.name, 'slug': category.slug, 'sort_order': category.sort_order}
            changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
            create_audit_log(
                request=request,
                action='update',
                model_name='Category',
                object_id=str(category.id),
                object_name=category.name,
                changes=changes,
                shop=category.shop
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    shop = category.shop
    category_id, category_name = category.id, category.name
    category.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='Category',
        object_id=str(category_id),
        object_name=category_name,
        shop=shop
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrReadOnly])
def product_list_create(request):
    """List products (filtered, paginated) or create a new product"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        queryset = Product.objects.select_related('category', 'shop').prefetch_related('images')
        if scope.is_public:
            queryset = queryset.filter(is_active=True, shop__is_active=True)
        queryset = scope.filter_queryset(queryset)

        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('-created_at', '-id')

        page = parse_positive_int(request.query_params.get('page'), 1)
        page_size = parse_positive_int(request.query_params.get('page_size'), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        paginator = Paginator(queryset, page_size)
        page_obj = paginator.get_page(page)

        serializer = ProductListSerializer(page_obj, many=True, context={'request': request})
        return Response({
            'results': serializer.data,
            'count': paginator.count,
            'page': page_obj.number,
            'page_size': page_size,
            'total_pages': paginator.num_pages,
        })

    serializer = ProductSerializer(data=request.data, context=_serializer_context(request, scope))
    if serializer.is_valid():
        product = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='Product',
            object_id=str(product.id),
            object_name=product.name,
            changes={'name': product.name, 'price': str(product.price)},
            shop=product.shop
        )
        return Response(ProductSerializer(product, context={'request': request}).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticatedOrReadOnly])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    if request.method == 'GET':
        queryset = Product.objects.select_related('category').prefetch_related('images')
        if scope.is_public:
            queryset = queryset.filter(is_active=True, shop__is_active=True)
        product = get_object_or_404(scope.filter_queryset(queryset), pk=pk)
        return Response(ProductSerializer(product, context={'request': request}).data)

    product = get_object_or_404(Product, pk=pk)
    if not scope.can_modify(product):
        return _forbidden('product')

    if request.method in ('PUT', 'PATCH'):
        old_data = {'name': product.name, 'price': str(product.price), 'is_active': product.is_active}
        serializer = ProductSerializer(
            product, data=request.data, partial=request.method == 'PATCH',
            context=_serializer_context(request, scope)
        )
        if serializer.is_valid():
            serializer.save()
            new_data = {'name': product.name, 'price': str(product.price), 'is_active': product.is_active}
            changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                changes=changes,
                shop=product.shop
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE
    shop = product.shop
    product_id, product_name = product.id, product.name
    product.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='Product',
        object_id=str(product_id),
        object_name=product_name,
        shop=shop
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def product_by_slug(request, shop_subdomain, slug):
    """Public product page lookup"""
    product = get_object_or_404(
        Product.objects.select_related('category', 'shop').prefetch_related('images'),
        shop__subdomain__iexact=shop_subdomain,
        shop__is_active=True,
        slug=slug,
        is_active=True,
    )
    return Response(ProductSerializer(product, context={'request': request}).data)


def _next_sort_order(product):
    current = product.images.aggregate(highest=Max('sort_order'))['highest']
    return 0 if current is None else current + 1


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_images(request, pk):
    """Upload one or more images (multipart field 'images' or 'image')"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    product = get_object_or_404(Product, pk=pk)
    if not scope.can_modify(product):
        return _forbidden('product')

    files = request.FILES.getlist('images') or request.FILES.getlist('image')
    if not files:
        return Response({'error': 'No image file uploaded'}, status=status.HTTP_400_BAD_REQUEST)

    for uploaded in files:
        try:
            validate_image_file(uploaded)
        except UploadError as e:
            return Response({'error': str(e), 'file': uploaded.name}, status=status.HTTP_400_BAD_REQUEST)

    sort_order = _next_sort_order(product)
    created = []
    for offset, uploaded in enumerate(files):
        created.append(ProductImage.objects.create(product=product, image=uploaded, sort_order=sort_order + offset))

    create_audit_log(
        request=request,
        action='image_attach',
        model_name='Product',
        object_id=str(product.id),
        object_name=product.name,
        changes={'images_added': [image.id for image in created]},
        shop=product.shop
    )
    serializer = ProductImageSerializer(created, many=True, context={'request': request})
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def product_image_delete(request, pk, image_id):
    """Remove an image from a product"""
    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    product = get_object_or_404(Product, pk=pk)
    if not scope.can_modify(product):
        return _forbidden('product')

    image = get_object_or_404(ProductImage, pk=image_id, product=product)
    image.image.delete(save=False)
    image.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def save_ai_image(request):
    """Attach an AI generated image (by URL) to a product's gallery"""
    product_id = request.data.get('productId')
    image_url = request.data.get('imageUrl')
    if not product_id or not image_url:
        return Response({'error': 'productId and imageUrl are required'}, status=status.HTTP_400_BAD_REQUEST)

    scope = resolve_shop_scope(request)
    if scope.denied:
        return scope.denied_response()

    product = Product.objects.filter(pk=parse_positive_int(product_id, 0)).first()
    if product is None:
        return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
    if not scope.can_modify(product):
        return _forbidden('product')

    try:
        content, content_type = fetch_image(image_url)
    except FileNotFoundError:
        return Response({'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)
    except UploadError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to fetch AI image {image_url}: {e}", exc_info=True)
        return Response({'error': 'Failed to fetch AI-generated image'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    extension = extension_for_content_type(content_type)
    filename = f"ai-generated-{product.id}-{int(time.time() * 1000)}.{extension}"
    image = ProductImage(product=product, sort_order=_next_sort_order(product))
    image.image.save(filename, ContentFile(content), save=True)

    create_audit_log(
        request=request,
        action='image_attach',
        model_name='Product',
        object_id=str(product.id),
        object_name=product.name,
        changes={'image_id': image.id, 'source': image_url},
        shop=product.shop
    )
    logger.info(f"Saved AI image {image.id} to product {product.id}")
    return Response({
        'success': True,
        'message': 'Image saved to product',
        'imageId': image.id,
        'productId': product.id,
    })
