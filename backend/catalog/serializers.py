from decimal import Decimal

from rest_framework import serializers

from backend.core.utils import unique_slug
from .models import Category, Product, ProductImage


def _resolve_shop(serializer, attrs):
    """Shop the object will belong to: forced by the view, given, or current"""
    forced = serializer.context.get('shop')
    if forced is not None:
        return forced
    if attrs.get('shop') is not None:
        return attrs['shop']
    if serializer.instance is not None:
        return serializer.instance.shop
    return None


def _assign_slug(serializer, attrs, model, fallback_prefix):
    shop = attrs.get('shop')
    given = attrs.pop('slug', None)
    if given:
        base = given
    elif serializer.instance is None or ('name' in attrs and not serializer.instance.slug):
        base = attrs.get('name', '')
    else:
        return
    attrs['slug'] = unique_slug(
        model, base, shop=shop,
        exclude_pk=getattr(serializer.instance, 'pk', None),
        fallback_prefix=fallback_prefix,
    )


class CategorySerializer(serializers.ModelSerializer):
    slug = serializers.CharField(max_length=200, required=False, allow_blank=True)
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'sort_order', 'shop', 'product_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'shop': {'required': False}}
        # (shop, slug) uniqueness is resolved by suffixing the slug
        validators = []

    def get_product_count(self, obj):
        annotated = getattr(obj, 'active_product_count', None)
        if annotated is not None:
            return annotated
        return obj.products.filter(is_active=True).count()

    def validate(self, attrs):
        shop = _resolve_shop(self, attrs)
        if shop is None:
            raise serializers.ValidationError({'shop': 'This field is required.'})
        attrs['shop'] = shop
        _assign_slug(self, attrs, Category, 'category')
        return attrs


class ProductImageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductImage
        fields = ['id', 'image', 'sort_order', 'created_at']
        read_only_fields = ['created_at']


class ProductSerializer(serializers.ModelSerializer):
    slug = serializers.CharField(max_length=200, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    old_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    images = ProductImageSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'description', 'price', 'old_price', 'sizes', 'colors',
                  'is_featured', 'is_active', 'stock', 'shop', 'category', 'category_name',
                  'images', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'shop': {'required': False}}
        validators = []

    def _validate_string_list(self, value, label):
        if value is None:
            return []
        if not isinstance(value, list):
            raise serializers.ValidationError(f'{label} must be a list')
        cleaned = []
        for entry in value:
            if not isinstance(entry, str) or not entry.strip():
                raise serializers.ValidationError(f'{label} must only contain non-empty strings')
            cleaned.append(entry.strip())
        return cleaned

    def validate_sizes(self, value):
        return self._validate_string_list(value, 'Sizes')

    def validate_colors(self, value):
        return self._validate_string_list(value, 'Colors')

    def validate(self, attrs):
        shop = _resolve_shop(self, attrs)
        if shop is None:
            raise serializers.ValidationError({'shop': 'This field is required.'})
        attrs['shop'] = shop

        price = attrs.get('price', getattr(self.instance, 'price', None))
        old_price = attrs.get('old_price', getattr(self.instance, 'old_price', None))
        if old_price is not None and price is not None and old_price < price:
            raise serializers.ValidationError({'old_price': 'Old price must be greater than or equal to price'})

        category = attrs.get('category')
        if category is not None and category.shop_id != shop.id:
            raise serializers.ValidationError({'category': 'Category belongs to another shop'})

        _assign_slug(self, attrs, Product, 'product')
        return attrs


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight product card for lists and the storefront"""
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    main_image = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'slug', 'price', 'old_price', 'sizes', 'colors', 'is_featured',
                  'is_active', 'stock', 'shop', 'category', 'category_name', 'main_image']

    def get_main_image(self, obj):
        # Uses the prefetched images when present
        images = list(obj.images.all())
        if not images or not images[0].image:
            return None
        url = images[0].image.url
        request = self.context.get('request')
        return request.build_absolute_uri(url) if request else url
