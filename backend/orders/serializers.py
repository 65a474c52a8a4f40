from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    total_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False
    )
    quantity = serializers.IntegerField(min_value=1, default=1)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'total_price', 'size', 'color']

    def validate(self, attrs):
        if attrs.get('total_price') is None:
            attrs['total_price'] = attrs['unit_price'] * attrs.get('quantity', 1)
        return attrs


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, required=False)
    total = serializers.SerializerMethodField()
    shop_name = serializers.CharField(source='shop.name', read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'customer_name', 'customer_phone', 'customer_address', 'status',
                  'payment_method', 'notes', 'shop', 'shop_name', 'items', 'total',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {'shop': {'required': False}}

    def get_total(self, obj):
        return str(obj.get_total())

    def validate_customer_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Customer name is required')
        return value

    def validate(self, attrs):
        shop = self.context.get('shop') or attrs.get('shop') or getattr(self.instance, 'shop', None)
        if shop is None:
            raise serializers.ValidationError({'shop': 'This field is required.'})
        attrs['shop'] = shop
        for item in attrs.get('items') or []:
            product = item.get('product')
            if product is not None and product.shop_id != shop.id:
                raise serializers.ValidationError({'items': f'Product {product.id} belongs to another shop'})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        items_data = validated_data.pop('items', [])
        order = Order.objects.create(**validated_data)
        for item_data in items_data:
            OrderItem.objects.create(order=order, **item_data)
        return order

    @transaction.atomic
    def update(self, instance, validated_data):
        # Items are replaced only when the payload carries them
        items_data = validated_data.pop('items', None)
        instance = super().update(instance, validated_data)
        if items_data is not None:
            instance.items.all().delete()
            for item_data in items_data:
                OrderItem.objects.create(order=instance, **item_data)
        return instance


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
