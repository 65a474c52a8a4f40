from rest_framework import serializers
from backend.catalog.models import Product
from .models import AIGeneration


class AIGenerationSerializer(serializers.ModelSerializer):
    # Local mirrors are relative paths (/media/generations/...), not absolute URLs
    imageUrl = serializers.CharField(source='image_url', max_length=1000)
    downloadUrl = serializers.CharField(source='download_url', max_length=1000, required=False, allow_blank=True)
    productId = serializers.PrimaryKeyRelatedField(
        source='product', queryset=Product.objects.all(), required=False, allow_null=True, write_only=True
    )
    product = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = AIGeneration
        fields = [
            'id', 'imageUrl', 'downloadUrl', 'category', 'prompt', 'productId', 'product',
            'metadata', 'createdAt'
        ]
        read_only_fields = ['id', 'createdAt']

    def get_product(self, obj):
        if obj.product_id is None:
            return None
        return {'id': obj.product.id, 'name': obj.product.name}
