import re

from rest_framework import serializers

from backend.core.utils import unique_slug
from .models import Shop, subdomain_validator


class ShopSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=200, required=False)
    # Lowercased before the format and uniqueness checks in validate_subdomain
    subdomain = serializers.CharField(max_length=63)
    owner_username = serializers.CharField(source='owner.username', read_only=True)

    class Meta:
        model = Shop
        fields = ['id', 'name', 'slug', 'subdomain', 'custom_domain', 'logo', 'description',
                  'primary_color', 'secondary_color', 'font', 'template', 'theme_id',
                  'hero_style', 'card_style', 'is_active', 'plan', 'whatsapp_number',
                  'instagram_url', 'facebook_url', 'owner', 'owner_username', 'staff',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
        extra_kwargs = {
            'staff': {'required': False},
        }

    def validate_whatsapp_number(self, value):
        digits = re.sub(r'\D', '', value or '')
        if not 8 <= len(digits) <= 15:
            raise serializers.ValidationError('WhatsApp number must contain 8 to 15 digits')
        return value.strip()

    def validate_subdomain(self, value):
        value = value.strip().lower()
        subdomain_validator(value)
        taken = Shop.objects.filter(subdomain__iexact=value).exclude(pk=getattr(self.instance, 'pk', None))
        if taken.exists():
            raise serializers.ValidationError('A shop with this subdomain already exists')
        return value

    def validate_custom_domain(self, value):
        # Empty strings would collide on the unique index
        return value.strip().lower() if value and value.strip() else None

    def validate(self, attrs):
        slug = attrs.get('slug')
        if self.instance is None and not slug:
            attrs['slug'] = unique_slug(Shop, attrs.get('name', ''), fallback_prefix='shop')
        elif slug and Shop.objects.filter(slug=slug).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError({'slug': 'A shop with this slug already exists'})
        return attrs


class ShopPublicSerializer(serializers.ModelSerializer):
    """Storefront view of a shop, without owner or billing data"""
    class Meta:
        model = Shop
        fields = ['id', 'name', 'slug', 'subdomain', 'custom_domain', 'logo', 'description',
                  'primary_color', 'secondary_color', 'font', 'template', 'theme_id',
                  'hero_style', 'card_style', 'whatsapp_number', 'instagram_url', 'facebook_url']
