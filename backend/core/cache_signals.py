"""
Cache invalidation signals
Automatically invalidate storefront and dashboard caches when tenant data changes
"""
from django.core.exceptions import ObjectDoesNotExist
from django.db.models.signals import post_save, post_delete, pre_save
from django.dispatch import receiver
import logging

from .model_cache import (
    invalidate_storefront_cache, invalidate_dashboard_cache
)

logger = logging.getLogger(__name__)

STOREFRONT_MODELS = ('Shop', 'Category', 'Product', 'ProductImage')
DASHBOARD_MODELS = ('Product', 'Order', 'OrderItem')


def _shop_for(instance):
    """Resolve the Shop an instance belongs to"""
    model_name = instance.__class__.__name__
    if model_name == 'Shop':
        return instance
    if model_name == 'ProductImage':
        product = getattr(instance, 'product', None)
        return getattr(product, 'shop', None)
    if model_name == 'OrderItem':
        order = getattr(instance, 'order', None)
        return getattr(order, 'shop', None)
    return getattr(instance, 'shop', None)


@receiver(pre_save)
def remember_old_subdomain(sender, instance, **kwargs):
    """Keep the previous subdomain so a rename drops the old storefront key"""
    if sender.__name__ != 'Shop' or not instance.pk:
        return
    old = sender.objects.filter(pk=instance.pk).values_list('subdomain', flat=True).first()
    instance._old_subdomain = old


@receiver([post_save, post_delete])
def invalidate_tenant_caches(sender, instance, **kwargs):
    """Drop cached storefront/dashboard data for the affected shop"""
    model_name = sender.__name__
    if model_name not in STOREFRONT_MODELS and model_name not in DASHBOARD_MODELS:
        return

    try:
        shop = _shop_for(instance)
    except ObjectDoesNotExist as e:
        # Related shop already deleted in a cascade
        logger.debug(f"Could not resolve shop for {model_name}: {e}")
        return
    if shop is None:
        return

    if model_name in STOREFRONT_MODELS:
        invalidate_storefront_cache(shop.subdomain)
        old_subdomain = getattr(instance, '_old_subdomain', None)
        if old_subdomain and old_subdomain != shop.subdomain:
            invalidate_storefront_cache(old_subdomain)

    if model_name in DASHBOARD_MODELS:
        invalidate_dashboard_cache(shop.id)
