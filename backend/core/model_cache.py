"""
Cache keys and TTLs for the public storefront and the shop dashboard.

Storefront bundles are read on every page view of a shop and change
rarely, so they are cached per subdomain. Dashboard stats are cached per
shop. Both are dropped by the receivers in cache_signals.
"""
from django.core.cache import cache
import logging

logger = logging.getLogger(__name__)

# Cache key prefixes
STOREFRONT_KEY_PREFIX = 'storefront:'
DASHBOARD_KEY_PREFIX = 'dashboard:'

# Cache TTL (Time To Live) in seconds
STOREFRONT_CACHE_TTL = 600  # 10 minutes
DASHBOARD_CACHE_TTL = 300  # 5 minutes


def get_storefront_cache_key(subdomain: str) -> str:
    """Get cache key for a storefront bundle"""
    return f"{STOREFRONT_KEY_PREFIX}{(subdomain or '').lower()}"


def get_dashboard_cache_key(shop_id) -> str:
    """Get cache key for dashboard stats ('all' for platform-wide stats)"""
    return f"{DASHBOARD_KEY_PREFIX}{shop_id or 'all'}"


def get_cached_storefront(subdomain: str):
    cached_data = cache.get(get_storefront_cache_key(subdomain))
    if cached_data is not None:
        logger.debug(f"Cache hit for storefront: {subdomain}")
    return cached_data


def cache_storefront(subdomain: str, data, ttl: int = None):
    cache.set(get_storefront_cache_key(subdomain), data, ttl or STOREFRONT_CACHE_TTL)
    logger.debug(f"Cached storefront: {subdomain}")


def invalidate_storefront_cache(subdomain: str):
    if not subdomain:
        return
    cache.delete(get_storefront_cache_key(subdomain))
    logger.debug(f"Invalidated storefront cache: {subdomain}")


def invalidate_dashboard_cache(shop_id):
    cache.delete_many([get_dashboard_cache_key(shop_id), get_dashboard_cache_key(None)])
    logger.debug(f"Invalidated dashboard cache for shop: {shop_id}")


def get_cached_dashboard(shop_id):
    return cache.get(get_dashboard_cache_key(shop_id))


def cache_dashboard(shop_id, data, ttl: int = None):
    cache.set(get_dashboard_cache_key(shop_id), data, ttl or DASHBOARD_CACHE_TTL)
    logger.debug(f"Cached dashboard stats for shop: {shop_id or 'all'}")
