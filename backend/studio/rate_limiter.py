"""
Per-user generation limits: a cooldown between requests plus hourly and
daily quotas. Usage is kept in the Django cache so every worker sees it.
"""
import logging
import math
import time
from datetime import datetime, timezone as dt_timezone

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger('backend.studio')

CACHE_PREFIX = 'generation_limit:'
HOUR = 3600
DAY = 86400

DEFAULT_LIMITS = {
    'per_hour': 10,
    'per_day': 50,
    'cooldown_seconds': 30,
}


def get_limits():
    limits = dict(DEFAULT_LIMITS)
    limits.update(getattr(settings, 'STUDIO_RATE_LIMITS', {}) or {})
    return limits


def _key(user_key):
    return f"{CACHE_PREFIX}{user_key}"


def _load(user_key):
    return cache.get(_key(user_key)) or {'generations': [], 'last_generation': 0}


def can_generate(user_key, now=None):
    """Whether the user may start a generation now"""
    now = now if now is not None else time.time()
    limits = get_limits()
    usage = _load(user_key)

    since_last = now - usage.get('last_generation', 0)
    if since_last < limits['cooldown_seconds']:
        return {
            'allowed': False,
            'reason': 'cooldown',
            'retryAfter': math.ceil(limits['cooldown_seconds'] - since_last),
        }

    last_hour = [ts for ts in usage['generations'] if ts > now - HOUR]
    if len(last_hour) >= limits['per_hour']:
        return {
            'allowed': False,
            'reason': 'hourly_limit',
            'retryAfter': math.ceil((min(last_hour) + HOUR - now) / 60),
            'current': len(last_hour),
            'limit': limits['per_hour'],
        }

    last_day = [ts for ts in usage['generations'] if ts > now - DAY]
    if len(last_day) >= limits['per_day']:
        return {
            'allowed': False,
            'reason': 'daily_limit',
            'retryAfter': 'tomorrow',
            'current': len(last_day),
            'limit': limits['per_day'],
        }

    return {'allowed': True}


def record_generation(user_key, now=None):
    now = now if now is not None else time.time()
    usage = _load(user_key)
    usage['generations'] = [ts for ts in usage['generations'] if ts > now - DAY] + [now]
    usage['last_generation'] = now
    cache.set(_key(user_key), usage, DAY)


def get_usage(user_key, now=None):
    now = now if now is not None else time.time()
    limits = get_limits()
    usage = _load(user_key)
    hourly = len([ts for ts in usage['generations'] if ts > now - HOUR])
    daily = len([ts for ts in usage['generations'] if ts > now - DAY])
    last = usage.get('last_generation')
    return {
        'hourly': {'used': hourly, 'limit': limits['per_hour'], 'remaining': limits['per_hour'] - hourly},
        'daily': {'used': daily, 'limit': limits['per_day'], 'remaining': limits['per_day'] - daily},
        'lastGeneration': datetime.fromtimestamp(last, tz=dt_timezone.utc).isoformat() if last else None,
    }


def reset_user(user_key):
    cache.delete(_key(user_key))
    logger.info(f"Generation limits reset for {user_key}")
