"""Shared helpers: audit logging, slugs and client IPs"""
import logging
import re
import time
import unicodedata

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, shop=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, order_status, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
        shop: Shop the object belongs to, if any
    """
    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            shop=shop,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=(object_name or '')[:255] or None,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # Audit failures never abort the main operation
        logger.error(f"Failed to create audit log: {str(e)}", exc_info=True)
        return None


def slugify_text(text):
    """
    Build a URL slug.

    Accents are stripped after NFKD normalisation, anything outside
    [a-z0-9 -] is dropped, whitespace becomes '-' and dashes are collapsed
    and trimmed. "Robe d'été  Rouge" -> "robe-dete-rouge".
    """
    if text is None:
        return ''
    value = unicodedata.normalize('NFKD', str(text))
    value = ''.join(ch for ch in value if not unicodedata.combining(ch))
    value = value.lower().strip()
    value = re.sub(r'[^a-z0-9\s-]', '', value)
    value = re.sub(r'\s+', '-', value)
    value = re.sub(r'-+', '-', value)
    return value.strip('-')


def unique_slug(model, base, shop=None, exclude_pk=None, fallback_prefix='item', field='slug'):
    """Return a slug for `base` that is unused by `model` (within `shop` when given)."""
    slug = slugify_text(base) or f"{fallback_prefix}-{int(time.time() * 1000)}"
    queryset = model.objects.all()
    if shop is not None:
        queryset = queryset.filter(shop=shop)
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)

    candidate = slug
    suffix = 2
    while queryset.filter(**{field: candidate}).exists():
        candidate = f"{slug}-{suffix}"
        suffix += 1
    return candidate


def parse_positive_int(value, default, maximum=None):
    """Parse a query param as a positive int, falling back to default."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed < 1:
        return default
    if maximum is not None:
        parsed = min(parsed, maximum)
    return parsed
