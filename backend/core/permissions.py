"""
Role checks and the shop-scope policy.

Every tenant-owned model (Shop, Category, Product, Order) goes through
`resolve_shop_scope` before it is read or written:

- anonymous callers pass through (public storefront reads; the view narrows
  the queryset to active records of one shop)
- platform admins pass through unrestricted
- any other user must own or staff a shop, otherwise the request is denied
- creates are pinned to the user's shop
- lists are filtered to the user's shop
- updates/deletes must target an object of the user's shop
"""
import logging

from rest_framework import status
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

logger = logging.getLogger('backend.core.permissions')


def is_platform_admin(user):
    """Platform admins bypass every tenant check"""
    if not user or not user.is_authenticated:
        return False
    return bool(user.is_superuser or getattr(user, 'role', None) == 'platform_admin')


def get_user_shop(user):
    """Return the shop the user owns, else the first shop they staff, else None"""
    if not user or not user.is_authenticated:
        return None
    from backend.shops.models import Shop

    shop = Shop.objects.filter(owner=user).order_by('id').first()
    if shop is None:
        shop = Shop.objects.filter(staff=user).order_by('id').first()
    return shop


class IsPlatformAdmin(BasePermission):
    message = 'Only platform administrators can perform this action'

    def has_permission(self, request, view):
        return is_platform_admin(request.user)


class ShopScope:
    """Resolved tenant scope for one request"""

    def __init__(self, user=None, shop=None, is_admin=False, denied=False):
        self.user = user
        self.shop = shop
        self.is_admin = is_admin
        self.denied = denied

    @property
    def is_public(self):
        return self.user is None

    @property
    def shop_id(self):
        return self.shop.id if self.shop else None

    def denied_response(self):
        return Response(
            {'error': 'You do not have a shop associated with your account'},
            status=status.HTTP_403_FORBIDDEN,
        )

    def filter_queryset(self, queryset, shop_field='shop'):
        """Restrict a queryset to the rows this scope may list."""
        if self.is_public or self.is_admin:
            return queryset
        if shop_field == 'pk':
            return queryset.filter(pk=self.shop_id)
        return queryset.filter(**{shop_field: self.shop_id})

    def can_modify(self, obj, shop_field='shop_id'):
        """
        Update/delete check. For a Shop the object itself must be the
        user's shop; for anything else its shop must be.
        """
        if self.is_admin:
            return True
        if self.is_public or self.shop is None:
            return False
        if shop_field == 'pk':
            owned = obj.pk == self.shop_id
        else:
            owned = getattr(obj, shop_field, None) == self.shop_id
        if not owned:
            logger.warning(
                f"User {self.user.id} tried to modify {obj.__class__.__name__} {obj.pk} "
                f"outside of shop {self.shop_id}"
            )
        return owned


def resolve_shop_scope(request):
    """Build the ShopScope for the request user."""
    user = request.user
    if not user or not user.is_authenticated:
        return ShopScope()

    if is_platform_admin(user):
        return ShopScope(user=user, is_admin=True)

    shop = get_user_shop(user)
    if shop is None:
        logger.warning(f"User {user.id} tried to access data but has no associated shop")
        return ShopScope(user=user, denied=True)

    return ShopScope(user=user, shop=shop)
