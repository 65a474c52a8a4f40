"""
Test suite for the Reports module
Tests: dashboard figures, shop scoping, caching and invalidation
"""
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.model_cache import get_dashboard_cache_key
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.orders.models import Order

DASHBOARD_URL = '/api/v1/reports/dashboard/'


class DashboardTests(TestCase):
    """Test the dashboard endpoint"""

    def setUp(self):
        cache.clear()
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

        self.shirt = TestDataFactory.create_product(self.shop, price=Decimal('20.00'), stock=3)
        self.hidden = TestDataFactory.create_product(self.shop, is_active=False, stock=0)

        TestDataFactory.create_order(self.shop, status='pending', items=[(self.shirt, 1, '20.00')])
        TestDataFactory.create_order(self.shop, status='confirmed', items=[(self.shirt, 2, '20.00')])
        TestDataFactory.create_order(self.shop, status='delivered', items=[(self.shirt, 1, '15.50')])
        TestDataFactory.create_order(self.shop, status='cancelled', items=[(self.shirt, 5, '20.00')])

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get(DASHBOARD_URL)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_without_shop_is_denied(self):
        stranger = TestDataFactory.create_user()
        self.client.authenticate_user(stranger)
        response = self.client.get(DASHBOARD_URL)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard_figures(self):
        """Counts, status breakdown and revenue of the owner's shop"""
        response = self.client.get(DASHBOARD_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        data = response.data
        self.assertEqual(data['products'], {'total': 2, 'active': 1, 'out_of_stock': 1})
        self.assertEqual(data['orders']['total'], 4)
        self.assertEqual(data['orders']['pending'], 1)
        self.assertEqual(data['orders']['by_status']['cancelled'], 1)
        self.assertEqual(data['orders']['by_status']['shipped'], 0)
        # Pending and cancelled orders never count as revenue
        self.assertEqual(Decimal(data['revenue']['total']), Decimal('55.50'))
        self.assertEqual(Decimal(data['revenue']['last_30_days']), Decimal('55.50'))
        self.assertEqual(len(data['recent_orders']), 4)
        self.assertEqual(data['credits'], {'balance': 0})

    def test_revenue_window(self):
        old_order = TestDataFactory.create_order(self.shop, status='completed', items=[(self.shirt, 1, '100.00')])
        Order.objects.filter(pk=old_order.pk).update(created_at=timezone.now() - timedelta(days=45))
        cache.clear()

        data = self.client.get(DASHBOARD_URL).data
        self.assertEqual(Decimal(data['revenue']['total']), Decimal('155.50'))
        self.assertEqual(Decimal(data['revenue']['last_30_days']), Decimal('55.50'))

    def test_recent_orders_are_limited(self):
        for _ in range(3):
            TestDataFactory.create_order(self.shop)
        data = self.client.get(DASHBOARD_URL).data
        self.assertEqual(len(data['recent_orders']), 5)
        self.assertEqual(data['recent_orders'][0]['status'], 'pending')

    def test_other_shops_are_excluded(self):
        other_shop = TestDataFactory.create_shop()
        other_product = TestDataFactory.create_product(other_shop)
        TestDataFactory.create_order(other_shop, status='completed', items=[(other_product, 1, '999.00')])

        data = self.client.get(DASHBOARD_URL).data
        self.assertEqual(data['orders']['total'], 4)
        self.assertEqual(Decimal(data['revenue']['total']), Decimal('55.50'))

    def test_credit_balance_of_caller(self):
        TestDataFactory.create_credit(self.owner, balance=7)
        data = self.client.get(DASHBOARD_URL).data
        self.assertEqual(data['credits'], {'balance': 7})

    def test_stats_are_cached_per_shop(self):
        self.client.get(DASHBOARD_URL)
        cached = cache.get(get_dashboard_cache_key(self.shop.id))
        self.assertIsNotNone(cached)
        self.assertNotIn('credits', cached)

    def test_new_order_invalidates_cache(self):
        self.client.get(DASHBOARD_URL)
        TestDataFactory.create_order(self.shop)
        self.assertIsNone(cache.get(get_dashboard_cache_key(self.shop.id)))

        data = self.client.get(DASHBOARD_URL).data
        self.assertEqual(data['orders']['total'], 5)


class AdminDashboardTests(TestCase):
    """Platform admins see every shop or pick one"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.shop_a = TestDataFactory.create_shop()
        self.shop_b = TestDataFactory.create_shop()
        TestDataFactory.create_product(self.shop_a)
        TestDataFactory.create_product(self.shop_b)
        TestDataFactory.create_order(self.shop_b)

    def test_platform_wide_stats(self):
        data = self.client.get(DASHBOARD_URL).data
        self.assertEqual(data['products']['total'], 2)
        self.assertEqual(data['orders']['total'], 1)

    def test_shop_filter(self):
        data = self.client.get(DASHBOARD_URL, {'shop': self.shop_a.id}).data
        self.assertEqual(data['products']['total'], 1)
        self.assertEqual(data['orders']['total'], 0)

    def test_invalid_shop_filter(self):
        response = self.client.get(DASHBOARD_URL, {'shop': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_cannot_pick_another_shop(self):
        owner = self.shop_a.owner
        self.client.authenticate_user(owner)
        data = self.client.get(DASHBOARD_URL, {'shop': self.shop_b.id}).data
        self.assertEqual(data['orders']['total'], 0)
