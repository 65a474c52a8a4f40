"""
Test suite for the Shops module
Tests: shop CRUD permissions, owner settings, storefront bundle and caching
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.model_cache import get_storefront_cache_key
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.shops.models import Shop


class ShopAdminTests(TestCase):
    """Creating and deleting shops is reserved to platform admins"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)

    def shop_payload(self, **overrides):
        payload = {
            'name': 'Maison Jasmin',
            'subdomain': 'Maison-Jasmin',
            'whatsapp_number': '+216 12 345 678',
            'owner': self.owner.id,
        }
        payload.update(overrides)
        return payload

    def test_admin_creates_shop(self):
        response = self.client.post('/api/v1/shops/', self.shop_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subdomain'], 'maison-jasmin')
        self.assertEqual(response.data['slug'], 'maison-jasmin')
        self.assertEqual(response.data['owner_username'], self.owner.username)

    def test_invalid_whatsapp_number(self):
        response = self.client.post('/api/v1/shops/', self.shop_payload(whatsapp_number='12-34'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('whatsapp_number', response.data)

    def test_duplicate_subdomain(self):
        TestDataFactory.create_shop(subdomain='maison-jasmin')
        response = self.client.post('/api/v1/shops/', self.shop_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('subdomain', response.data)

    def test_owner_cannot_create_shop(self):
        client = AuthenticatedAPIClient().authenticate_user(self.owner)
        response = client.post('/api/v1/shops/', self.shop_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Shop.objects.filter(subdomain='maison-jasmin').exists())

    def test_owner_cannot_delete_shop(self):
        shop = TestDataFactory.create_shop(owner=self.owner)
        client = AuthenticatedAPIClient().authenticate_user(self.owner)
        response = client.delete(f'/api/v1/shops/{shop.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_deletes_shop(self):
        shop = TestDataFactory.create_shop()
        response = self.client.delete(f'/api/v1/shops/{shop.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Shop.objects.filter(pk=shop.id).exists())

    def test_admin_changes_plan(self):
        shop = TestDataFactory.create_shop()
        response = self.client.patch(f'/api/v1/shops/{shop.id}/', {'plan': 'pro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        shop.refresh_from_db()
        self.assertEqual(shop.plan, 'pro')


class ShopOwnerTests(TestCase):
    """Owners manage their own shop settings"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def test_owner_lists_only_own_shop(self):
        TestDataFactory.create_shop()
        response = self.client.get('/api/v1/shops/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([shop['id'] for shop in response.data], [self.shop.id])

    def test_owner_update_ignores_plan_and_owner(self):
        intruder = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/shops/{self.shop.id}/', {
            'name': 'Renamed',
            'plan': 'pro',
            'owner': intruder.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.shop.refresh_from_db()
        self.assertEqual(self.shop.name, 'Renamed')
        self.assertEqual(self.shop.plan, 'free')
        self.assertEqual(self.shop.owner, self.owner)

    def test_owner_cannot_update_other_shop(self):
        other = TestDataFactory.create_shop()
        response = self.client.patch(f'/api/v1/shops/{other.id}/', {'name': 'Mine now'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_other_shop_detail_is_public_view(self):
        other = TestDataFactory.create_shop()
        response = self.client.get(f'/api/v1/shops/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('plan', response.data)
        self.assertNotIn('owner', response.data)

    def test_shop_me(self):
        response = self.client.get('/api/v1/shops/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.shop.id)

        response = self.client.patch('/api/v1/shops/me/', {'primary_color': '#112233', 'plan': 'pro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.shop.refresh_from_db()
        self.assertEqual(self.shop.primary_color, '#112233')
        self.assertEqual(self.shop.plan, 'free')

    def test_shop_me_rejects_bad_color(self):
        response = self.client.patch('/api/v1/shops/me/', {'primary_color': 'red'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_shop_me_without_shop(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/shops/me/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class PublicShopTests(TestCase):
    """Anonymous shop listing and the storefront bundle"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.shop = TestDataFactory.create_shop(subdomain='souk-chic')
        self.category = TestDataFactory.create_category(self.shop, name='Bags')
        self.featured = TestDataFactory.create_product(self.shop, category=self.category, is_featured=True)
        TestDataFactory.create_product(self.shop, category=self.category)
        TestDataFactory.create_product(self.shop, is_featured=True, is_active=False)

    def test_public_list_hides_inactive_shops(self):
        TestDataFactory.create_shop(is_active=False)
        response = self.client.get('/api/v1/shops/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([shop['id'] for shop in response.data], [self.shop.id])
        self.assertNotIn('owner', response.data[0])

    def test_public_list_filter_by_subdomain(self):
        TestDataFactory.create_shop()
        response = self.client.get('/api/v1/shops/', {'subdomain': 'SOUK-CHIC'})
        self.assertEqual(len(response.data), 1)

    def test_storefront_bundle(self):
        response = self.client.get('/api/v1/storefront/souk-chic/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shop']['id'], self.shop.id)
        self.assertEqual(response.data['categories'][0]['product_count'], 2)
        self.assertEqual([p['id'] for p in response.data['featured_products']], [self.featured.id])

    def test_storefront_is_cached(self):
        self.client.get('/api/v1/storefront/souk-chic/')
        self.assertIsNotNone(cache.get(get_storefront_cache_key('souk-chic')))

    def test_product_change_invalidates_storefront(self):
        self.client.get('/api/v1/storefront/souk-chic/')
        TestDataFactory.create_product(self.shop, is_featured=True)
        self.assertIsNone(cache.get(get_storefront_cache_key('souk-chic')))

        response = self.client.get('/api/v1/storefront/souk-chic/')
        self.assertEqual(len(response.data['featured_products']), 2)

    def test_subdomain_rename_drops_both_storefront_keys(self):
        self.client.get('/api/v1/storefront/souk-chic/')
        cache.set(get_storefront_cache_key('souk-neuf'), {'stale': True})

        self.shop.subdomain = 'souk-neuf'
        self.shop.save()

        self.assertIsNone(cache.get(get_storefront_cache_key('souk-chic')))
        self.assertIsNone(cache.get(get_storefront_cache_key('souk-neuf')))
        response = self.client.get('/api/v1/storefront/souk-neuf/')
        self.assertEqual(response.data['shop']['id'], self.shop.id)

    def test_unknown_storefront(self):
        response = self.client.get('/api/v1/storefront/nowhere/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_inactive_storefront(self):
        self.shop.is_active = False
        self.shop.save()
        response = self.client.get('/api/v1/storefront/souk-chic/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
