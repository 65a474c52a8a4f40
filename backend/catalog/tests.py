"""
Test suite for the Catalog module
Tests: categories, products, filters, pagination, images, AI image saving
"""
import shutil
import tempfile
from decimal import Decimal
from unittest.mock import patch

import requests
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from backend.catalog.models import Category, Product, ProductImage
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, make_image_bytes
from backend.studio.uploads import UploadError


class CategoryAPITests(TestCase):
    """Category CRUD and shop scoping"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.other_shop = TestDataFactory.create_shop()
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def test_create_category_pins_owner_shop(self):
        response = self.client.post('/api/v1/categories/', {
            'name': 'Robes',
            'shop': self.other_shop.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['shop'], self.shop.id)
        self.assertEqual(response.data['slug'], 'robes')
        self.assertTrue(AuditLog.objects.filter(model_name='Category', action='create').exists())

    def test_duplicate_name_gets_suffixed_slug(self):
        self.client.post('/api/v1/categories/', {'name': 'Shoes'}, format='json')
        response = self.client.post('/api/v1/categories/', {'name': 'Shoes'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'shoes-2')

    def test_owner_lists_only_own_categories(self):
        mine = TestDataFactory.create_category(self.shop, name='Mine')
        TestDataFactory.create_category(self.other_shop, name='Theirs')
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['id'] for c in response.data], [mine.id])

    def test_product_count_only_counts_active(self):
        category = TestDataFactory.create_category(self.shop)
        TestDataFactory.create_product(self.shop, category=category)
        TestDataFactory.create_product(self.shop, category=category, is_active=False)
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.data[0]['product_count'], 1)

    def test_public_list_requires_shop_or_subdomain(self):
        response = APIClient().get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_list_by_subdomain(self):
        second = TestDataFactory.create_category(self.shop, name='B', sort_order=2)
        first = TestDataFactory.create_category(self.shop, name='A', sort_order=1)
        TestDataFactory.create_category(self.other_shop)
        response = APIClient().get('/api/v1/categories/', {'subdomain': self.shop.subdomain.upper()})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['id'] for c in response.data], [first.id, second.id])

    def test_public_list_hides_inactive_shop(self):
        self.shop.is_active = False
        self.shop.save()
        TestDataFactory.create_category(self.shop)
        response = APIClient().get('/api/v1/categories/', {'shop': self.shop.id})
        self.assertEqual(response.data, [])

    def test_cannot_modify_other_shop_category(self):
        category = TestDataFactory.create_category(self.other_shop)
        response = self.client.patch(f'/api/v1/categories/{category.id}/', {'name': 'Hijacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_and_delete_own_category(self):
        category = TestDataFactory.create_category(self.shop, name='Old')
        response = self.client.patch(f'/api/v1/categories/{category.id}/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'New')

        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Category.objects.filter(pk=category.id).exists())

    def test_admin_must_name_shop(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = admin_client.post('/api/v1/categories/', {'name': 'Orphan'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('shop', response.data)

        response = admin_client.post('/api/v1/categories/', {'name': 'Placed', 'shop': self.other_shop.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['shop'], self.other_shop.id)


class ProductAPITests(TestCase):
    """Product CRUD, validation and shop scoping"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.other_shop = TestDataFactory.create_shop()
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def test_create_product(self):
        category = TestDataFactory.create_category(self.shop)
        response = self.client.post('/api/v1/products/', {
            'name': 'Linen Shirt',
            'price': '59.00',
            'old_price': '79.00',
            'sizes': ['S', ' M '],
            'colors': ['white'],
            'category': category.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'linen-shirt')
        self.assertEqual(response.data['sizes'], ['S', 'M'])
        self.assertEqual(response.data['shop'], self.shop.id)
        self.assertEqual(response.data['category_name'], category.name)

    def test_old_price_below_price_is_rejected(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bad Deal', 'price': '50.00', 'old_price': '40.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('old_price', response.data)

    def test_negative_price_is_rejected(self):
        response = self.client.post('/api/v1/products/', {'name': 'Free', 'price': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sizes_must_be_strings(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Odd', 'price': '10.00', 'sizes': ['M', ''],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sizes', response.data)

    def test_category_from_other_shop_is_rejected(self):
        foreign = TestDataFactory.create_category(self.other_shop)
        response = self.client.post('/api/v1/products/', {
            'name': 'Mixed', 'price': '10.00', 'category': foreign.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('category', response.data)

    def test_update_own_product(self):
        product = TestDataFactory.create_product(self.shop, price=Decimal('10.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'price': '12.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.price, Decimal('12.50'))
        log = AuditLog.objects.get(model_name='Product', action='update')
        self.assertEqual(log.changes['price'], {'old': '10.00', 'new': '12.50'})

    def test_cannot_touch_other_shop_product(self):
        product = TestDataFactory.create_product(self.other_shop)
        self.assertEqual(self.client.get(f'/api/v1/products/{product.id}/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Product.objects.filter(pk=product.id).exists())

    def test_delete_own_product(self):
        product = TestDataFactory.create_product(self.shop)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

    def test_anonymous_cannot_create(self):
        response = APIClient().post('/api/v1/products/', {'name': 'Nope', 'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_public_detail_hides_inactive(self):
        product = TestDataFactory.create_product(self.shop, is_active=False)
        response = APIClient().get(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_product_by_slug(self):
        product = TestDataFactory.create_product(self.shop, name='Silk Scarf')
        url = f'/api/v1/products/by-slug/{self.shop.subdomain}/{product.slug}/'
        response = APIClient().get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], product.id)

        response = APIClient().get(f'/api/v1/products/by-slug/{self.other_shop.subdomain}/{product.slug}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ProductListTests(TestCase):
    """Filters and pagination of the product list"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)
        self.dresses = TestDataFactory.create_category(self.shop, name='Dresses')
        self.red_dress = TestDataFactory.create_product(
            self.shop, name='Red Dress', price=Decimal('80.00'), category=self.dresses, is_featured=True
        )
        self.blue_dress = TestDataFactory.create_product(
            self.shop, name='Blue Dress', price=Decimal('40.00'), category=self.dresses, stock=0
        )
        self.hat = TestDataFactory.create_product(self.shop, name='Straw Hat', price=Decimal('15.00'))

    def ids(self, response):
        return {item['id'] for item in response.data['results']}

    def test_search(self):
        response = self.client.get('/api/v1/products/', {'search': 'dress'})
        self.assertEqual(self.ids(response), {self.red_dress.id, self.blue_dress.id})

    def test_price_range(self):
        response = self.client.get('/api/v1/products/', {'min_price': '20', 'max_price': '50'})
        self.assertEqual(self.ids(response), {self.blue_dress.id})

    def test_in_stock_and_featured(self):
        response = self.client.get('/api/v1/products/', {'in_stock': 'false'})
        self.assertEqual(self.ids(response), {self.blue_dress.id})
        response = self.client.get('/api/v1/products/', {'is_featured': 'true'})
        self.assertEqual(self.ids(response), {self.red_dress.id})

    def test_category_slug(self):
        response = self.client.get('/api/v1/products/', {'category_slug': self.dresses.slug})
        self.assertEqual(response.data['count'], 2)

    def test_invalid_filter_value(self):
        response = self.client.get('/api/v1/products/', {'min_price': 'cheap'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pagination(self):
        response = self.client.get('/api/v1/products/', {'page_size': 2})
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(len(response.data['results']), 2)
        # Newest first
        self.assertEqual(response.data['results'][0]['id'], self.hat.id)

        response = self.client.get('/api/v1/products/', {'page_size': 2, 'page': 2})
        self.assertEqual(response.data['page'], 2)
        self.assertEqual(len(response.data['results']), 1)

    def test_page_size_is_capped(self):
        response = self.client.get('/api/v1/products/', {'page_size': 1000})
        self.assertEqual(response.data['page_size'], 100)

    def test_public_list_shows_only_active(self):
        TestDataFactory.create_product(self.shop, is_active=False)
        response = APIClient().get('/api/v1/products/', {'subdomain': self.shop.subdomain})
        self.assertEqual(response.data['count'], 3)

    def test_owner_sees_inactive(self):
        hidden = TestDataFactory.create_product(self.shop, is_active=False)
        response = self.client.get('/api/v1/products/', {'is_active': 'false'})
        self.assertEqual(self.ids(response), {hidden.id})


class ProductImageTests(TestCase):
    """Image upload, removal and AI image saving"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.product = TestDataFactory.create_product(self.shop)
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def image_file(self, name='front.png'):
        return SimpleUploadedFile(name, make_image_bytes(), content_type='image/png')

    def test_upload_images(self):
        response = self.client.post(
            f'/api/v1/products/{self.product.id}/images/',
            {'images': [self.image_file('a.png'), self.image_file('b.png')]},
            format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([image['sort_order'] for image in response.data], [0, 1])
        self.assertEqual(self.product.images.count(), 2)

    def test_upload_without_file(self):
        response = self.client.post(f'/api/v1/products/{self.product.id}/images/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_rejects_non_image(self):
        fake = SimpleUploadedFile('notes.png', b'just some text', content_type='image/png')
        response = self.client.post(
            f'/api/v1/products/{self.product.id}/images/', {'image': fake}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['file'], 'notes.png')
        self.assertEqual(self.product.images.count(), 0)

    def test_upload_to_other_shop_product(self):
        foreign = TestDataFactory.create_product(TestDataFactory.create_shop())
        response = self.client.post(
            f'/api/v1/products/{foreign.id}/images/', {'image': self.image_file()}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_image(self):
        image = ProductImage.objects.create(product=self.product, image=self.image_file())
        response = self.client.delete(f'/api/v1/products/{self.product.id}/images/{image.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProductImage.objects.filter(pk=image.id).exists())

    def test_save_ai_image_requires_fields(self):
        response = self.client.post('/api/v1/products/save-ai-image/', {'productId': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_save_ai_image_unknown_product(self):
        response = self.client.post('/api/v1/products/save-ai-image/', {
            'productId': 999999, 'imageUrl': 'https://cdn.test/a.png',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('backend.catalog.views.fetch_image')
    def test_save_ai_image(self, mock_fetch):
        mock_fetch.return_value = (make_image_bytes(fmt='JPEG'), 'image/jpeg')
        response = self.client.post('/api/v1/products/save-ai-image/', {
            'productId': self.product.id, 'imageUrl': 'https://cdn.test/result.jpg',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['productId'], self.product.id)
        image = ProductImage.objects.get(pk=response.data['imageId'])
        self.assertTrue(image.image.name.endswith('.jpg'))
        mock_fetch.assert_called_once_with('https://cdn.test/result.jpg')

    @patch('backend.catalog.views.fetch_image')
    def test_save_ai_image_missing_local_file(self, mock_fetch):
        mock_fetch.side_effect = FileNotFoundError('/media/generated/missing.png')
        response = self.client.post('/api/v1/products/save-ai-image/', {
            'productId': self.product.id, 'imageUrl': '/media/generated/missing.png',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('backend.catalog.views.fetch_image')
    def test_save_ai_image_bad_url(self, mock_fetch):
        mock_fetch.side_effect = UploadError('Invalid URL')
        response = self.client.post('/api/v1/products/save-ai-image/', {
            'productId': self.product.id, 'imageUrl': 'ftp://nope',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('backend.catalog.views.fetch_image')
    def test_save_ai_image_remote_failure(self, mock_fetch):
        mock_fetch.side_effect = requests.exceptions.ConnectionError('down')
        response = self.client.post('/api/v1/products/save-ai-image/', {
            'productId': self.product.id, 'imageUrl': 'https://cdn.test/down.png',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(self.product.images.count(), 0)
