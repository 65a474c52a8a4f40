"""
Test suite for the Orders module
Tests: order CRUD and status, shop scoping, storefront checkout, WhatsApp links
"""
from datetime import timedelta
from decimal import Decimal
from urllib.parse import unquote

from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.orders.models import Order
from backend.orders.views import normalize_phone
from backend.orders.whatsapp import (
    format_phone_number, generate_whatsapp_cart_url, generate_whatsapp_url, is_valid_whatsapp_number
)


class OrderAPITests(TestCase):
    """Authenticated order management"""

    def setUp(self):
        self.owner = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.owner)
        self.product = TestDataFactory.create_product(self.shop, price=Decimal('30.00'))
        self.client = AuthenticatedAPIClient().authenticate_user(self.owner)

    def test_create_order_computes_item_totals(self):
        response = self.client.post('/api/v1/orders/', {
            'customer_name': 'Amira',
            'customer_phone': '+21698765432',
            'items': [{'product': self.product.id, 'quantity': 3, 'unit_price': '30.00', 'size': 'M'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['shop'], self.shop.id)
        self.assertEqual(Decimal(response.data['total']), Decimal('90.00'))
        self.assertEqual(response.data['items'][0]['product_name'], self.product.name)
        self.assertTrue(AuditLog.objects.filter(action='order_create').exists())

    def test_create_rejects_foreign_product(self):
        foreign = TestDataFactory.create_product(TestDataFactory.create_shop())
        response = self.client.post('/api/v1/orders/', {
            'customer_name': 'Amira',
            'customer_phone': '+21698765432',
            'items': [{'product': foreign.id, 'quantity': 1, 'unit_price': '10.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_create_rejects_short_name(self):
        response = self.client.post('/api/v1/orders/', {
            'customer_name': ' A ', 'customer_phone': '+21698765432',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        pending = TestDataFactory.create_order(self.shop, customer_name='Sami')
        TestDataFactory.create_order(self.shop, status='delivered', customer_name='Leila')
        TestDataFactory.create_order(TestDataFactory.create_shop(), customer_name='Sami elsewhere')

        response = self.client.get('/api/v1/orders/')
        self.assertEqual(len(response.data), 2)

        response = self.client.get('/api/v1/orders/', {'status': 'pending'})
        self.assertEqual([order['id'] for order in response.data], [pending.id])

        response = self.client.get('/api/v1/orders/', {'search': 'lei'})
        self.assertEqual(response.data[0]['customer_name'], 'Leila')

    def test_update_replaces_items(self):
        order = TestDataFactory.create_order(self.shop, items=[(self.product, 1, '30.00')])
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {
            'items': [{'product': self.product.id, 'quantity': 2, 'unit_price': '25.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(order.items.count(), 1)
        self.assertEqual(Decimal(response.data['total']), Decimal('50.00'))

    def test_patch_without_items_keeps_items(self):
        order = TestDataFactory.create_order(self.shop, items=[(self.product, 1, '30.00')])
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'notes': 'Call first'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(order.items.count(), 1)

    def test_change_status(self):
        order = TestDataFactory.create_order(self.shop)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, 'shipped')
        log = AuditLog.objects.get(action='order_status')
        self.assertEqual(log.changes['status'], {'old': 'pending', 'new': 'shipped'})

    def test_status_is_required_and_validated(self):
        order = TestDataFactory.create_order(self.shop)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_shop_order_is_off_limits(self):
        order = TestDataFactory.create_order(TestDataFactory.create_shop())
        self.assertEqual(self.client.get(f'/api/v1/orders/{order.id}/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_order(self):
        order = TestDataFactory.create_order(self.shop)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(pk=order.id).exists())

    def test_list_date_range(self):
        recent = TestDataFactory.create_order(self.shop)
        old = TestDataFactory.create_order(self.shop)
        Order.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=40))

        since = (timezone.now() - timedelta(days=7)).date().isoformat()
        response = self.client.get('/api/v1/orders/', {'date_from': since})
        self.assertEqual([order['id'] for order in response.data], [recent.id])

        until = (timezone.now() - timedelta(days=30)).date().isoformat()
        response = self.client.get('/api/v1/orders/', {'date_to': until})
        self.assertEqual([order['id'] for order in response.data], [old.id])

    def test_list_rejects_malformed_filters(self):
        TestDataFactory.create_order(self.shop)
        for params in ({'shop': 'abc'}, {'date_from': 'notadate'}, {'date_to': '2024-13-45'},
                       {'status': 'lost'}, {'payment_method': 'barter'}):
            response = self.client.get('/api/v1/orders/', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, params)
            self.assertIn(next(iter(params)), response.data)

    def test_anonymous_cannot_list(self):
        response = APIClient().get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class StorefrontOrderTests(TestCase):
    """Public checkout"""

    def setUp(self):
        self.client = APIClient()
        self.shop = TestDataFactory.create_shop(name='Dar Zina', whatsapp_number='+216 22 333 444')
        self.dress = TestDataFactory.create_product(self.shop, name='Kaftan', price=Decimal('120.00'))
        self.scarf = TestDataFactory.create_product(self.shop, name='Scarf', price=Decimal('15.50'))

    def payload(self, **overrides):
        data = {
            'customerName': 'Nour',
            'customerPhone': '+216 98 765 432',
            'customerAddress': 'Sfax',
            'shopId': self.shop.id,
            'items': [
                {'productId': self.dress.id, 'quantity': 1, 'price': '120.00', 'size': 'M'},
                {'productId': self.scarf.id, 'quantity': 2, 'price': '15.50', 'color': 'Red'},
            ],
        }
        data.update(overrides)
        return data

    def test_creates_pending_cod_order(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        order = Order.objects.get(pk=response.data['id'])
        self.assertEqual(order.status, 'pending')
        self.assertEqual(order.payment_method, 'cod')
        self.assertEqual(order.customer_phone, '+21698765432')
        self.assertEqual(order.get_total(), Decimal('151.00'))

        url = response.data['whatsappUrl']
        self.assertTrue(url.startswith('https://wa.me/21622333444?text='))
        message = unquote(url.split('?text=', 1)[1])
        self.assertIn('*Dar Zina*', message)
        self.assertIn('1. Kaftan (Size: M) - 120 TND x 1', message)
        self.assertIn('2. Scarf (Color: Red) - 15.5 TND x 2', message)
        self.assertIn('*Total: 151.00 TND*', message)

    def test_invalid_items_are_dropped(self):
        items = [
            {'productId': self.dress.id, 'quantity': 0, 'price': '120.00'},
            {'productId': self.scarf.id, 'quantity': 1, 'price': '-3'},
            {'quantity': 1, 'price': '10'},
            {'productId': self.scarf.id, 'quantity': 1, 'price': '15.50'},
        ]
        response = self.client.post('/api/v1/storefront/orders/', self.payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)

    def test_requires_valid_item(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_customer_name(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(customerName='N'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/storefront/orders/', self.payload(customerName='x' * 101), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rejects_bad_phone(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(customerPhone='12 34'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_or_inactive_shop(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(shopId=999999), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.shop.is_active = False
        self.shop.save()
        response = self.client.post('/api/v1/storefront/orders/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_missing_shop_id(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(shopId='abc'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_finite_and_oversized_numbers_are_dropped(self):
        items = [
            {'productId': self.dress.id, 'quantity': 'NaN', 'price': '120.00'},
            {'productId': self.dress.id, 'quantity': 'Infinity', 'price': '120.00'},
            {'productId': self.dress.id, 'quantity': 1, 'price': 'NaN'},
            {'productId': self.dress.id, 'quantity': 1, 'price': '-Infinity'},
            {'productId': self.dress.id, 'quantity': 1, 'price': '1e30'},
            {'productId': self.dress.id, 'quantity': '1e30', 'price': '10.00'},
            {'productId': 10 ** 30, 'quantity': 1, 'price': '10.00'},
        ]
        response = self.client.post('/api/v1/storefront/orders/', self.payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'At least one valid item is required')

        items.append({'productId': self.scarf.id, 'quantity': 1, 'price': '15.50'})
        response = self.client.post('/api/v1/storefront/orders/', self.payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)

    def test_oversized_shop_id(self):
        response = self.client.post('/api/v1/storefront/orders/', self.payload(shopId=10 ** 30), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rejects_products_of_another_shop(self):
        foreign = TestDataFactory.create_product(TestDataFactory.create_shop())
        items = [{'productId': foreign.id, 'quantity': 1, 'price': '10.00'}]
        response = self.client.post('/api/v1/storefront/orders/', self.payload(items=items), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 0)


class WhatsAppHelperTests(SimpleTestCase):

    def test_product_inquiry_url(self):
        url = generate_whatsapp_url('+216 22 333 444', 'Kaftan', '120.00', 'Dar Zina', size='L')
        self.assertTrue(url.startswith('https://wa.me/21622333444?text='))
        message = unquote(url.split('?text=', 1)[1])
        self.assertEqual(message, "Hi, I'm interested in *Kaftan* (Size: L) - 120 TND from Dar Zina.")

    def test_cart_url_encodes_like_encode_uri_component(self):
        url = generate_whatsapp_cart_url('21622333444', 'Shop', [
            {'product_name': 'Hat', 'price': 10, 'quantity': 1},
        ])
        self.assertIn("I'd%20like", url)
        self.assertIn('%0A', url)
        self.assertNotIn(' ', url)

    def test_valid_whatsapp_number(self):
        self.assertTrue(is_valid_whatsapp_number('+216 22 333 444'))
        self.assertFalse(is_valid_whatsapp_number('1234567'))
        self.assertFalse(is_valid_whatsapp_number(None))

    def test_format_phone_number(self):
        self.assertEqual(format_phone_number('21622333444'), '+216 22 333 444')
        self.assertEqual(format_phone_number('33612345678'), '+3 361 234 5678')
        self.assertEqual(format_phone_number('22333444'), '22 33 34 44')

    def test_normalize_phone(self):
        self.assertEqual(normalize_phone(' +216 (98) 765-432 '), '+21698765432')
        self.assertEqual(normalize_phone('98 765 432'), '98765432')
        self.assertEqual(normalize_phone(None), '')
