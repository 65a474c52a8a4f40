"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.shops.models import Shop
from backend.catalog.models import Category, Product
from backend.orders.models import Order, OrderItem
from backend.credits.models import UserCredit
from backend.bot.models import BotUser
from decimal import Decimal
from PIL import Image
import io
import random
import string

User = get_user_model()


def make_image_bytes(fmt='PNG', size=(4, 4), color=(255, 255, 255)):
    """Render a tiny real image with Pillow"""
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='shop_owner',
                    is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(username=None):
        """Create a platform admin"""
        return TestDataFactory.create_user(username=username, role='platform_admin')

    @staticmethod
    def create_shop(owner=None, name=None, subdomain=None, is_active=True, whatsapp_number='21612345678'):
        """Create a test shop"""
        if owner is None:
            owner = TestDataFactory.create_user()
        suffix = TestDataFactory.random_string(6).lower()
        if not name:
            name = f'Shop {suffix}'
        if not subdomain:
            subdomain = f'shop-{suffix}'
        return Shop.objects.create(
            name=name,
            slug=subdomain,
            subdomain=subdomain,
            whatsapp_number=whatsapp_number,
            is_active=is_active,
            owner=owner
        )

    @staticmethod
    def create_category(shop, name=None, sort_order=0):
        """Create a test category"""
        if not name:
            name = f'Category {TestDataFactory.random_string(6)}'
        return Category.objects.create(
            shop=shop,
            name=name,
            slug=f'cat-{TestDataFactory.random_string(8).lower()}',
            sort_order=sort_order
        )

    @staticmethod
    def create_product(shop, name=None, price=None, category=None, is_active=True,
                       is_featured=False, stock=5, sizes=None, colors=None):
        """Create a test product"""
        if not name:
            name = f'Product {TestDataFactory.random_string(6)}'
        return Product.objects.create(
            shop=shop,
            name=name,
            slug=f'prod-{TestDataFactory.random_string(8).lower()}',
            price=price if price is not None else Decimal('49.90'),
            category=category,
            is_active=is_active,
            is_featured=is_featured,
            stock=stock,
            sizes=sizes or [],
            colors=colors or []
        )

    @staticmethod
    def create_order(shop, status='pending', customer_name='Test Customer', items=None):
        """Create a test order; items is a list of (product, quantity, unit_price)"""
        order = Order.objects.create(
            shop=shop,
            customer_name=customer_name,
            customer_phone='+21612345678',
            customer_address='Tunis',
            status=status
        )
        for product, quantity, unit_price in items or []:
            OrderItem.objects.create(
                order=order,
                product=product,
                quantity=quantity,
                unit_price=Decimal(str(unit_price)),
                total_price=Decimal(str(unit_price)) * quantity
            )
        return order

    @staticmethod
    def create_credit(user, balance=10, total_purchased=None, total_used=0):
        """Create a credit record"""
        return UserCredit.objects.create(
            user=user,
            balance=balance,
            total_purchased=balance if total_purchased is None else total_purchased,
            total_used=total_used
        )

    @staticmethod
    def create_bot_user(telegram_id=None, credits=0, language='en', email=None, is_banned=False):
        """Create a Telegram bot user"""
        if telegram_id is None:
            telegram_id = random.randint(100000, 999999999)
        return BotUser.objects.create(
            telegram_id=telegram_id,
            username=f'tg_{TestDataFactory.random_string(6)}',
            credits=credits,
            language=language,
            email=email,
            is_banned=is_banned
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
