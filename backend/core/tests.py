"""
Test suite for the Core module
Tests: registration, JWT login/refresh, user admin, audit logs, shop scope, slugs
"""
from django.contrib.auth import get_user_model
from django.test import TestCase, SimpleTestCase, RequestFactory
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from backend.core.models import AuditLog
from backend.core.permissions import get_user_shop, is_platform_admin, resolve_shop_scope
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, get_client_ip, parse_positive_int, slugify_text, unique_slug
from backend.shops.models import Shop

User = get_user_model()

STRONG_PASSWORD = 'Vq8!lanterns-42'


class AuthTests(TestCase):
    """Registration and token endpoints"""

    def setUp(self):
        self.client = APIClient()

    def test_register_creates_shop_owner(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newowner',
            'email': 'owner@example.com',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(User.objects.get(username='newowner').role, User.ROLE_SHOP_OWNER)

    def test_register_ignores_requested_role(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'sneaky',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'platform_admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username='sneaky').role, User.ROLE_SHOP_OWNER)

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'password': STRONG_PASSWORD,
            'password_confirm': 'something-else-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_and_refresh(self):
        TestDataFactory.create_user(username='alice', password=STRONG_PASSWORD)
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'alice', 'password': STRONG_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        refresh = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(refresh.status_code, status.HTTP_200_OK)
        self.assertIn('access', refresh.data)

    def test_access_token_carries_role(self):
        TestDataFactory.create_user(username='carol', password=STRONG_PASSWORD, role='shop_staff')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'carol', 'password': STRONG_PASSWORD,
        }, format='json')
        token = AccessToken(response.data['access'])
        self.assertEqual(token['username'], 'carol')
        self.assertEqual(token['role'], 'shop_staff')

    def test_refresh_for_deleted_user(self):
        user = TestDataFactory.create_user(username='gone', password=STRONG_PASSWORD)
        refresh = str(RefreshToken.for_user(user))
        user.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_disabled_user_cannot_login(self):
        user = TestDataFactory.create_user(username='dormant', password=STRONG_PASSWORD)
        user.is_active = False
        user.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'dormant', 'password': STRONG_PASSWORD,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='bob', password=STRONG_PASSWORD)
        response = self.client.post('/api/v1/auth/login/', {'username': 'bob', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_includes_shop(self):
        owner = TestDataFactory.create_user()
        shop = TestDataFactory.create_shop(owner=owner)
        client = AuthenticatedAPIClient().authenticate_user(owner)

        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shop']['id'], shop.id)
        self.assertFalse(response.data['is_platform_admin'])


class UserAdminTests(TestCase):
    """User management is reserved to platform admins"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.owner = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)

    def test_owner_cannot_list_users(self):
        client = AuthenticatedAPIClient().authenticate_user(self.owner)
        response = client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filtered_by_role(self):
        response = self.client.get('/api/v1/users/', {'role': 'platform_admin'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([user['id'] for user in response.data], [self.admin.id])

    def test_admin_creates_staff_user(self):
        response = self.client.post('/api/v1/users/', {
            'username': 'helper',
            'password': STRONG_PASSWORD,
            'password_confirm': STRONG_PASSWORD,
            'role': 'shop_staff',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username='helper').role, User.ROLE_SHOP_STAFF)

    def test_admin_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_deletes_user(self):
        response = self.client.delete(f'/api/v1/users/{self.owner.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.owner.id).exists())


class AuditLogTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.factory = RequestFactory()

    def test_create_audit_log_records_user_and_ip(self):
        request = self.factory.post('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        request.user = self.admin
        log = create_audit_log(request=request, action='create', model_name='Shop', object_id=5, object_name='My Shop')
        self.assertEqual(log.user, self.admin)
        self.assertEqual(log.ip_address, '10.0.0.1')
        self.assertEqual(log.object_id, '5')

    def test_missing_fields_skip_logging(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_audit_log_endpoint_filters(self):
        create_audit_log(user=self.admin, action='create', model_name='Shop', object_id=1)
        create_audit_log(user=self.admin, action='delete', model_name='Product', object_id=2)
        client = AuthenticatedAPIClient().authenticate_user(self.admin)

        response = client.get('/api/v1/audit-logs/', {'action': 'delete'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['model_name'], 'Product')


class ShopScopeTests(TestCase):
    """resolve_shop_scope for each kind of caller"""

    def setUp(self):
        self.factory = RequestFactory()

    def scope_for(self, user):
        request = self.factory.get('/')
        request.user = user
        return resolve_shop_scope(request)

    def test_admin_is_unrestricted(self):
        admin = TestDataFactory.create_admin()
        scope = self.scope_for(admin)
        self.assertTrue(scope.is_admin)
        self.assertTrue(scope.can_modify(TestDataFactory.create_shop(), shop_field='pk'))

    def test_superuser_counts_as_admin(self):
        superuser = TestDataFactory.create_user(is_superuser=True, is_staff=True)
        self.assertTrue(is_platform_admin(superuser))

    def test_owner_scope(self):
        owner = TestDataFactory.create_user()
        shop = TestDataFactory.create_shop(owner=owner)
        other = TestDataFactory.create_shop()

        scope = self.scope_for(owner)
        self.assertEqual(scope.shop_id, shop.id)
        self.assertEqual(list(scope.filter_queryset(Shop.objects.all(), shop_field='pk')), [shop])
        self.assertFalse(scope.can_modify(other, shop_field='pk'))

    def test_staff_member_uses_staffed_shop(self):
        staff_user = TestDataFactory.create_user(role='shop_staff')
        shop = TestDataFactory.create_shop()
        shop.staff.add(staff_user)
        self.assertEqual(get_user_shop(staff_user), shop)

    def test_user_without_shop_is_denied(self):
        scope = self.scope_for(TestDataFactory.create_user())
        self.assertTrue(scope.denied)
        self.assertEqual(scope.denied_response().status_code, status.HTTP_403_FORBIDDEN)


class UtilsTests(SimpleTestCase):

    def test_slugify_text(self):
        self.assertEqual(slugify_text("Robe d'été  Rouge"), 'robe-dete-rouge')
        self.assertEqual(slugify_text('  --Hello   World--  '), 'hello-world')
        self.assertEqual(slugify_text(None), '')

    def test_parse_positive_int(self):
        self.assertEqual(parse_positive_int('5', 10), 5)
        self.assertEqual(parse_positive_int('-1', 10), 10)
        self.assertEqual(parse_positive_int('abc', 10), 10)
        self.assertEqual(parse_positive_int('500', 10, maximum=100), 100)

    def test_get_client_ip(self):
        request = RequestFactory().get('/', REMOTE_ADDR='192.168.1.4')
        self.assertEqual(get_client_ip(request), '192.168.1.4')
        self.assertIsNone(get_client_ip(None))


class UniqueSlugTests(TestCase):

    def test_suffixes_taken_slugs(self):
        TestDataFactory.create_shop(subdomain='summer-sale')
        self.assertEqual(unique_slug(Shop, 'Summer Sale'), 'summer-sale-2')

    def test_falls_back_to_prefix(self):
        self.assertTrue(unique_slug(Shop, '!!!', fallback_prefix='shop').startswith('shop-'))
