"""
Test suite for the Credits module
Tests: balance bookkeeping, deduction guards, admin grants, transaction history
"""
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.credits.models import CreditTransaction, UserCredit
from backend.credits.services import (
    CreditError, InsufficientCredits, add_credits, check_credits, deduct_credits,
    deduct_for_generation, get_credit_cost, get_or_create_credit
)


class CreditServiceTests(TestCase):
    """Test the credit service functions"""

    def setUp(self):
        self.user = TestDataFactory.create_user()

    @override_settings(STUDIO_NEW_USER_CREDITS=4)
    def test_new_record_gets_signup_allowance(self):
        credit = get_or_create_credit(self.user)
        self.assertEqual(credit.balance, 4)
        self.assertEqual(credit.total_purchased, 4)
        self.assertEqual(get_or_create_credit(self.user).pk, credit.pk)

    def test_costs(self):
        self.assertEqual(get_credit_cost('photo'), 1)
        self.assertEqual(get_credit_cost('video'), 3)
        self.assertEqual(get_credit_cost('unknown'), 1)

    def test_check_credits(self):
        TestDataFactory.create_credit(self.user, balance=2)
        self.assertTrue(check_credits(self.user, 'photo').allowed)
        result = check_credits(self.user, 'video')
        self.assertFalse(result.allowed)
        self.assertEqual((result.balance, result.cost), (2, 3))

    def test_deduct_logs_transaction(self):
        TestDataFactory.create_credit(self.user, balance=5)
        credit = deduct_credits(self.user, 2, metadata={'job': 'abc'})
        self.assertEqual(credit.balance, 3)
        self.assertEqual(credit.total_used, 2)

        transaction = CreditTransaction.objects.get(user=self.user)
        self.assertEqual(transaction.amount, -2)
        self.assertEqual(transaction.balance_after, 3)
        self.assertEqual(transaction.metadata, {'job': 'abc'})

    def test_deduct_never_goes_negative(self):
        TestDataFactory.create_credit(self.user, balance=1)
        with self.assertRaises(InsufficientCredits) as ctx:
            deduct_credits(self.user, 2)
        self.assertEqual((ctx.exception.required, ctx.exception.available), (2, 1))
        self.assertEqual(UserCredit.objects.get(user=self.user).balance, 1)
        self.assertFalse(CreditTransaction.objects.exists())

    def test_deduct_without_record(self):
        with self.assertRaises(CreditError):
            deduct_credits(self.user, 1)

    def test_deduct_rejects_non_positive_amount(self):
        TestDataFactory.create_credit(self.user, balance=5)
        with self.assertRaises(CreditError):
            deduct_credits(self.user, 0)

    def test_deduct_for_generation(self):
        TestDataFactory.create_credit(self.user, balance=5)
        credit = deduct_for_generation(self.user, 'video')
        self.assertEqual(credit.balance, 2)
        self.assertEqual(CreditTransaction.objects.get(user=self.user).type, 'video_generation')

    def test_add_creates_missing_record(self):
        credit = add_credits(self.user, 7, reason='Promo')
        self.assertEqual(credit.balance, 7)
        transaction = CreditTransaction.objects.get(user=self.user)
        self.assertEqual(transaction.type, 'admin_add')
        self.assertEqual(transaction.metadata, {'reason': 'Promo'})

    def test_add_to_existing_record(self):
        TestDataFactory.create_credit(self.user, balance=3)
        credit = add_credits(self.user, 2)
        self.assertEqual(credit.balance, 5)
        self.assertEqual(credit.total_purchased, 5)

    def test_add_rejects_non_positive_amount(self):
        with self.assertRaises(CreditError):
            add_credits(self.user, -1)


class CreditAPITests(TestCase):
    """Test the credit endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    @override_settings(STUDIO_NEW_USER_CREDITS=10)
    def test_me_creates_record(self):
        response = self.client.get('/api/v1/user-credits/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'balance': 10, 'totalPurchased': 10, 'totalUsed': 0})

    def test_me_requires_authentication(self):
        response = APIClient().get('/api/v1/user-credits/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deduct(self):
        TestDataFactory.create_credit(self.user, balance=5)
        response = self.client.post('/api/v1/user-credits/deduct/', {
            'amount': 3, 'type': 'photo_generation', 'metadata': {'source': 'studio'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True, 'balance': 2, 'deducted': 3})

    def test_deduct_insufficient(self):
        TestDataFactory.create_credit(self.user, balance=1)
        response = self.client.post('/api/v1/user-credits/deduct/', {'amount': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'], {'required': 3, 'available': 1})

    def test_deduct_invalid_amount(self):
        TestDataFactory.create_credit(self.user, balance=5)
        for amount in (0, -2, 'many'):
            response = self.client.post('/api/v1/user-credits/deduct/', {'amount': amount}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_deduct_invalid_type(self):
        TestDataFactory.create_credit(self.user, balance=5)
        response = self.client.post('/api/v1/user-credits/deduct/', {'amount': 1, 'type': 'refund'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(UserCredit.objects.get(user=self.user).balance, 5)

    def test_add_requires_admin(self):
        response = self.client.post('/api/v1/user-credits/add/', {'userId': self.user.id, 'amount': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_adds_credits(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = admin_client.post('/api/v1/user-credits/add/', {
            'userId': self.user.id, 'amount': 5, 'reason': 'Support gesture',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['newBalance'], 5)
        self.assertEqual(response.data['userId'], self.user.id)

    def test_admin_add_validation(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        response = admin_client.post('/api/v1/user-credits/add/', {'userId': self.user.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = admin_client.post('/api/v1/user-credits/add/', {'userId': 999999, 'amount': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_transactions_paginated(self):
        add_credits(self.user, 10)
        for _ in range(3):
            deduct_credits(self.user, 1)
        add_credits(TestDataFactory.create_user(), 4)

        response = self.client.get('/api/v1/credit-transactions/me/', {'pageSize': 3})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 3)
        self.assertEqual(response.data['data'][0]['amount'], -1)
        self.assertEqual(response.data['meta']['pagination'], {
            'page': 1, 'pageSize': 3, 'total': 4, 'pageCount': 2,
        })

        response = self.client.get('/api/v1/credit-transactions/me/', {'pageSize': 3, 'page': 2})
        self.assertEqual(response.data['data'][0]['amount'], 10)
        self.assertEqual(response.data['data'][0]['balanceAfter'], 10)
