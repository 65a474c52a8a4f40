"""
Credit bookkeeping for AI generations.

Balances never go negative: every deduction locks the credit row with
select_for_update inside a transaction and re-checks the balance.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import transaction

from .models import UserCredit, CreditTransaction

logger = logging.getLogger('backend.credits')

CREDIT_COSTS = {
    'photo': 1,
    'video': 3,
}

GENERATION_TRANSACTION_TYPES = {
    'photo': 'photo_generation',
    'video': 'video_generation',
}


class CreditError(Exception):
    """Base error for credit operations"""


class InsufficientCredits(CreditError):
    def __init__(self, required, available):
        self.required = required
        self.available = available
        super().__init__(f'Insufficient credits: required {required}, available {available}')


@dataclass
class CreditCheck:
    allowed: bool
    balance: int
    cost: int
    error: Optional[str] = None


def get_credit_cost(kind) -> int:
    """Cost of a generation kind; unknown kinds cost as much as a photo"""
    return CREDIT_COSTS.get(kind, CREDIT_COSTS['photo'])


def get_or_create_credit(user) -> UserCredit:
    """Credit record of the user, created with the sign-up allowance if missing"""
    initial = getattr(settings, 'STUDIO_NEW_USER_CREDITS', 10)
    credit, created = UserCredit.objects.get_or_create(
        user=user,
        defaults={'balance': initial, 'total_purchased': initial, 'total_used': 0},
    )
    if created:
        logger.info(f"Created credit record for user {user.id} with {initial} credits")
    return credit


def check_credits(user, kind='photo') -> CreditCheck:
    cost = get_credit_cost(kind)
    credit = get_or_create_credit(user)
    if credit.balance < cost:
        return CreditCheck(allowed=False, balance=credit.balance, cost=cost, error='Insufficient credits')
    return CreditCheck(allowed=True, balance=credit.balance, cost=cost)


def deduct_credits(user, amount, type='generation', metadata=None) -> UserCredit:
    """
    Deduct `amount` credits and log the transaction.

    Raises CreditError when the user has no credit record and
    InsufficientCredits when the balance is too low.
    """
    if amount is None or amount <= 0:
        raise CreditError('Invalid amount')

    with transaction.atomic():
        credit = UserCredit.objects.select_for_update().filter(user=user).first()
        if credit is None:
            raise CreditError('No credit record found')
        if credit.balance < amount:
            raise InsufficientCredits(required=amount, available=credit.balance)

        credit.balance -= amount
        credit.total_used += amount
        credit.save(update_fields=['balance', 'total_used', 'updated_at'])

        CreditTransaction.objects.create(
            user=user,
            type=type or 'generation',
            amount=-amount,
            balance_after=credit.balance,
            metadata=metadata or {},
        )

    logger.info(f"Deducted {amount} credits from user {user.id}, balance {credit.balance}")
    return credit


def deduct_for_generation(user, kind='photo', metadata=None) -> UserCredit:
    """Charge one generation of the given kind"""
    return deduct_credits(
        user,
        get_credit_cost(kind),
        type=GENERATION_TRANSACTION_TYPES.get(kind, 'generation'),
        metadata=metadata,
    )


def add_credits(user, amount, reason=None, type='admin_add') -> UserCredit:
    if amount is None or amount <= 0:
        raise CreditError('Amount must be positive')

    with transaction.atomic():
        credit = UserCredit.objects.select_for_update().filter(user=user).first()
        if credit is None:
            credit = UserCredit.objects.create(
                user=user, balance=amount, total_purchased=amount, total_used=0
            )
        else:
            credit.balance += amount
            credit.total_purchased += amount
            credit.save(update_fields=['balance', 'total_purchased', 'updated_at'])

        CreditTransaction.objects.create(
            user=user,
            type=type,
            amount=amount,
            balance_after=credit.balance,
            metadata={'reason': reason or 'Admin credit addition'},
        )

    logger.info(f"Added {amount} credits to user {user.id}, balance {credit.balance}")
    return credit
