"""
Bot user store: registration, credits and moderation.

Telegram ids are the public handle; credits are changed with F()
expressions or a row lock so concurrent updates are never lost.
"""
import logging

from django.db import transaction
from django.db.models import F, Sum

from .models import BotUser

logger = logging.getLogger('backend.bot')


def get_user(telegram_id):
    return BotUser.objects.filter(telegram_id=int(telegram_id)).first()


def get_or_create_user(telegram_id, username=None):
    user, created = BotUser.objects.get_or_create(
        telegram_id=int(telegram_id),
        defaults={'username': username, 'credits': 0, 'generations_count': 0},
    )
    if created:
        logger.info(f"Registered bot user {telegram_id} ({username or 'no username'})")
    return user


def set_credits(telegram_id, amount):
    """Set the balance, creating the user when unknown"""
    user, _ = BotUser.objects.update_or_create(
        telegram_id=int(telegram_id),
        defaults={'credits': amount},
    )
    return user


def increment_credits(telegram_id, amount):
    """Add `amount` credits; returns None for an unknown user"""
    updated = BotUser.objects.filter(telegram_id=int(telegram_id)).update(credits=F('credits') + amount)
    return get_user(telegram_id) if updated else None


def deduct_credit(telegram_id):
    """
    Take one credit and count one generation.

    Returns the updated user, or None when the user is unknown or has
    no credits left.
    """
    with transaction.atomic():
        user = BotUser.objects.select_for_update().filter(telegram_id=int(telegram_id)).first()
        if user is None or user.credits <= 0:
            return None
        user.credits -= 1
        user.generations_count += 1
        user.save(update_fields=['credits', 'generations_count', 'updated_at'])
    return user


def refund_credit(telegram_id):
    user = increment_credits(telegram_id, 1)
    if user is not None:
        logger.info(f"Refunded one credit to bot user {telegram_id}")
    return user


def set_language(telegram_id, language):
    BotUser.objects.filter(telegram_id=int(telegram_id)).update(language=language)


def set_email(telegram_id, email):
    BotUser.objects.filter(telegram_id=int(telegram_id)).update(email=email)


def set_banned(telegram_id, banned):
    """Ban or unban; returns False when the user is unknown"""
    return BotUser.objects.filter(telegram_id=int(telegram_id)).update(is_banned=banned) > 0


def get_stats():
    totals = BotUser.objects.aggregate(total_generations=Sum('generations_count'))
    return {
        'total_users': BotUser.objects.count(),
        'total_generations': totals['total_generations'] or 0,
    }


def all_telegram_ids():
    return list(BotUser.objects.values_list('telegram_id', flat=True))
