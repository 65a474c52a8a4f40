import hmac
import logging

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .handlers import handle_update
from .telegram import TelegramError

logger = logging.getLogger('backend.bot')

SECRET_HEADER = 'HTTP_X_TELEGRAM_BOT_API_SECRET_TOKEN'


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def telegram_webhook(request):
    """Receive one Telegram update; Telegram retries anything but a 200"""
    secret = settings.TELEGRAM_WEBHOOK_SECRET
    if secret and not hmac.compare_digest(request.META.get(SECRET_HEADER, ''), secret):
        logger.warning('Rejected Telegram webhook call with a bad secret token')
        return Response({'error': 'Invalid secret token'}, status=status.HTTP_403_FORBIDDEN)

    update = request.data if isinstance(request.data, dict) else {}
    try:
        handle_update(update)
    except TelegramError as e:
        logger.error(f"Telegram API error while handling update {update.get('update_id')}: {e}")

    return Response({'ok': True})
