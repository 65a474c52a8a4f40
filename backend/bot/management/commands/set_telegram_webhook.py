"""
Register the webhook URL with Telegram.

Usage:
    python manage.py set_telegram_webhook https://example.com/api/v1/bot/telegram/webhook/
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from backend.bot.telegram import TelegramClient, TelegramError


class Command(BaseCommand):
    help = 'Point the Telegram bot webhook at the given URL'

    def add_arguments(self, parser):
        parser.add_argument('url', help='Public HTTPS URL of the webhook endpoint')

    def handle(self, *args, **options):
        url = options['url']
        if not url.startswith('https://'):
            raise CommandError('Telegram only delivers webhooks to https:// URLs')

        client = TelegramClient()
        if not client.configured:
            raise CommandError('TELEGRAM_BOT_TOKEN is not set')

        try:
            client.set_webhook(url, settings.TELEGRAM_WEBHOOK_SECRET)
        except TelegramError as e:
            raise CommandError(f'Telegram rejected the webhook: {e}')

        self.stdout.write(self.style.SUCCESS(f'✅ Webhook set to {url}'))
        if not settings.TELEGRAM_WEBHOOK_SECRET:
            self.stdout.write(self.style.WARNING('TELEGRAM_WEBHOOK_SECRET is empty; webhook calls are not verified'))
