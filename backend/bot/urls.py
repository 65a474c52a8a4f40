from django.urls import path
from .views import telegram_webhook

urlpatterns = [
    path('bot/telegram/webhook/', telegram_webhook, name='telegram-webhook'),
]
