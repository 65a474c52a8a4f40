from django.apps import AppConfig


class BotConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.bot'
    verbose_name = 'Telegram Bot'
