from django.db import models


class BotUser(models.Model):
    """Telegram user of the photo bot"""
    LANGUAGE_CHOICES = [
        ('en', 'English'),
        ('tn', 'Tunisian'),
    ]

    telegram_id = models.BigIntegerField(unique=True)
    username = models.CharField(max_length=150, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    credits = models.IntegerField(default=0)
    generations_count = models.IntegerField(default=0)
    language = models.CharField(max_length=2, choices=LANGUAGE_CHOICES, default='en')
    is_banned = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.username or self.telegram_id}"

    class Meta:
        db_table = 'bot_users'
