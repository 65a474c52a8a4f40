from django.conf import settings
from django.db import models


class UserCredit(models.Model):
    """Credit balance of a platform user for AI generations"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='credit')
    balance = models.PositiveIntegerField(default=0)
    total_purchased = models.IntegerField(default=0)
    total_used = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} - {self.balance} credits"

    class Meta:
        db_table = 'user_credits'


class CreditTransaction(models.Model):
    """Signed movement on a credit balance"""
    TYPE_CHOICES = [
        ('generation', 'Generation'),
        ('photo_generation', 'Photo Generation'),
        ('video_generation', 'Video Generation'),
        ('admin_add', 'Admin Addition'),
        ('purchase', 'Purchase'),
        ('signup_bonus', 'Signup Bonus'),
        ('refund', 'Refund'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='credit_transactions')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    amount = models.IntegerField()
    balance_after = models.IntegerField()
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"{self.type} {self.amount:+d} ({self.user_id})"

    class Meta:
        db_table = 'credit_transactions'
        ordering = ['-created_at', '-id']
