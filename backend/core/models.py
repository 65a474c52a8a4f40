from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Platform user. The role decides whether shop scoping applies."""
    ROLE_PLATFORM_ADMIN = 'platform_admin'
    ROLE_SHOP_OWNER = 'shop_owner'
    ROLE_SHOP_STAFF = 'shop_staff'
    ROLE_CHOICES = [
        (ROLE_PLATFORM_ADMIN, 'Platform Admin'),
        (ROLE_SHOP_OWNER, 'Shop Owner'),
        (ROLE_SHOP_STAFF, 'Shop Staff'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_SHOP_OWNER)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def is_platform_admin(self):
        return self.is_superuser or self.role == self.ROLE_PLATFORM_ADMIN


class AuditLog(models.Model):
    """Audit log for tenant-visible mutations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('order_create', 'Order Created'),
        ('order_status', 'Order Status Changed'),
        ('storefront_order', 'Storefront Order'),
        ('credit_add', 'Credits Added'),
        ('credit_deduct', 'Credits Deducted'),
        ('ai_generation', 'AI Generation'),
        ('image_attach', 'Image Attached'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    shop = models.ForeignKey('shops.Shop', on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, customer name)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_2f1c0a_idx'),
            models.Index(fields=['action'], name='audit_logs_action_8d3e51_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_4b7a9c_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"
