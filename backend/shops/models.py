from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models


hex_color_validator = RegexValidator(r'^#[0-9A-Fa-f]{6}$', 'Color must be a hex value like #RRGGBB')
subdomain_validator = RegexValidator(
    r'^[a-z0-9-]{3,63}$', 'Subdomain must be 3-63 lowercase letters, digits or dashes'
)


class Shop(models.Model):
    """A tenant storefront"""
    PLAN_CHOICES = [
        ('free', 'Free'),
        ('starter', 'Starter'),
        ('pro', 'Pro'),
    ]
    TEMPLATE_CHOICES = [
        ('classic', 'Classic'),
        ('modern', 'Modern'),
        ('minimal', 'Minimal'),
    ]

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    subdomain = models.CharField(max_length=63, unique=True, validators=[subdomain_validator])
    custom_domain = models.CharField(max_length=255, unique=True, blank=True, null=True)
    logo = models.ImageField(upload_to='shops/logos/', blank=True, null=True)
    description = models.TextField(blank=True)
    primary_color = models.CharField(max_length=7, default='#000000', validators=[hex_color_validator])
    secondary_color = models.CharField(max_length=7, default='#ffffff', validators=[hex_color_validator])
    font = models.CharField(max_length=100, default='Inter')
    template = models.CharField(max_length=20, choices=TEMPLATE_CHOICES, default='classic')
    theme_id = models.CharField(max_length=50, blank=True)
    hero_style = models.CharField(max_length=50, blank=True)
    card_style = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    plan = models.CharField(max_length=20, choices=PLAN_CHOICES, default='free')
    whatsapp_number = models.CharField(max_length=20)
    instagram_url = models.URLField(blank=True)
    facebook_url = models.URLField(blank=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='owned_shops')
    staff = models.ManyToManyField(settings.AUTH_USER_MODEL, blank=True, related_name='staff_shops')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.subdomain})"

    class Meta:
        db_table = 'shops'
        ordering = ['name']
