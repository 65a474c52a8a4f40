from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Category(models.Model):
    """Product categories of a shop"""
    name = models.CharField(max_length=200, db_index=True)
    slug = models.SlugField(max_length=200)
    sort_order = models.IntegerField(default=0)
    shop = models.ForeignKey('shops.Shop', on_delete=models.CASCADE, related_name='categories')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['sort_order', 'name']
        constraints = [
            models.UniqueConstraint(fields=['shop', 'slug'], name='unique_category_slug_per_shop'),
        ]


class Product(models.Model):
    """Product sold by a shop"""
    name = models.CharField(max_length=200, db_index=True)
    slug = models.SlugField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    old_price = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    sizes = models.JSONField(default=list, blank=True)
    colors = models.JSONField(default=list, blank=True)
    is_featured = models.BooleanField(default=False, db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)
    stock = models.PositiveIntegerField(default=0)
    shop = models.ForeignKey('shops.Shop', on_delete=models.CASCADE, related_name='products')
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def main_image(self):
        first = self.images.first()
        return first.image.url if first and first.image else None

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['shop', 'slug'], name='unique_product_slug_per_shop'),
        ]


class ProductImage(models.Model):
    """Gallery image of a product"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')
    image = models.ImageField(upload_to='products/')
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Image {self.id} of {self.product_id}"

    class Meta:
        db_table = 'product_images'
        ordering = ['sort_order', 'id']
