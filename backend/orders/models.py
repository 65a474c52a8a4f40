from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from decimal import Decimal


class Order(models.Model):
    """Customer order placed on a shop"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('shipped', 'Shipped'),
        ('delivered', 'Delivered'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]
    PAYMENT_METHOD_CHOICES = [
        ('cod', 'Cash on Delivery'),
        ('bank_transfer', 'Bank Transfer'),
        ('other', 'Other'),
    ]
    # Orders in these statuses count as revenue
    REVENUE_STATUSES = ['confirmed', 'shipped', 'delivered', 'completed']

    customer_name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    customer_phone = models.CharField(max_length=20)
    customer_address = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cod')
    notes = models.TextField(blank=True)
    shop = models.ForeignKey('shops.Shop', on_delete=models.CASCADE, related_name='orders')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Order #{self.id} - {self.customer_name}"

    def get_total(self):
        return sum((item.total_price for item in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']


class OrderItem(models.Model):
    """Line item of an order"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        'catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='order_items'
    )
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    total_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    size = models.CharField(max_length=50, blank=True)
    color = models.CharField(max_length=50, blank=True)

    def __str__(self):
        return f"{self.quantity} x {self.product_id}"

    def save(self, *args, **kwargs):
        if self.total_price is None and self.unit_price is not None:
            self.total_price = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'order_items'
