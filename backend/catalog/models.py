from django.db import models
from decimal import Decimal
from backend.core.models import Currency
from backend.core.money import price_line


class ProductStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    DRAFT = 'draft', 'Draft'
    ARCHIVED = 'archived', 'Archived'


class Product(models.Model):
    """Product master; order items snapshot title, SKU and price from here"""
    title = models.CharField(max_length=255, db_index=True)
    sku = models.CharField(max_length=100, unique=True)
    status = models.CharField(max_length=20, choices=ProductStatus.choices, default=ProductStatus.ACTIVE)
    label = models.CharField(max_length=100, blank=True)
    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.BDT)
    stock = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.sku})"

    def apply_pricing(self):
        """Derive discount, tax and total from the base price and percentages"""
        price = price_line(self.base_price, 1, self.discount_percentage, self.tax_percentage)
        self.discount_amount = price.discount_amount
        self.tax_amount = price.tax_amount
        self.total = price.total

    def save(self, *args, **kwargs):
        self.apply_pricing()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'discount_amount', 'tax_amount', 'total'}
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'products'
        ordering = ['title']
        indexes = [
            models.Index(fields=['status'], name='idx_products_status'),
        ]
