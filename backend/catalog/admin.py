from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['title', 'sku', 'status', 'base_price', 'discount_percentage', 'tax_percentage', 'total', 'stock']
    list_filter = ['status', 'currency', 'created_at']
    search_fields = ['title', 'sku', 'label']
    ordering = ['title']
    readonly_fields = ['discount_amount', 'tax_amount', 'total', 'created_at', 'updated_at']
