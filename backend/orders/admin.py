from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product_title', 'sku', 'sub_total', 'discount_amount', 'tax_amount', 'total']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer', 'status', 'payment_status', 'grand_total', 'currency', 'created_at', 'deleted_at']
    list_filter = ['status', 'payment_status', 'currency', 'created_at']
    search_fields = ['order_number', 'customer__name', 'customer__phone']
    ordering = ['-order_number']
    readonly_fields = ['payment_status', 'items_total', 'items_tax_total', 'discount_total', 'grand_total', 'created_at', 'updated_at']
    inlines = [OrderItemInline]
