from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['order', 'customer', 'amount', 'payment_method', 'currency', 'paid_at']
    list_filter = ['payment_method', 'currency', 'paid_at']
    search_fields = ['order__order_number', 'customer__name', 'reference']
    ordering = ['-paid_at']
    readonly_fields = ['created_at', 'updated_at']
