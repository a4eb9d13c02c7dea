from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Back-office staff account (tokens come from the external auth provider)"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'


class AuditActionType(models.TextChoices):
    ORDER_CREATED = 'order_created', 'Order Created'
    ORDER_UPDATED = 'order_updated', 'Order Updated'
    ORDER_DELETED = 'order_deleted', 'Order Deleted'
    ORDER_STATUS_CHANGED = 'order_status_changed', 'Order Status Changed'
    PAYMENT_RECEIVED = 'payment_received', 'Payment Received'
    PAYMENT_UPDATED = 'payment_updated', 'Payment Updated'
    PAYMENT_DELETED = 'payment_deleted', 'Payment Deleted'
    CUSTOMER_CREATED = 'customer_created', 'Customer Created'
    CUSTOMER_UPDATED = 'customer_updated', 'Customer Updated'
    PRODUCT_CREATED = 'product_created', 'Product Created'
    PRODUCT_UPDATED = 'product_updated', 'Product Updated'


class AuditLog(models.Model):
    """Audit trail for order, payment, customer and product changes"""
    action_type = models.CharField(max_length=50, choices=AuditActionType.choices)
    entity_type = models.CharField(max_length=50, help_text="e.g. order, payment, customer, product")
    entity_id = models.CharField(max_length=100)
    order = models.ForeignKey('orders.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs')
    description = models.TextField()
    metadata = models.JSONField(default=dict, blank=True)
    performed_by = models.CharField(max_length=150, blank=True, null=True, help_text="Username of the acting user")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action_type} {self.entity_type}:{self.entity_id}"

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_logs_created_at'),
            models.Index(fields=['action_type'], name='idx_audit_logs_action_type'),
            models.Index(fields=['entity_type'], name='idx_audit_logs_entity_type'),
        ]


class Currency(models.TextChoices):
    BDT = 'BDT', 'Bangladeshi Taka'
    USD = 'USD', 'US Dollar'
    EUR = 'EUR', 'Euro'
