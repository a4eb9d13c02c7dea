import uuid
from django.db import models
from django.utils import timezone
from backend.core.models import Currency
from backend.orders.models import PaymentMethod


class Payment(models.Model):
    """A money receipt applied against one order"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey('orders.Order', on_delete=models.CASCADE, related_name='payments')
    customer = models.ForeignKey('parties.Customer', on_delete=models.PROTECT, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.BDT)
    reference = models.CharField(max_length=100, blank=True, help_text='Transaction ID, cheque number, etc.')
    notes = models.TextField(blank=True)
    paid_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.amount} {self.currency} for order {self.order_id}"

    class Meta:
        db_table = 'payments'
        ordering = ['-paid_at']
        indexes = [
            models.Index(fields=['paid_at'], name='idx_payments_paid_at'),
        ]
