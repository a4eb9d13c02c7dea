from decimal import Decimal
from django.db.models import Count, DecimalField, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from .models import Payment

ZERO = Decimal('0.00')


class PaymentRepository:
    """Persistence and ledger aggregates for payments"""

    def queryset(self):
        """All payments with order/customer joined and the order's running ``order_total_paid``"""
        order_total = (
            Payment.objects.filter(order_id=OuterRef('order_id'))
            .values('order_id')
            .annotate(total=Sum('amount'))
            .values('total')[:1]
        )
        return (
            Payment.objects.select_related('order', 'customer')
            .annotate(order_total_paid=Coalesce(
                Subquery(order_total, output_field=DecimalField(max_digits=12, decimal_places=2)),
                Value(ZERO),
                output_field=DecimalField(max_digits=12, decimal_places=2),
            ))
            .order_by('-paid_at', '-created_at')
        )

    def get(self, payment_id):
        return self.queryset().filter(pk=payment_id).first()

    def lock(self, payment_id):
        return Payment.objects.select_for_update().filter(pk=payment_id).first()

    def for_order(self, order_id):
        return self.queryset().filter(order_id=order_id)

    def create(self, **fields):
        return Payment.objects.create(**fields)

    def update(self, payment, updates):
        for field, value in updates.items():
            setattr(payment, field, value)
        payment.save()
        return payment

    def delete(self, payment):
        payment.delete()

    def total_paid(self, order_id):
        """``SUM(amount)`` over the order's ledger; an empty ledger sums to zero"""
        total = Payment.objects.filter(order_id=order_id).aggregate(total=Sum('amount'))['total']
        return total if total is not None else ZERO

    def summary(self, order_id):
        result = Payment.objects.filter(order_id=order_id).aggregate(total=Sum('amount'), count=Count('id'))
        return (result['total'] if result['total'] is not None else ZERO), result['count']
