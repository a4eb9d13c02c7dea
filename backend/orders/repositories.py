from decimal import Decimal
from django.db.models import DecimalField, Max, Prefetch, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from .models import Order, OrderItem


def total_paid_expression():
    return Coalesce(
        Sum('payments__amount'),
        Value(Decimal('0.00')),
        output_field=DecimalField(max_digits=12, decimal_places=2),
    )


class OrderRepository:
    """Persistence for orders and their items; soft-deleted orders are hidden unless asked for"""

    def _live(self, include_deleted=False):
        queryset = Order.objects.all()
        if not include_deleted:
            queryset = queryset.filter(deleted_at__isnull=True)
        return queryset

    def queryset(self):
        """Live orders with customer, items and ``total_paid`` loaded, newest first"""
        return (
            self._live()
            .select_related('customer')
            .prefetch_related(Prefetch('items', queryset=OrderItem.objects.order_by('line_number')))
            .annotate(total_paid=total_paid_expression())
            .order_by('-order_number')
        )

    def get(self, order_id, include_deleted=False):
        return self._live(include_deleted).select_related('customer').filter(pk=order_id).first()

    def get_with_items(self, order_id):
        return self.queryset().filter(pk=order_id).first()

    def lock(self, order_id, include_deleted=False):
        """Fetch the order row with ``SELECT ... FOR UPDATE``; call inside a transaction"""
        return self._live(include_deleted).select_for_update().filter(pk=order_id).first()

    def next_order_number(self):
        current = Order.objects.aggregate(current=Max('order_number'))['current']
        return (current or 0) + 1

    def create(self, **fields):
        return Order.objects.create(**fields)

    def add_items(self, order, items):
        if not items:
            return []
        return OrderItem.objects.bulk_create([OrderItem(order=order, **item) for item in items])

    def items_of(self, order):
        return list(OrderItem.objects.filter(order=order).order_by('line_number'))

    def get_item(self, order, item_id):
        """Item lookup scoped to its owning order"""
        return OrderItem.objects.filter(pk=item_id, order=order).first()

    def save(self, order):
        order.save()
        return order

    def save_item(self, item):
        item.save()
        return item

    def set_payment_status(self, order, payment_status):
        Order.objects.filter(pk=order.pk).update(payment_status=payment_status, updated_at=timezone.now())
        order.payment_status = payment_status
        return order

    def soft_delete(self, order_id):
        return self._live().filter(pk=order_id).update(deleted_at=timezone.now(), updated_at=timezone.now())
