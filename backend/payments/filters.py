import django_filters
from backend.orders.models import PaymentMethod
from .models import Payment


class PaymentFilter(django_filters.FilterSet):
    """Filter for the payment list"""
    order = django_filters.UUIDFilter(field_name='order_id')
    customer = django_filters.NumberFilter(field_name='customer_id')
    payment_method = django_filters.ChoiceFilter(choices=PaymentMethod.choices)
    paid_from = django_filters.DateFilter(field_name='paid_at', lookup_expr='date__gte')
    paid_to = django_filters.DateFilter(field_name='paid_at', lookup_expr='date__lte')

    class Meta:
        model = Payment
        fields = ['order', 'customer', 'payment_method', 'paid_from', 'paid_to']
