import django_filters
from .models import Order, OrderStatus, PaymentStatus


class OrderFilter(django_filters.FilterSet):
    """Filter for the order list"""
    customer = django_filters.NumberFilter(field_name='customer_id')
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Order
        fields = ['customer', 'status', 'payment_status', 'date_from', 'date_to', 'search']

    def filter_search(self, queryset, name, value):
        """Match by order number (``#12`` or ``12``)"""
        value = (value or '').strip().lstrip('#')
        if not value:
            return queryset
        if not value.isdigit():
            return queryset.none()
        return queryset.filter(order_number=int(value))
