from decimal import Decimal
from rest_framework import serializers
from backend.core.models import Currency
from backend.orders.models import PaymentMethod
from backend.parties.serializers import CustomerSummarySerializer
from .models import Payment

MONEY = {'max_digits': 12, 'decimal_places': 2}


class PaymentSerializer(serializers.ModelSerializer):
    """Payment row, with the running total of its order when the queryset carries it"""
    order_number = serializers.IntegerField(source='order.order_number', read_only=True)
    order_total_paid = serializers.DecimalField(read_only=True, **MONEY)

    class Meta:
        model = Payment
        fields = [
            'id', 'order', 'order_number', 'customer', 'amount', 'payment_method', 'currency',
            'reference', 'notes', 'paid_at', 'order_total_paid', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PaymentDetailSerializer(PaymentSerializer):
    order_detail = serializers.SerializerMethodField()
    customer_detail = CustomerSummarySerializer(source='customer', read_only=True)

    class Meta(PaymentSerializer.Meta):
        fields = PaymentSerializer.Meta.fields + ['order_detail', 'customer_detail']
        read_only_fields = fields

    def get_order_detail(self, obj):
        order = obj.order
        total_paid = getattr(obj, 'order_total_paid', None)
        return {
            'id': str(order.id),
            'order_number': order.order_number,
            'status': order.status,
            'payment_status': order.payment_status,
            'grand_total': f"{order.grand_total:.2f}",
            'total_paid': f"{total_paid:.2f}" if total_paid is not None else None,
        }


class PaymentCreateSerializer(serializers.Serializer):
    order = serializers.UUIDField()
    customer = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(min_value=Decimal('0.01'), **MONEY)
    paid_at = serializers.DateTimeField(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentUpdateSerializer(serializers.Serializer):
    """Amendable payment fields; the order and customer of a payment are fixed"""
    amount = serializers.DecimalField(min_value=Decimal('0.01'), required=False, **MONEY)
    paid_at = serializers.DateTimeField(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PaymentSummarySerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    total_paid = serializers.DecimalField(**MONEY)
    grand_total = serializers.DecimalField(**MONEY)
    balance = serializers.DecimalField(**MONEY)
    payment_count = serializers.IntegerField()
