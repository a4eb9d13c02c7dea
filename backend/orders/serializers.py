from decimal import Decimal
from rest_framework import serializers
from backend.core.models import Currency
from backend.parties.serializers import CustomerSummarySerializer
from .models import Order, OrderItem, OrderStatus, PaymentMethod

MONEY = {'max_digits': 12, 'decimal_places': 2}
MAX_QUANTITY = 1000000
PERCENT = {'max_digits': 5, 'decimal_places': 2, 'min_value': Decimal('0'), 'max_value': Decimal('100')}


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            'id', 'product', 'line_number', 'product_title', 'sku', 'unit_price', 'quantity',
            'discount_percentage', 'discount_amount', 'tax_percentage', 'tax_amount',
            'sub_total', 'total', 'currency', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order with its items, customer summary and ledger total"""
    items = OrderItemSerializer(many=True, read_only=True)
    customer_detail = CustomerSummarySerializer(source='customer', read_only=True)
    total_paid = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer', 'customer_detail', 'status', 'payment_status',
            'payment_method', 'items_total', 'items_tax_total', 'discount_total', 'shipping',
            'grand_total', 'total_paid', 'currency', 'notes', 'items', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_total_paid(self, obj):
        total_paid = getattr(obj, 'total_paid', None)
        if total_paid is None:
            return None
        return f"{total_paid:.2f}"


class OrderListSerializer(OrderSerializer):
    """Lighter row for the order list (no items)"""
    item_count = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = [
            'id', 'order_number', 'customer', 'customer_detail', 'status', 'payment_status',
            'payment_method', 'grand_total', 'total_paid', 'currency', 'item_count', 'created_at'
        ]
        read_only_fields = fields

    def get_item_count(self, obj):
        return len(obj.items.all())


class OrderItemInputSerializer(serializers.Serializer):
    product = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
    unit_price = serializers.DecimalField(min_value=Decimal('0'), required=False, allow_null=True, **MONEY)
    discount_percentage = serializers.DecimalField(required=False, **PERCENT)
    tax_percentage = serializers.DecimalField(required=False, **PERCENT)


class OrderCreateSerializer(serializers.Serializer):
    customer = serializers.IntegerField(min_value=1)
    items = OrderItemInputSerializer(many=True, required=False)
    shipping = serializers.DecimalField(min_value=Decimal('0'), required=False, **MONEY)
    notes = serializers.CharField(required=False, allow_blank=True)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)


class OrderItemUpdateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY, required=False)
    unit_price = serializers.DecimalField(min_value=Decimal('0'), required=False, **MONEY)
    discount_percentage = serializers.DecimalField(required=False, **PERCENT)
    tax_percentage = serializers.DecimalField(required=False, **PERCENT)


class OrderUpdateSerializer(serializers.Serializer):
    """
    Partial order update. ``payment_status`` is not accepted: it only moves
    when the payment ledger or the order total changes.
    """
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    shipping = serializers.DecimalField(min_value=Decimal('0'), required=False, **MONEY)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    items = OrderItemUpdateSerializer(many=True, required=False)
