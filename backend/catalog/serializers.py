from decimal import Decimal
from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'), required=False)
    tax_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100'), required=False)

    class Meta:
        model = Product
        fields = [
            'id', 'title', 'sku', 'status', 'label', 'base_price',
            'discount_percentage', 'discount_amount', 'tax_percentage', 'tax_amount', 'total',
            'currency', 'stock', 'created_at', 'updated_at'
        ]
        read_only_fields = ['discount_amount', 'tax_amount', 'total', 'created_at', 'updated_at']

    def validate_title(self, value):
        if len(value.strip()) < 3:
            raise serializers.ValidationError('Title must be at least 3 characters long')
        return value

    def validate_sku(self, value):
        if len(value.strip()) < 3:
            raise serializers.ValidationError('SKU must be at least 3 characters long')
        return value
