from rest_framework import serializers
from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    order_number = serializers.IntegerField(source='order.order_number', read_only=True, default=None)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'action_type', 'entity_type', 'entity_id', 'order', 'order_number',
                  'customer', 'customer_name', 'description', 'metadata', 'performed_by', 'created_at']
