from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from django.shortcuts import get_object_or_404
from .models import AuditLog
from .serializers import AuditLogSerializer
from .utils import paginated_response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('order', 'customer')

    action_type = request.query_params.get('action_type', None)
    if action_type:
        queryset = queryset.filter(action_type=action_type)

    entity_type = request.query_params.get('entity_type', None)
    if entity_type:
        queryset = queryset.filter(entity_type=entity_type)

    entity_id = request.query_params.get('entity_id', None)
    if entity_id:
        queryset = queryset.filter(entity_id=entity_id)

    order_id = request.query_params.get('order', None)
    if order_id:
        queryset = queryset.filter(order_id=order_id)

    customer_id = request.query_params.get('customer', None)
    if customer_id:
        queryset = queryset.filter(customer_id=customer_id)

    # Filter by date range
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at', '-id')
    return paginated_response(request, queryset, AuditLogSerializer, settings.ORDER_LIST_PAGE_SIZE)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog.objects.select_related('order', 'customer'), pk=pk)
    return Response(AuditLogSerializer(audit_log).data)
