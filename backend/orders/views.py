from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from backend.core.utils import get_performed_by, paginated_response
from .filters import OrderFilter
from .serializers import OrderCreateSerializer, OrderListSerializer, OrderSerializer, OrderUpdateSerializer
from .services import OrderService


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders or place a new order"""
    service = OrderService()

    if request.method == 'GET':
        filterset = OrderFilter(request.query_params, queryset=service.list_orders())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        return paginated_response(request, filterset.qs, OrderListSerializer, settings.ORDER_LIST_PAGE_SIZE)

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)

    data = dict(serializer.validated_data)
    order = service.create_order(
        customer_id=data.pop('customer'),
        items=data.pop('items', []),
        performed_by=get_performed_by(request),
        **data,
    )
    return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, update or soft-delete an order"""
    service = OrderService()

    if request.method == 'GET':
        return Response(OrderSerializer(service.get_order(pk)).data)

    if request.method == 'DELETE':
        service.delete_order(pk, performed_by=get_performed_by(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = OrderUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)

    updates = dict(serializer.validated_data)
    items = updates.pop('items', None)
    order = service.update_order(pk, updates, items=items, performed_by=get_performed_by(request))
    return Response(OrderSerializer(order).data)
