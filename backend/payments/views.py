from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from backend.core.utils import get_performed_by, paginated_response
from .filters import PaymentFilter
from .serializers import (
    PaymentCreateSerializer, PaymentDetailSerializer, PaymentSerializer,
    PaymentSummarySerializer, PaymentUpdateSerializer
)
from .services import PaymentLedger


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payment_list_create(request):
    """List payments or record a payment against an order"""
    ledger = PaymentLedger()

    if request.method == 'GET':
        filterset = PaymentFilter(request.query_params, queryset=ledger.list_payments())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        return paginated_response(request, filterset.qs, PaymentSerializer, settings.ORDER_LIST_PAGE_SIZE)

    serializer = PaymentCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)

    data = dict(serializer.validated_data)
    payment = ledger.create_payment(
        order_id=data.pop('order'),
        customer_id=data.pop('customer'),
        amount=data.pop('amount'),
        paid_at=data.pop('paid_at', None),
        performed_by=get_performed_by(request),
        **data,
    )
    return Response(PaymentDetailSerializer(payment).data, status=status.HTTP_200_OK)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payment_detail(request, pk):
    """Retrieve, amend or delete a payment"""
    ledger = PaymentLedger()

    if request.method == 'GET':
        return Response(PaymentDetailSerializer(ledger.get_payment(pk)).data)

    if request.method == 'DELETE':
        ledger.delete_payment(pk, performed_by=get_performed_by(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = PaymentUpdateSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)

    payment = ledger.update_payment(pk, serializer.validated_data, performed_by=get_performed_by(request))
    return Response(PaymentDetailSerializer(payment).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_payment_list(request, order_id):
    """All payments of one order, newest first"""
    payments = PaymentLedger().list_order_payments(order_id)
    return Response(PaymentSerializer(payments, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_payment_summary(request, order_id):
    """Ledger total, balance and payment count of one order"""
    summary = PaymentLedger().get_order_payment_summary(order_id)
    return Response(PaymentSummarySerializer(summary).data)
