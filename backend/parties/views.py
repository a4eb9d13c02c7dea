from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from django.db.models import Q
from django.shortcuts import get_object_or_404
from backend.core.models import AuditActionType
from backend.core.utils import create_audit_log, get_performed_by, paginated_response
from .models import Customer
from .serializers import CustomerSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List customers or create a new customer"""
    if request.method == 'GET':
        queryset = Customer.objects.all().order_by('name', 'id')
        search = request.query_params.get('search', None)
        is_active = request.query_params.get('is_active', None)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active.lower() == 'true')
        return paginated_response(request, queryset, CustomerSerializer, settings.ORDER_LIST_PAGE_SIZE)

    serializer = CustomerSerializer(data=request.data)
    if serializer.is_valid():
        customer = serializer.save()
        create_audit_log(
            action_type=AuditActionType.CUSTOMER_CREATED,
            entity_type='customer',
            entity_id=customer.id,
            customer=customer,
            description=f"New customer {customer.name} created",
            metadata={'email': customer.email, 'phone': customer.phone},
            performed_by=get_performed_by(request),
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve or update a customer"""
    customer = get_object_or_404(Customer, pk=pk)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)

    serializer = CustomerSerializer(customer, data=request.data, partial=True)
    if serializer.is_valid():
        previous = {field: getattr(customer, field) for field in serializer.validated_data}
        serializer.save()
        changed = [field for field, value in previous.items() if getattr(customer, field) != value]
        if changed:
            create_audit_log(
                action_type=AuditActionType.CUSTOMER_UPDATED,
                entity_type='customer',
                entity_id=customer.id,
                customer=customer,
                description=f"Customer {customer.name} updated",
                metadata={'updated_fields': changed},
                performed_by=get_performed_by(request),
            )
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
