from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from django.shortcuts import get_object_or_404
from backend.core.models import AuditActionType
from backend.core.money import format_currency
from backend.core.utils import create_audit_log, get_performed_by, paginated_response
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products or create a new product"""
    if request.method == 'GET':
        filterset = ProductFilter(request.query_params, queryset=Product.objects.all().order_by('title', 'id'))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        return paginated_response(request, filterset.qs, ProductSerializer, settings.ORDER_LIST_PAGE_SIZE)

    serializer = ProductSerializer(data=request.data)
    if serializer.is_valid():
        product = serializer.save()
        create_audit_log(
            action_type=AuditActionType.PRODUCT_CREATED,
            entity_type='product',
            entity_id=product.id,
            description=f"New product {product.title} ({product.sku}) created - Total: {format_currency(product.total, product.currency)}",
            metadata={'sku': product.sku, 'total': str(product.total)},
            performed_by=get_performed_by(request),
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve or update a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)

    old_total = product.total
    serializer = ProductSerializer(product, data=request.data, partial=True)
    if serializer.is_valid():
        product = serializer.save()
        create_audit_log(
            action_type=AuditActionType.PRODUCT_UPDATED,
            entity_type='product',
            entity_id=product.id,
            description=f"Product {product.title} ({product.sku}) updated",
            metadata={
                'updated_fields': sorted(serializer.validated_data.keys()),
                'total': {'old': str(old_total), 'new': str(product.total)},
            },
            performed_by=get_performed_by(request),
        )
        return Response(ProductSerializer(product).data)
    return Response(serializer.errors, status=status.HTTP_422_UNPROCESSABLE_ENTITY)
