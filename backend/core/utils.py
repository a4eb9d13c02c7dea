"""Utility functions for audit logging and list responses"""
import logging

from django.core.paginator import Paginator
from rest_framework.response import Response

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_performed_by(request):
    """Opaque identity of the acting user, as handed over by the auth provider"""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return user.get_username()


def create_audit_log(action_type=None, entity_type=None, entity_id=None, description=None,
                     order=None, customer=None, metadata=None, performed_by=None):
    """
    Create an audit log entry

    Args:
        action_type: One of ``AuditActionType`` (order_created, payment_received, ...)
        entity_type: Kind of entity acted upon (order, payment, customer, product)
        entity_id: ID of the entity (stored as string)
        description: Human-readable summary of the change
        order: Related order, if any
        customer: Related customer, if any
        metadata: Dictionary of extra details (old/new values, counts)
        performed_by: Username of the acting user

    Failures are logged and swallowed: the audited write has already
    committed by the time this runs.
    """
    if not action_type or not entity_type or not entity_id:
        logger.warning(f"Audit log creation skipped: missing required fields (action_type={action_type}, entity_type={entity_type}, entity_id={entity_id})")
        return None

    try:
        return AuditLog.objects.create(
            action_type=action_type,
            entity_type=entity_type,
            entity_id=str(entity_id),
            order=order,
            customer=customer,
            description=description or '',
            metadata=metadata or {},
            performed_by=performed_by,
        )
    except Exception as e:
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def paginated_response(request, queryset, serializer_class, default_limit=10):
    """Paginate a queryset with ``page``/``limit`` query params"""
    try:
        page = max(int(request.query_params.get('page', 1)), 1)
        limit = max(int(request.query_params.get('limit', default_limit)), 1)
    except (TypeError, ValueError):
        page, limit = 1, default_limit

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True)
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })
