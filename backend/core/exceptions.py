"""
Domain errors raised by the service layer and their HTTP translation.

Services raise these; ``crm_exception_handler`` (wired through
``REST_FRAMEWORK['EXCEPTION_HANDLER']``) turns them into responses.
"""
import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

NO_UPDATES_MESSAGE = 'No updates provided'


class ResourceNotFound(APIException):
    """A referenced order, customer, product or payment does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'

    def __init__(self, resource=None):
        self.resource = resource
        super().__init__(f'{resource} not found' if resource else None)


class InvalidUpdates(APIException):
    """A PATCH carried nothing to update"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = NO_UPDATES_MESSAGE
    default_code = 'INVALID_UPDATES'


class ConstraintViolation(APIException):
    """A write collided with a unique or foreign-key constraint"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with existing data'
    default_code = 'constraint_violation'


def validation_issue_response(code, message, path=None, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY):
    """Schema-validation style error body: one issue with code, path and message"""
    return Response(
        {
            'success': False,
            'error': {
                'name': 'ValidationError',
                'issues': [
                    {
                        'code': code,
                        'path': path or [],
                        'message': message,
                    }
                ],
            },
        },
        status=status_code,
    )


def _view_name(context):
    view = context.get('view')
    return type(view).__name__ if view is not None else None


def crm_exception_handler(exc, context):
    if isinstance(exc, IntegrityError):
        logger.warning(f"Constraint violation in {_view_name(context)}: {exc}")
        exc = ConstraintViolation()

    if isinstance(exc, InvalidUpdates):
        logger.warning(f"Rejected empty update in {_view_name(context)}")
        return validation_issue_response(exc.default_code, str(exc.detail))

    if isinstance(exc, ResourceNotFound):
        logger.warning(f"{exc.detail} ({_view_name(context)})")

    if isinstance(exc, (ResourceNotFound, ConstraintViolation)):
        return Response({'message': str(exc.detail)}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, ValidationError):
        response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return response
