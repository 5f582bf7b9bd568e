"""
DRF exception handler.

Renders service errors as ``{"error": code, "message": message}`` with the
status code the error class declares. DRF's own exceptions (validation,
authentication, permission, 404) are rendered in the same shape.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ServiceError

logger = logging.getLogger(__name__)

API_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: 'UNAUTHORIZED',
    status.HTTP_403_FORBIDDEN: 'FORBIDDEN',
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
    status.HTTP_429_TOO_MANY_REQUESTS: 'THROTTLED',
}


def _first_message(detail):
    """Dig the first human-readable message out of a DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    return str(detail)


def service_exception_handler(exc, context):
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, ServiceError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(level, "%s failed in %s: %s", exc.code, view_name, exc.message)
        return Response(exc.as_dict(), status=exc.status_code)

    if isinstance(exc, ValidationError):
        logger.info("Validation failed in %s: %s", view_name, exc.detail)
        return Response(
            {
                'error': 'VALIDATION_ERROR',
                'message': _first_message(exc.detail),
                'details': exc.detail,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {
            'error': API_ERROR_CODES.get(response.status_code, 'ERROR'),
            'message': str(response.data['detail']),
        }
    return response
