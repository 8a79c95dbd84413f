"""
Error codes and the REST framework exception handler.

Every error response produced by the API has the same shape:

    {"error_code": "ERR_...", "message": "...", "errors": {...}?}
"""

import logging
from enum import Enum

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Error codes for API responses."""
    SUCCESS = "SUCCESS"
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_PROJECT_HAS_TASKS = "ERR_PROJECT_HAS_TASKS"
    ERR_TIMER_NOT_RUNNING = "ERR_TIMER_NOT_RUNNING"
    ERR_AUTHENTICATION = "ERR_AUTHENTICATION"
    ERR_PERMISSION = "ERR_PERMISSION"
    ERR_RATE_LIMITED = "ERR_RATE_LIMITED"
    ERR_AI_UNAVAILABLE = "ERR_AI_UNAVAILABLE"
    ERR_SERVER = "ERR_SERVER"


def error_response(code: ErrorCode, message: str, http_status: int, **extra) -> Response:
    """Build an error response in the API's standard shape."""
    data = {
        'error_code': code.value,
        'message': message,
    }
    data.update(extra)
    return Response(data, status=http_status)


def api_exception_handler(exc, context):
    """
    Reshape framework errors into the standard error envelope.

    Exceptions the framework does not know about are logged and reported
    as a generic server error.
    """
    if isinstance(exc, exceptions.NotAuthenticated):
        response = exception_handler(exc, context)
        response.data = {
            'error_code': ErrorCode.ERR_AUTHENTICATION.value,
            'message': 'Access token required',
        }
        return response

    response = exception_handler(exc, context)

    if response is None:
        request = context.get('request')
        logger.exception(
            "Unhandled error in %s %s",
            getattr(request, 'method', '?'),
            getattr(request, 'path', '?')
        )
        return error_response(
            ErrorCode.ERR_SERVER,
            'Internal server error',
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            'error_code': ErrorCode.ERR_VALIDATION.value,
            'message': 'Invalid input data',
            'errors': response.data,
        }
        return response

    if isinstance(exc, exceptions.AuthenticationFailed):
        code = ErrorCode.ERR_AUTHENTICATION
    elif isinstance(exc, (exceptions.PermissionDenied, PermissionDenied)):
        code = ErrorCode.ERR_PERMISSION
    elif isinstance(exc, (exceptions.NotFound, Http404)):
        code = ErrorCode.ERR_NOT_FOUND
    elif isinstance(exc, exceptions.Throttled):
        code = ErrorCode.ERR_RATE_LIMITED
    else:
        code = ErrorCode.ERR_SERVER if response.status_code >= 500 else ErrorCode.ERR_VALIDATION

    detail = response.data.get('detail', '') if isinstance(response.data, dict) else response.data
    response.data = {
        'error_code': code.value,
        'message': str(detail),
    }
    return response
