# apps/common/utils.py
from django.http import JsonResponse
from django.conf import settings
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status as http_status
import logging

from .exceptions import ErrorKind, ServiceError

logger = logging.getLogger(__name__)


# Status codes are assigned here, never inside the services.
ERROR_STATUS_CODES = {
    ErrorKind.VALIDATION: http_status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: http_status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: http_status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_LINKED: http_status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_CREDENTIALS: http_status.HTTP_401_UNAUTHORIZED,
    ErrorKind.SELF_SUBSCRIPTION: http_status.HTTP_400_BAD_REQUEST,
    ErrorKind.PROVIDER_CONFLICT: http_status.HTTP_409_CONFLICT,
    ErrorKind.MISSING_EMAIL: http_status.HTTP_400_BAD_REQUEST,
    ErrorKind.PASSWORD_REQUIRED: http_status.HTTP_400_BAD_REQUEST,
}


def service_error_response(exc):
    """Render a ServiceError in the standard error envelope."""
    status_code = ERROR_STATUS_CODES.get(exc.kind, http_status.HTTP_400_BAD_REQUEST)
    data = {
        'error': True,
        'status_code': status_code,
        'code': exc.kind.value,
        'message': exc.message,
    }
    if exc.details:
        data['details'] = exc.details
    return Response(data, status=status_code)


def custom_exception_handler(exc, context):
    """
    Custom exception handler for Django REST Framework.

    Ensures ALL exceptions return JSON responses instead of HTML error pages,
    and translates service error kinds into HTTP status codes.

    Args:
        exc: The exception raised
        context: Context dict with 'view' and 'request'

    Returns:
        Response: JSON response with error details
    """
    if isinstance(exc, ServiceError):
        logger.info(f"{exc.kind.value} in {context.get('view', 'unknown view')}: {exc.message}")
        return service_error_response(exc)

    # Call REST framework's default handler first to get the standard error response
    response = exception_handler(exc, context)

    if response is not None:
        # DRF successfully handled the exception (400, 401, 403, 404, etc.)
        custom_response_data = {
            'error': True,
            'status_code': response.status_code,
        }

        if isinstance(response.data, dict):
            if 'detail' in response.data:
                custom_response_data['message'] = str(response.data['detail'])
                if len(response.data) > 1:
                    custom_response_data['details'] = {
                        k: v for k, v in response.data.items() if k != 'detail'
                    }
            else:
                custom_response_data['code'] = ErrorKind.VALIDATION.value if response.status_code == 400 else None
                custom_response_data['message'] = 'Validation error' if response.status_code == 400 else 'Request failed'
                custom_response_data['details'] = response.data
        elif isinstance(response.data, list):
            custom_response_data['message'] = 'Multiple errors occurred'
            custom_response_data['details'] = response.data
        else:
            custom_response_data['message'] = str(response.data)

        response.data = custom_response_data
        return response

    # Unhandled exceptions (500 errors)
    logger.exception(f"Unhandled exception in {context.get('view', 'unknown view')}: {exc}")

    error_response = {
        'error': True,
        'status_code': 500,
        'message': 'An internal server error occurred.',
    }

    # Include exception details only in DEBUG mode
    if settings.DEBUG:
        error_response['debug'] = {
            'exception_type': exc.__class__.__name__,
            'exception_message': str(exc),
            'view': str(context.get('view', 'Unknown')),
        }
    else:
        error_response['message'] = 'An internal server error occurred. Please contact support.'

    return Response(error_response, status=http_status.HTTP_500_INTERNAL_SERVER_ERROR)


def custom_404(request, exception=None):
    """
    Custom 404 error handler that returns JSON.
    """
    return JsonResponse({
        'error': 'Not Found',
        'message': 'The requested resource was not found.'
    }, status=404)


def custom_500(request):
    """
    Custom 500 error handler that returns JSON.
    """
    return JsonResponse({
        'error': 'Internal Server Error',
        'message': 'An unexpected error occurred on the server.'
    }, status=500)
