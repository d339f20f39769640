"""
Custom exception handlers for DRF and the VenueHub exception hierarchy.
"""
import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that logs errors and returns consistent format.

    VenueHub exceptions are mapped to their ``status_code`` with a
    ``{"error": {"code", "message", "details"}}`` body. Everything else goes
    through DRF's default handler, and anything DRF cannot handle becomes a
    generic 500.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, VenueHubException):
        status_code = getattr(exc, 'status_code', status.HTTP_500_INTERNAL_SERVER_ERROR)
        log_method = logger.error if status_code >= 500 else logger.warning
        log_method(
            f"API Exception: {exc.__class__.__name__}",
            extra={
                'exception': exc.message,
                'request_id': request_id,
                'path': request.path if request else None,
                'method': request.method if request else None,
            },
            exc_info=status_code >= 500
        )
        return Response(
            {
                'error': {
                    'code': exc.code,
                    'message': exc.message,
                    'details': exc.details,
                },
                'request_id': request_id,
            },
            status=status_code
        )

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    logger.error(
        f"API Exception: {exc.__class__.__name__}",
        extra={
            'exception': str(exc),
            'request_id': request_id,
            'path': request.path if request else None,
            'method': request.method if request else None,
        },
        exc_info=response is None
    )

    # If DRF didn't handle it, return a generic 500 error
    if response is None:
        return Response(
            {
                'error': 'Internal server error',
                'detail': 'An unexpected error occurred',
                'request_id': request_id,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    # Add request_id to all error responses
    if request_id and isinstance(response.data, dict):
        response.data['request_id'] = request_id

    return response


class VenueHubException(Exception):
    """Base exception for VenueHub-specific errors."""

    status_code = 500
    code = 'ERROR'

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ServiceError(VenueHubException):
    """
    Raised when a store operation fails.

    Carries a human-readable message such as "Failed to fetch venue roles";
    the underlying database error is chained as ``__cause__``.
    """
    code = 'OPERATION_FAILED'


class VenueNotFound(VenueHubException):
    """Raised when venue cannot be resolved."""
    status_code = 404
    code = 'VENUE_NOT_FOUND'


class RoleNotFound(VenueHubException):
    """Raised when a role id does not match any role."""
    status_code = 404
    code = 'ROLE_NOT_FOUND'


class AuthenticationError(VenueHubException):
    """Raised when authentication fails."""
    status_code = 401
    code = 'UNAUTHORIZED'


class PermissionDeniedError(VenueHubException):
    """Raised when user lacks required permissions."""
    status_code = 403
    code = 'FORBIDDEN'


class ValidationError(VenueHubException):
    """Raised when input validation fails."""
    status_code = 400
    code = 'VALIDATION_ERROR'
