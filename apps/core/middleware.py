"""
Core middleware for request processing.
"""
import threading
import uuid
import logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

_request_context = threading.local()


class RequestIDMiddleware(MiddlewareMixin):
    """
    Inject a unique request_id into each request for tracing.
    The request_id is added to the request object and to log records.
    """

    def process_request(self, request):
        """Generate and attach request_id to the request."""
        request_id = request.META.get('HTTP_X_REQUEST_ID') or str(uuid.uuid4())
        request.request_id = request_id
        _request_context.request_id = request_id
        _request_context.venue_id = None

    def process_response(self, request, response):
        """Add request_id to response headers."""
        if hasattr(request, 'request_id'):
            response['X-Request-ID'] = request.request_id
        _request_context.request_id = None
        _request_context.venue_id = None
        return response


def set_log_venue(venue_id):
    """Tag log records emitted for the rest of this request with a venue id."""
    _request_context.venue_id = str(venue_id) if venue_id else None


class LoggingFilter(logging.Filter):
    """
    Add request_id and venue_id to log records from thread-local storage.
    """

    def filter(self, record):
        if not getattr(record, 'request_id', None):
            record.request_id = getattr(_request_context, 'request_id', None)
        if not getattr(record, 'venue_id', None):
            record.venue_id = getattr(_request_context, 'venue_id', None)
        return True
