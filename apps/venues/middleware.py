"""
Venue context middleware for venue-scoped authorization.

Authenticates the bearer token, resolves the venue named by the
X-VENUE-ID header and attaches the caller's resolved venue permissions.
"""
import logging
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from apps.core.logging import SecurityLogger
from apps.core.middleware import set_log_venue
from .models import Venue

logger = logging.getLogger(__name__)


class VenueContextMiddleware(MiddlewareMixin):
    """
    Extract and validate venue context from request headers.

    This middleware:
    1. Decodes the Authorization: Bearer <JWT> header into request.user
    2. Resolves X-VENUE-ID (UUID or slug) into request.venue
    3. Rejects callers holding no live role in the venue (superusers excepted)
    4. Attaches request.venue_permissions, the caller's resolved permission names

    A failure while resolving permissions leaves request.venue_permissions
    empty so every permission-gated view denies access.

    Public endpoints (health checks, schema, admin) bypass authentication.
    """

    # Paths that don't require venue authentication
    PUBLIC_PATHS = [
        '/v1/health',
        '/schema',
        '/admin/',
    ]

    def process_request(self, request):
        request.venue = None
        request.venue_permissions = set()

        if self._is_public_path(request.path):
            return None

        request_id = getattr(request, 'request_id', None)

        # Authenticate bearer token
        token = self._get_bearer_token(request)
        if not token:
            return self._error_response(
                'MISSING_CREDENTIALS',
                'Authorization: Bearer <token> header is required',
                status=401
            )

        from apps.rbac.services import AuthService

        user = AuthService.get_user_from_jwt(token)
        if user is None:
            SecurityLogger.log_invalid_token(
                reason='invalid_or_expired',
                ip_address=request.META.get('REMOTE_ADDR'),
                path=request.path,
            )
            return self._error_response(
                'INVALID_TOKEN',
                'Invalid or expired token',
                status=401
            )
        request.user = user

        # Resolve venue
        venue_identifier = request.headers.get('X-VENUE-ID')
        if not venue_identifier:
            return self._error_response(
                'MISSING_VENUE',
                'X-VENUE-ID header is required',
                status=400
            )

        venue = Venue.objects.resolve(venue_identifier)
        if venue is None:
            logger.warning(
                f"Unknown venue: {venue_identifier}",
                extra={'request_id': request_id}
            )
            return self._error_response(
                'VENUE_NOT_FOUND',
                'Venue not found',
                status=404
            )

        if not venue.is_active():
            logger.info(
                f"Inactive venue attempted access: {venue.id}",
                extra={'request_id': request_id}
            )
            return self._error_response(
                'VENUE_INACTIVE',
                'This venue is not active',
                status=403,
                details={'status': venue.status}
            )

        request.venue = venue
        set_log_venue(venue.id)

        from apps.rbac.models import VenueUserRole
        from apps.rbac.services import venue_rbac

        try:
            is_member = user.is_superuser or VenueUserRole.objects.for_user(venue.id, user.id).active().exists()
            if not is_member:
                logger.warning(
                    "User attempted access to venue without a role",
                    extra={
                        'request_id': request_id,
                        'venue_id': str(venue.id),
                        'user_id': str(user.id),
                    }
                )
                return self._error_response(
                    'FORBIDDEN',
                    'You do not have access to this venue',
                    status=403
                )

            request.venue_permissions = set(venue_rbac.get_user_permissions(venue.id, user.id))

            logger.debug(
                f"Venue context set with {len(request.venue_permissions)} permissions",
                extra={
                    'request_id': request_id,
                    'venue_id': str(venue.id),
                    'user_id': str(user.id),
                }
            )
        except Exception as e:
            logger.error(
                f"Error resolving venue permissions: {e}",
                extra={'request_id': request_id, 'venue_id': str(venue.id)},
                exc_info=True
            )
            request.venue_permissions = set()

        return None

    def _is_public_path(self, path):
        """Check if path is public and doesn't require authentication."""
        return any(path.startswith(public_path) for public_path in self.PUBLIC_PATHS)

    def _get_bearer_token(self, request):
        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return None
        return auth_header[len('Bearer '):].strip() or None

    def _error_response(self, code, message, status=400, details=None):
        """Generate standardized error response."""
        error_data = {
            'error': {
                'code': code,
                'message': message,
            }
        }

        if details:
            error_data['error']['details'] = details

        return JsonResponse(error_data, status=status)
