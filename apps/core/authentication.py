"""
Custom DRF authentication classes.
"""
from rest_framework.authentication import BaseAuthentication


class MiddlewareAuthentication(BaseAuthentication):
    """
    DRF authentication class that uses the user set by VenueContextMiddleware.

    The middleware decodes the bearer token and sets request.user; this class
    simply hands that user to DRF.
    """

    def authenticate(self, request):
        """
        Return the user from the middleware if present.

        Returns:
            tuple: (user, None) if user is authenticated, None otherwise
        """
        django_request = request._request

        user = getattr(django_request, 'user', None)
        if user is not None and user.is_authenticated:
            return (user, None)

        return None

    def authenticate_header(self, request):
        """Make unauthenticated requests answer 401 rather than 403."""
        return 'Bearer'
