"""
DRF permission classes and decorators for venue permission enforcement.

This module provides:
- HasVenuePermissions: DRF permission class that enforces permission requirements
- @requires_permissions: Decorator to declare required permissions on views
"""
import logging
from functools import wraps
from rest_framework.permissions import BasePermission

from apps.core.logging import SecurityLogger

logger = logging.getLogger(__name__)


class HasVenuePermissions(BasePermission):
    """
    DRF permission class that enforces venue permission requirements.

    This permission class:
    1. Checks if view has a required_permissions attribute
    2. Verifies all of them are in request.venue_permissions
    3. Returns 403 if any is missing
    4. Implements has_object_permission to verify the object belongs to request.venue

    request.venue_permissions is resolved by VenueContextMiddleware and is an
    empty set whenever resolution failed, so a broken lookup denies access.

    Usage in views:
        @requires_permissions('admin.manage_roles')
        class RoleCreateView(APIView):
            permission_classes = [HasVenuePermissions]
    """

    def has_permission(self, request, view):
        """
        Check if request has all required permissions for the view.

        Args:
            request: DRF request object with venue_permissions attribute
            view: DRF view instance with optional required_permissions attribute

        Returns:
            bool: True if all required permissions are present, False otherwise
        """
        required = getattr(view, 'required_permissions', None)

        if not required:
            return True

        if isinstance(required, str):
            required = {required}
        else:
            required = set(required)

        venue = getattr(request, 'venue', None)
        if venue is None:
            logger.warning(
                "Permission denied: no venue context",
                extra={
                    'view': view.__class__.__name__,
                    'path': request.path,
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            return False

        granted = getattr(request, 'venue_permissions', None) or set()
        missing = required - set(granted)

        if missing:
            user = getattr(request, 'user', None)
            logger.warning(
                f"Permission denied: missing {sorted(missing)}",
                extra={
                    'user_id': str(user.id) if getattr(user, 'id', None) else None,
                    'venue_id': str(venue.id),
                    'required_permissions': sorted(required),
                    'missing_permissions': sorted(missing),
                    'view': view.__class__.__name__,
                    'method': request.method,
                    'path': request.path,
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            SecurityLogger.log_permission_denied(
                user=user,
                venue=venue,
                required_permissions=missing,
                ip_address=request.META.get('REMOTE_ADDR'),
            )
            return False

        return True

    def has_object_permission(self, request, view, obj):
        """
        Verify that the object belongs to the request's venue.

        Objects without a venue attribute (permissions, users) are global and
        pass through once the permission check has succeeded.
        """
        request_venue = getattr(request, 'venue', None)
        if request_venue is None:
            return False

        object_venue_id = getattr(obj, 'venue_id', None)
        if object_venue_id is None:
            return True

        if object_venue_id != request_venue.id:
            logger.warning(
                "Object permission denied: object belongs to a different venue",
                extra={
                    'request_venue_id': str(request_venue.id),
                    'object_venue_id': str(object_venue_id),
                    'object_type': obj.__class__.__name__,
                    'object_id': str(getattr(obj, 'id', '')),
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            return False

        return True


def requires_permissions(*permission_names):
    """
    Decorator to declare required venue permissions on view classes or methods.

    Sets the required_permissions attribute checked by HasVenuePermissions.

    Usage:
        @requires_permissions('admin.view_audit_logs')
        class AuditLogListView(APIView):
            permission_classes = [HasVenuePermissions]

    Or on individual methods:
        class RoleDetailView(APIView):
            permission_classes = [HasVenuePermissions]

            @requires_permissions('admin.manage_roles')
            def patch(self, request, role_id):
                pass

    Method-level declarations are evaluated inside the handler, after DRF's
    initial() has already run the permission classes, so the wrapper performs
    the check itself.
    """
    def decorator(view_or_method):
        if isinstance(view_or_method, type):
            view_or_method.required_permissions = set(permission_names)
            return view_or_method

        @wraps(view_or_method)
        def wrapped(self, request, *args, **kwargs):
            self.required_permissions = set(permission_names)
            for permission in self.get_permissions():
                if not permission.has_permission(request, self):
                    self.permission_denied(
                        request,
                        message=getattr(permission, 'message', None),
                        code=getattr(permission, 'code', None)
                    )
            return view_or_method(self, request, *args, **kwargs)

        wrapped.required_permissions = set(permission_names)
        return wrapped

    return decorator
