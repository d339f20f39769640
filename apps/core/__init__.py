# Export venue permission classes and decorators for easy importing
from apps.core.permissions import HasVenuePermissions, requires_permissions

__all__ = ['HasVenuePermissions', 'requires_permissions']
