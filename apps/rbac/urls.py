"""
RBAC API URLs.

Provides endpoints for:
- Permission catalog and permission checks
- Venue role management (CRUD, permission bindings)
- User role assignments, permission overrides and resolved permissions
- Audit log viewing
"""
from django.urls import path
from apps.rbac.views import (
    PermissionListView,
    PermissionCheckView,
    RoleListView,
    RoleDetailView,
    RolePermissionsView,
    VenueUserListView,
    UserRoleListView,
    UserRoleRemoveView,
    UserOverrideListView,
    UserOverrideRemoveView,
    UserPermissionsView,
    MyPermissionsView,
    AuditLogListView,
)

app_name = 'rbac'

urlpatterns = [
    # Permission endpoints
    path('permissions', PermissionListView.as_view(), name='permission-list'),
    path('permissions/check', PermissionCheckView.as_view(), name='permission-check'),

    # Role endpoints
    path('roles', RoleListView.as_view(), name='role-list'),
    path('roles/<uuid:role_id>', RoleDetailView.as_view(), name='role-detail'),
    path('roles/<uuid:role_id>/permissions', RolePermissionsView.as_view(), name='role-permissions'),

    # User endpoints
    path('users', VenueUserListView.as_view(), name='user-list'),
    path('users/<uuid:user_id>/roles', UserRoleListView.as_view(), name='user-roles'),
    path('users/<uuid:user_id>/roles/<uuid:role_id>', UserRoleRemoveView.as_view(), name='user-role-remove'),
    path('users/<uuid:user_id>/overrides', UserOverrideListView.as_view(), name='user-overrides'),
    path('users/<uuid:user_id>/overrides/<uuid:permission_id>', UserOverrideRemoveView.as_view(), name='user-override-remove'),
    path('users/<uuid:user_id>/permissions', UserPermissionsView.as_view(), name='user-permissions'),
    path('me/permissions', MyPermissionsView.as_view(), name='my-permissions'),

    # Audit log endpoint
    path('audit-logs', AuditLogListView.as_view(), name='audit-log-list'),
]
