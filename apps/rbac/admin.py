"""
Django admin configuration for RBAC app.
"""
from django.contrib import admin
from .models import (
    User,
    VenuePermission,
    VenueRole,
    VenueRolePermission,
    VenueUserRole,
    VenueUserPermissionOverride,
    VenuePermissionAuditLog,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin for the email-based User model."""
    list_display = ['email', 'first_name', 'last_name', 'is_active', 'is_superuser', 'created_at']
    list_filter = ['is_active', 'is_superuser', 'created_at']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['-created_at']
    exclude = ['password_hash']
    readonly_fields = ['created_at', 'updated_at', 'last_login_at']


@admin.register(VenuePermission)
class VenuePermissionAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'is_system_permission']
    list_filter = ['category', 'is_system_permission']
    search_fields = ['name', 'description']
    ordering = ['category', 'name']


class VenueRolePermissionInline(admin.TabularInline):
    model = VenueRolePermission
    extra = 0
    autocomplete_fields = ['permission']
    readonly_fields = ['granted_by', 'granted_at']


@admin.register(VenueRole)
class VenueRoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'venue', 'level', 'is_system_role', 'is_active', 'created_at']
    list_filter = ['is_system_role', 'is_active', 'level']
    search_fields = ['name', 'venue__name', 'venue__slug']
    inlines = [VenueRolePermissionInline]


@admin.register(VenueUserRole)
class VenueUserRoleAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'venue', 'is_active', 'assigned_at', 'expires_at']
    list_filter = ['is_active', 'assigned_at']
    search_fields = ['user__email', 'role__name', 'venue__slug']
    raw_id_fields = ['user', 'role', 'assigned_by']


@admin.register(VenueUserPermissionOverride)
class VenueUserPermissionOverrideAdmin(admin.ModelAdmin):
    list_display = ['user', 'permission', 'venue', 'is_granted', 'expires_at', 'granted_at']
    list_filter = ['is_granted']
    search_fields = ['user__email', 'permission__name', 'venue__slug']
    raw_id_fields = ['user', 'permission', 'granted_by']


@admin.register(VenuePermissionAuditLog)
class VenuePermissionAuditLogAdmin(admin.ModelAdmin):
    """Read-only view of the permission audit trail."""
    list_display = ['performed_at', 'venue', 'action_type', 'performed_by', 'target_user']
    list_filter = ['action_type', 'performed_at']
    search_fields = ['venue__slug', 'performed_by__email', 'target_user__email', 'request_id']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
