"""
RBAC serializers for REST API endpoints.

Provides serialization for:
- Users
- Permissions
- Venue roles and role-permission bindings
- User role assignments and permission overrides
- Resolved permission projections
- Audit logs
"""
from rest_framework import serializers
from apps.rbac.models import (
    User, VenuePermission, VenueRole, VenueUserRole,
    VenueUserPermissionOverride, VenuePermissionAuditLog
)


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model."""

    full_name = serializers.CharField(source='get_full_name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'is_active', 'last_login_at', 'created_at'
        ]
        read_only_fields = fields


class PermissionSerializer(serializers.ModelSerializer):
    """Serializer for VenuePermission model."""

    class Meta:
        model = VenuePermission
        fields = [
            'id', 'name', 'description', 'category', 'is_system_permission',
        ]
        read_only_fields = fields


class RoleSerializer(serializers.ModelSerializer):
    """Serializer for VenueRole model."""

    venue_id = serializers.UUIDField(read_only=True)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, default=None)

    class Meta:
        model = VenueRole
        fields = [
            'id', 'venue_id', 'name', 'description', 'level',
            'is_system_role', 'is_active', 'created_by_email',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class RoleWithPermissionsSerializer(serializers.Serializer):
    """Serializer for a role together with its bound permissions."""

    role = RoleSerializer(read_only=True)
    permissions = PermissionSerializer(many=True, read_only=True)


class RoleCreateSerializer(serializers.Serializer):
    """Serializer for creating roles."""

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)
    level = serializers.IntegerField(min_value=1, default=1)

    def validate_name(self, value):
        """Validate role name is not blank."""
        if not value.strip():
            raise serializers.ValidationError("Role name cannot be empty.")
        return value.strip()


class RoleUpdateSerializer(serializers.Serializer):
    """Serializer for partial role updates."""

    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    level = serializers.IntegerField(min_value=1, required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field must be provided.")
        return attrs


class RolePermissionIdsSerializer(serializers.Serializer):
    """Serializer for binding or unbinding permissions on a role."""

    permission_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=True,
        allow_empty=False,
        help_text="List of permission IDs"
    )


class UserRoleSerializer(serializers.ModelSerializer):
    """Serializer for VenueUserRole (role assignments)."""

    role = RoleSerializer(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    assigned_by_email = serializers.EmailField(source='assigned_by.email', read_only=True, default=None)

    class Meta:
        model = VenueUserRole
        fields = [
            'id', 'user_id', 'role', 'assigned_by_email', 'assigned_at',
            'expires_at', 'is_active', 'notes'
        ]
        read_only_fields = fields


class AssignUserRoleSerializer(serializers.Serializer):
    """Serializer for assigning a role to a user."""

    role_id = serializers.UUIDField(required=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PermissionOverrideSerializer(serializers.ModelSerializer):
    """Serializer for VenueUserPermissionOverride."""

    permission = PermissionSerializer(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    granted_by_email = serializers.EmailField(source='granted_by.email', read_only=True, default=None)

    class Meta:
        model = VenueUserPermissionOverride
        fields = [
            'id', 'user_id', 'permission', 'is_granted', 'reason',
            'expires_at', 'granted_by_email', 'granted_at'
        ]
        read_only_fields = fields


class PermissionOverrideCreateSerializer(serializers.Serializer):
    """Serializer for granting or denying a permission to a user."""

    permission_id = serializers.UUIDField(required=True)
    is_granted = serializers.BooleanField(required=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    reason = serializers.CharField(
        required=False,
        allow_blank=True,
        help_text="Reason for this permission override"
    )


class UserWithRolesSerializer(serializers.Serializer):
    """Serializer for a venue user with roles and resolved permissions."""

    user_id = serializers.UUIDField()
    roles = UserRoleSerializer(many=True)
    permissions = serializers.ListField(child=serializers.CharField())


class UserPermissionsDataSerializer(serializers.Serializer):
    """Serializer for resolved permissions with their sources."""

    permissions = serializers.ListField(child=serializers.CharField())
    role_assignments = UserRoleSerializer(many=True)
    permission_overrides = PermissionOverrideSerializer(many=True)


class PermissionCheckSerializer(serializers.Serializer):
    """Serializer for checking the caller's permissions."""

    MODE_CHOICES = [('any', 'Any'), ('all', 'All')]

    permissions = serializers.ListField(
        child=serializers.CharField(),
        allow_empty=False,
        help_text="Permission names to check"
    )
    mode = serializers.ChoiceField(choices=MODE_CHOICES, default='all')


class AuditLogSerializer(serializers.ModelSerializer):
    """Serializer for VenuePermissionAuditLog model."""

    performed_by_email = serializers.EmailField(source='performed_by.email', read_only=True, default=None)
    target_user_id = serializers.UUIDField(read_only=True)
    role_id = serializers.UUIDField(read_only=True)
    permission_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = VenuePermissionAuditLog
        fields = [
            'id', 'action_type', 'performed_by_email', 'target_user_id',
            'role_id', 'permission_id', 'details', 'ip_address',
            'user_agent', 'request_id', 'performed_at'
        ]
        read_only_fields = fields
