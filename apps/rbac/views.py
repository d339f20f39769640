"""
RBAC REST API views.

Implements endpoints for:
- Permission catalog and permission checks
- Venue role management (CRUD, permission bindings)
- User role assignments and permission overrides
- Resolved permissions
- Audit log viewing

Every endpoint runs in the venue selected by the X-VENUE-ID header.
"""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from django.conf import settings
from django.db import transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.core.exceptions import RoleNotFound, ValidationError
from apps.core.permissions import requires_permissions, HasVenuePermissions
from apps.rbac.catalog import PermissionName
from apps.rbac.models import User
from apps.rbac.services import venue_rbac
from apps.rbac.serializers import (
    PermissionSerializer, RoleSerializer, RoleWithPermissionsSerializer,
    RoleCreateSerializer, RoleUpdateSerializer, RolePermissionIdsSerializer,
    UserRoleSerializer, AssignUserRoleSerializer,
    PermissionOverrideSerializer, PermissionOverrideCreateSerializer,
    UserWithRolesSerializer, UserPermissionsDataSerializer,
    PermissionCheckSerializer, AuditLogSerializer,
)

MANAGE_ROLES = PermissionName.ADMIN_MANAGE_ROLES.value
MANAGE_USERS = PermissionName.ADMIN_MANAGE_USERS.value
MANAGE_STAFF_ROLES = PermissionName.STAFF_MANAGE_ROLES.value
VIEW_AUDIT_LOGS = PermissionName.ADMIN_VIEW_AUDIT_LOGS.value


def get_venue_role(request, role_id):
    """Return the role if it belongs to the request's venue, else raise RoleNotFound."""
    role = venue_rbac.get_role(role_id)
    if role is None or role.venue_id != request.venue.id:
        raise RoleNotFound(f"Role {role_id} not found")
    return role


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Permissions'],
        summary='List permissions',
        description='''
List the permission catalog, ordered by category then name.

**No permission required.**

Pass `category` to list one category, ordered by name.
        ''',
        parameters=[
            OpenApiParameter('category', OpenApiTypes.STR, description='Filter by category'),
        ],
        responses={200: PermissionSerializer(many=True)}
    )
)
class PermissionListView(APIView):
    """
    GET /v1/permissions

    List available permissions.
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request):
        category = request.query_params.get('category')
        if category:
            permissions = venue_rbac.list_permissions_by_category(category)
        else:
            permissions = venue_rbac.list_system_permissions()

        serializer = PermissionSerializer(permissions, many=True)
        return Response({
            'count': len(permissions),
            'permissions': serializer.data,
        })


@extend_schema_view(
    post=extend_schema(
        tags=['RBAC - Permissions'],
        summary='Check own permissions',
        description='''
Check whether the caller holds `any` or `all` of the given permissions in the venue.

**No permission required.**
        ''',
        request=PermissionCheckSerializer,
        responses={200: OpenApiTypes.OBJECT}
    )
)
class PermissionCheckView(APIView):
    """
    POST /v1/permissions/check
    """

    permission_classes = [HasVenuePermissions]

    def post(self, request):
        serializer = PermissionCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        names = serializer.validated_data['permissions']
        mode = serializer.validated_data['mode']
        if mode == 'any':
            allowed = venue_rbac.user_has_any_permission(request.venue.id, request.user.id, names)
        else:
            allowed = venue_rbac.user_has_all_permissions(request.venue.id, request.user.id, names)

        return Response({
            'allowed': allowed,
            'mode': mode,
            'permissions': names,
        })


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Roles'],
        summary='List venue roles',
        description='''
List active roles of the venue, highest level first.

**No permission required.**
        ''',
        responses={200: RoleSerializer(many=True)}
    ),
    post=extend_schema(
        tags=['RBAC - Roles'],
        summary='Create role',
        description='''
Create a custom role for the venue.

**Required permission:** `admin.manage_roles`

After creating a role, use `/v1/roles/{id}/permissions` to bind permissions.
        ''',
        request=RoleCreateSerializer,
        responses={
            201: RoleSerializer,
            400: OpenApiTypes.OBJECT,
            403: OpenApiTypes.OBJECT,
        }
    )
)
class RoleListView(APIView):
    """
    GET /v1/roles
    POST /v1/roles (admin.manage_roles)
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request):
        roles = venue_rbac.list_roles(request.venue.id)
        serializer = RoleSerializer(roles, many=True)
        return Response({
            'count': len(roles),
            'roles': serializer.data,
        })

    @requires_permissions(MANAGE_ROLES)
    @transaction.atomic
    def post(self, request):
        serializer = RoleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        role = venue_rbac.create_role(
            {'venue_id': request.venue.id, **serializer.validated_data},
            created_by=request.user,
            request=request,
        )
        return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Roles'],
        summary='Get role with permissions',
        responses={200: RoleWithPermissionsSerializer, 404: OpenApiTypes.OBJECT}
    ),
    patch=extend_schema(
        tags=['RBAC - Roles'],
        summary='Update role',
        description='**Required permission:** `admin.manage_roles`',
        request=RoleUpdateSerializer,
        responses={200: RoleSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    ),
    delete=extend_schema(
        tags=['RBAC - Roles'],
        summary='Delete role',
        description='''
Deactivate a role. Its bindings and assignments remain but no longer grant anything.

**Required permission:** `admin.manage_roles`
        ''',
        responses={204: None, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
)
class RoleDetailView(APIView):
    """
    GET /v1/roles/{id}
    PATCH /v1/roles/{id} (admin.manage_roles)
    DELETE /v1/roles/{id} (admin.manage_roles)
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request, role_id):
        role = get_venue_role(request, role_id)
        role_with_permissions = venue_rbac.get_role_with_permissions(role.id)
        return Response(RoleWithPermissionsSerializer(role_with_permissions).data)

    @requires_permissions(MANAGE_ROLES)
    @transaction.atomic
    def patch(self, request, role_id):
        role = get_venue_role(request, role_id)

        serializer = RoleUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        role = venue_rbac.update_role(
            role.id,
            serializer.validated_data,
            performed_by=request.user,
            request=request,
        )
        return Response(RoleSerializer(role).data)

    @requires_permissions(MANAGE_ROLES)
    @transaction.atomic
    def delete(self, request, role_id):
        role = get_venue_role(request, role_id)
        venue_rbac.delete_role(role.id, performed_by=request.user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    post=extend_schema(
        tags=['RBAC - Roles'],
        summary='Bind permissions to role',
        description='''
Bind permissions to a role. Binding an already bound permission is a no-op
apart from recording the caller as the granter.

**Required permission:** `admin.manage_roles`
        ''',
        request=RolePermissionIdsSerializer,
        responses={200: RoleWithPermissionsSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT}
    ),
    delete=extend_schema(
        tags=['RBAC - Roles'],
        summary='Unbind permissions from role',
        description='**Required permission:** `admin.manage_roles`',
        request=RolePermissionIdsSerializer,
        responses={200: RoleWithPermissionsSerializer, 403: OpenApiTypes.OBJECT}
    )
)
@requires_permissions(MANAGE_ROLES)
class RolePermissionsView(APIView):
    """
    POST /v1/roles/{id}/permissions
    DELETE /v1/roles/{id}/permissions

    Required permission: admin.manage_roles
    """

    permission_classes = [HasVenuePermissions]

    @transaction.atomic
    def post(self, request, role_id):
        role = get_venue_role(request, role_id)

        serializer = RolePermissionIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        venue_rbac.assign_permissions_to_role(
            role.id,
            serializer.validated_data['permission_ids'],
            granted_by=request.user,
            request=request,
        )
        return Response(RoleWithPermissionsSerializer(venue_rbac.get_role_with_permissions(role.id)).data)

    @transaction.atomic
    def delete(self, request, role_id):
        role = get_venue_role(request, role_id)

        serializer = RolePermissionIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        venue_rbac.remove_permissions_from_role(
            role.id,
            serializer.validated_data['permission_ids'],
            removed_by=request.user,
            request=request,
        )
        return Response(RoleWithPermissionsSerializer(venue_rbac.get_role_with_permissions(role.id)).data)


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Users'],
        summary='List venue users',
        description='''
List every user holding an active role in the venue, with their roles and
resolved permissions.

**Required permission:** `staff.manage_roles`
        ''',
        responses={200: UserWithRolesSerializer(many=True), 403: OpenApiTypes.OBJECT}
    )
)
@requires_permissions(MANAGE_STAFF_ROLES)
class VenueUserListView(APIView):
    """
    GET /v1/users

    Required permission: staff.manage_roles
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request):
        users = venue_rbac.get_users_with_roles(request.venue.id)
        serializer = UserWithRolesSerializer(users, many=True)
        return Response({
            'count': len(users),
            'users': serializer.data,
        })


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Users'],
        summary='List user roles',
        responses={200: UserRoleSerializer(many=True)}
    ),
    post=extend_schema(
        tags=['RBAC - Users'],
        summary='Assign role to user',
        description='''
Assign a venue role to a user. Each call creates a new assignment.

**Required permission:** `staff.manage_roles`
        ''',
        request=AssignUserRoleSerializer,
        responses={201: UserRoleSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT}
    )
)
class UserRoleListView(APIView):
    """
    GET /v1/users/{user_id}/roles
    POST /v1/users/{user_id}/roles (staff.manage_roles)
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request, user_id):
        assignments = venue_rbac.get_user_roles(request.venue.id, user_id)
        serializer = UserRoleSerializer(assignments, many=True)
        return Response({
            'count': len(assignments),
            'roles': serializer.data,
        })

    @requires_permissions(MANAGE_STAFF_ROLES)
    @transaction.atomic
    def post(self, request, user_id):
        target_user = get_object_or_404(User, id=user_id, is_active=True)

        serializer = AssignUserRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        get_venue_role(request, serializer.validated_data['role_id'])

        assignment = venue_rbac.assign_user_role(
            {
                'venue_id': request.venue.id,
                'user_id': target_user.id,
                **serializer.validated_data,
            },
            assigned_by=request.user,
            request=request,
        )
        return Response(UserRoleSerializer(assignment).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    delete=extend_schema(
        tags=['RBAC - Users'],
        summary='Remove role from user',
        description='''
Revoke every active assignment of the role to the user.

**Required permission:** `staff.manage_roles`
        ''',
        responses={204: None, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
)
@requires_permissions(MANAGE_STAFF_ROLES)
class UserRoleRemoveView(APIView):
    """
    DELETE /v1/users/{user_id}/roles/{role_id}

    Required permission: staff.manage_roles
    """

    permission_classes = [HasVenuePermissions]

    @transaction.atomic
    def delete(self, request, user_id, role_id):
        revoked = venue_rbac.remove_user_role(
            request.venue.id,
            user_id,
            role_id,
            removed_by=request.user,
            request=request,
        )

        if not revoked:
            return Response(
                {'error': 'User does not have this role'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Users'],
        summary='List user permission overrides',
        description='Overrides that have not expired.',
        responses={200: PermissionOverrideSerializer(many=True)}
    ),
    post=extend_schema(
        tags=['RBAC - Users'],
        summary='Grant or deny permission',
        description='''
Write the user's override for one permission. A live override decides that
permission regardless of roles.

**Required permission:** `admin.manage_users`
        ''',
        request=PermissionOverrideCreateSerializer,
        responses={200: PermissionOverrideSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT}
    )
)
class UserOverrideListView(APIView):
    """
    GET /v1/users/{user_id}/overrides
    POST /v1/users/{user_id}/overrides (admin.manage_users)
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request, user_id):
        overrides = venue_rbac.get_user_permission_overrides(request.venue.id, user_id)
        serializer = PermissionOverrideSerializer(overrides, many=True)
        return Response({
            'count': len(overrides),
            'overrides': serializer.data,
        })

    @requires_permissions(MANAGE_USERS)
    @transaction.atomic
    def post(self, request, user_id):
        target_user = get_object_or_404(User, id=user_id)

        serializer = PermissionOverrideCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        override = venue_rbac.grant_permission_override(
            {
                'venue_id': request.venue.id,
                'user_id': target_user.id,
                **serializer.validated_data,
            },
            granted_by=request.user,
            request=request,
        )
        return Response(PermissionOverrideSerializer(override).data)


@extend_schema_view(
    delete=extend_schema(
        tags=['RBAC - Users'],
        summary='Remove permission override',
        description='**Required permission:** `admin.manage_users`',
        responses={204: None, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
)
@requires_permissions(MANAGE_USERS)
class UserOverrideRemoveView(APIView):
    """
    DELETE /v1/users/{user_id}/overrides/{permission_id}

    Required permission: admin.manage_users
    """

    permission_classes = [HasVenuePermissions]

    @transaction.atomic
    def delete(self, request, user_id, permission_id):
        removed = venue_rbac.remove_permission_override(
            request.venue.id,
            user_id,
            permission_id,
            removed_by=request.user,
            request=request,
        )

        if not removed:
            return Response(
                {'error': 'Override not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Users'],
        summary='Get user permissions',
        description='''
Resolved permissions of a user together with their role assignments and
live overrides.

**Required permission:** `admin.manage_users`, unless the caller asks about themselves.
        ''',
        responses={200: UserPermissionsDataSerializer, 403: OpenApiTypes.OBJECT}
    )
)
class UserPermissionsView(APIView):
    """
    GET /v1/users/{user_id}/permissions
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request, user_id):
        if user_id != request.user.id and MANAGE_USERS not in request.venue_permissions:
            self.permission_denied(
                request,
                message="You can only view your own permissions without admin.manage_users"
            )

        data = venue_rbac.get_user_permissions_data(request.venue.id, user_id)
        return Response(UserPermissionsDataSerializer(data).data)


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Users'],
        summary='Get my permissions',
        responses={200: UserPermissionsDataSerializer}
    )
)
class MyPermissionsView(APIView):
    """
    GET /v1/me/permissions
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request):
        data = venue_rbac.get_user_permissions_data(request.venue.id, request.user.id)
        return Response(UserPermissionsDataSerializer(data).data)


@extend_schema_view(
    get=extend_schema(
        tags=['RBAC - Audit'],
        summary='List permission audit log',
        description='''
Most recent permission changes in the venue, newest first.

**Required permission:** `admin.view_audit_logs`
        ''',
        parameters=[
            OpenApiParameter('limit', OpenApiTypes.INT, description='Maximum number of entries'),
        ],
        responses={200: AuditLogSerializer(many=True), 403: OpenApiTypes.OBJECT}
    )
)
@requires_permissions(VIEW_AUDIT_LOGS)
class AuditLogListView(APIView):
    """
    GET /v1/audit-logs

    Required permission: admin.view_audit_logs
    """

    permission_classes = [HasVenuePermissions]

    def get(self, request):
        default_limit = getattr(settings, 'RBAC_AUDIT_LOG_DEFAULT_LIMIT', 100)
        max_limit = getattr(settings, 'RBAC_AUDIT_LOG_MAX_LIMIT', 500)

        try:
            limit = int(request.query_params.get('limit', default_limit))
        except ValueError:
            raise ValidationError("limit must be an integer")
        if limit < 1:
            raise ValidationError("limit must be positive")

        entries = venue_rbac.get_audit_log(request.venue.id, limit=min(limit, max_limit))
        serializer = AuditLogSerializer(entries, many=True)
        return Response({
            'count': len(entries),
            'audit_logs': serializer.data,
        })
