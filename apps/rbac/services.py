"""
RBAC and Authentication services.

Implements:
- VenueRolesPermissionsService: permission catalog, venue roles, role
  bindings, user role assignments, permission overrides, permission
  resolution and the permission audit trail
- AuthService: JWT issue and validation for the API boundary
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.exceptions import RoleNotFound, ServiceError, ValidationError, VenueNotFound
from apps.rbac.catalog import (
    PERMISSION_DESCRIPTIONS, SYSTEM_ROLES, PermissionName, permissions_for_system_role,
)
from apps.rbac.models import (
    User, VenuePermission, VenueRole, VenueRolePermission, VenueUserRole,
    VenueUserPermissionOverride, VenuePermissionAuditLog,
)
from apps.venues.models import Venue

logger = logging.getLogger(__name__)


@dataclass
class RoleWithPermissions:
    role: VenueRole
    permissions: List[VenuePermission] = field(default_factory=list)


@dataclass
class UserWithRoles:
    user_id: Any
    roles: List[VenueUserRole] = field(default_factory=list)
    permissions: List[str] = field(default_factory=list)


@dataclass
class UserPermissionsData:
    permissions: List[str] = field(default_factory=list)
    role_assignments: List[VenueUserRole] = field(default_factory=list)
    permission_overrides: List[VenueUserPermissionOverride] = field(default_factory=list)


def resolve_permission_names(role_derived: Iterable[str],
                             overrides: Iterable[Tuple[str, bool]]) -> Set[str]:
    """
    Apply override precedence to a role-derived permission set.

    Args:
        role_derived: Permission names conferred by the user's live roles
        overrides: (permission name, is_granted) pairs, already filtered for expiry

    Returns:
        Set of permission names: (role_derived | granted) - denied
    """
    permissions = set(role_derived)
    for name, is_granted in overrides:
        if is_granted:
            permissions.add(name)
        else:
            permissions.discard(name)
    return permissions


@contextmanager
def store_operation(message, **context):
    """Re-raise database errors as ServiceError carrying ``message``."""
    try:
        yield
    except DatabaseError as e:
        logger.error(message, extra={k: str(v) for k, v in context.items()}, exc_info=True)
        raise ServiceError(message) from e


class VenueRolesPermissionsService:
    """
    Service for venue RBAC operations.

    Stateless apart from its injected configuration: ``using`` is the
    database alias every query runs against and ``clock`` supplies the
    current time for expiry checks.

    Read operations return None or an empty list for absent rows. Database
    failures surface as ServiceError, except in user_has_permission which
    answers False. Audit writes never raise.
    """

    ROLE_CREATE_FIELDS = {'venue_id', 'name', 'description', 'level', 'is_system_role', 'is_active'}
    ROLE_UPDATE_FIELDS = {'name', 'description', 'level', 'is_system_role', 'is_active'}
    USER_ROLE_FIELDS = {'venue_id', 'user_id', 'role_id', 'expires_at', 'notes'}
    OVERRIDE_FIELDS = {'venue_id', 'user_id', 'permission_id', 'is_granted', 'expires_at', 'reason'}

    def __init__(self, using='default', clock=timezone.now):
        self.using = using
        self.clock = clock

    # Permission catalog

    def list_system_permissions(self) -> List[VenuePermission]:
        """System permissions ordered by category then name."""
        with store_operation("Failed to fetch permissions"):
            return list(VenuePermission.objects.db_manager(self.using).system())

    def list_permissions_by_category(self, category: str) -> List[VenuePermission]:
        """Permissions in ``category`` ordered by name."""
        with store_operation("Failed to fetch permissions", category=category):
            return list(VenuePermission.objects.db_manager(self.using).by_category(category))

    def get_system_role_permissions(self, role_name: str) -> List[str]:
        """Default permission names of a system role (empty for unknown names)."""
        return permissions_for_system_role(role_name)

    def sync_permission_catalog(self) -> Tuple[int, int]:
        """
        Create or refresh every catalog permission.

        Returns:
            (created, updated) counts
        """
        created_count = 0
        updated_count = 0
        with store_operation("Failed to seed permissions"), transaction.atomic(using=self.using):
            for permission_name in PermissionName:
                permission, created = VenuePermission.objects.db_manager(self.using).get_or_create(
                    name=permission_name.value,
                    defaults={
                        'description': PERMISSION_DESCRIPTIONS.get(permission_name, permission_name.label),
                        'category': permission_name.category.value,
                        'is_system_permission': True,
                    }
                )
                if created:
                    created_count += 1
                    continue

                description = PERMISSION_DESCRIPTIONS.get(permission_name, permission_name.label)
                if (permission.description != description
                        or permission.category != permission_name.category.value
                        or not permission.is_system_permission):
                    permission.description = description
                    permission.category = permission_name.category.value
                    permission.is_system_permission = True
                    permission.save(using=self.using)
                    updated_count += 1

        return created_count, updated_count

    # Roles

    def list_roles(self, venue_id) -> List[VenueRole]:
        """Active roles of a venue, highest level first then by name."""
        with store_operation("Failed to fetch venue roles", venue_id=venue_id):
            return list(VenueRole.objects.db_manager(self.using).for_venue(venue_id))

    def get_role(self, role_id) -> Optional[VenueRole]:
        """Return the role or None; inactive roles are returned too."""
        with store_operation("Failed to fetch role", role_id=role_id):
            return self._find_role(role_id)

    def create_role(self, data: Dict[str, Any], created_by: Optional[User] = None,
                    request=None) -> VenueRole:
        """
        Create a role scoped to ``data['venue_id']``.

        Args:
            data: venue_id, name and optionally description, level,
                is_system_role, is_active
            created_by: User creating the role
            request: Django request for audit context

        Returns:
            Created VenueRole
        """
        unknown = set(data) - self.ROLE_CREATE_FIELDS
        if unknown:
            raise ValidationError(
                "Unknown role fields",
                details={'fields': sorted(unknown)}
            )
        if not data.get('venue_id') or not data.get('name'):
            raise ValidationError("venue_id and name are required")
        self._validate_level(data.get('level', 1))

        with store_operation("Failed to create role", venue_id=data['venue_id']):
            if not Venue.objects.using(self.using).filter(id=data['venue_id']).exists():
                raise VenueNotFound(f"Venue {data['venue_id']} not found")
            with transaction.atomic(using=self.using):
                role = VenueRole(created_by=created_by, **data)
                role.save(using=self.using)

        logger.info(
            f"Created role {role.name}",
            extra={'venue_id': str(role.venue_id), 'role_id': str(role.id)}
        )
        self.log_permission_change(
            role.venue_id,
            VenuePermissionAuditLog.ACTION_ROLE_CREATED,
            role_id=role.id,
            details={'name': role.name, 'level': role.level},
            performed_by=created_by,
            request=request,
        )
        return role

    def update_role(self, role_id, patch: Dict[str, Any], performed_by: Optional[User] = None,
                    request=None) -> VenueRole:
        """
        Partially update a role; the owning venue cannot change.

        Raises:
            RoleNotFound: No role has ``role_id``
            ValidationError: ``patch`` carries fields that cannot be updated
        """
        unknown = set(patch) - self.ROLE_UPDATE_FIELDS
        if unknown:
            raise ValidationError(
                "Fields cannot be updated",
                details={'fields': sorted(unknown)}
            )
        if 'level' in patch:
            self._validate_level(patch['level'])

        with store_operation("Failed to update role", role_id=role_id):
            with transaction.atomic(using=self.using):
                role = self._find_role(role_id, for_update=True)
                if role is None:
                    raise RoleNotFound(f"Role {role_id} not found")

                changes = {}
                for field_name, value in patch.items():
                    if getattr(role, field_name) != value:
                        setattr(role, field_name, value)
                        changes[field_name] = value

                if changes:
                    role.save(using=self.using, update_fields=list(changes) + ['updated_at'])

        self.log_permission_change(
            role.venue_id,
            VenuePermissionAuditLog.ACTION_ROLE_UPDATED,
            role_id=role.id,
            details={'changes': changes},
            performed_by=performed_by,
            request=request,
        )
        return role

    def delete_role(self, role_id, performed_by: Optional[User] = None, request=None) -> VenueRole:
        """
        Soft delete a role.

        Bindings and assignments stay in place and stop contributing
        permissions because the role is no longer active.
        """
        with store_operation("Failed to delete role", role_id=role_id):
            with transaction.atomic(using=self.using):
                role = self._find_role(role_id, for_update=True)
                if role is None:
                    raise RoleNotFound(f"Role {role_id} not found")
                role.is_active = False
                role.save(using=self.using, update_fields=['is_active', 'updated_at'])

        self.log_permission_change(
            role.venue_id,
            VenuePermissionAuditLog.ACTION_ROLE_DELETED,
            role_id=role.id,
            details={'name': role.name},
            performed_by=performed_by,
            request=request,
        )
        return role

    def create_default_roles(self, venue_id, created_by: Optional[User] = None,
                             request=None) -> List[VenueRole]:
        """
        Create the system roles of a venue with their default permissions.

        Idempotent: existing system roles are kept and only missing
        bindings are added.

        Returns:
            The venue's system roles
        """
        self.sync_permission_catalog()

        created_names = []
        roles = []
        with store_operation("Failed to create default roles", venue_id=venue_id):
            with transaction.atomic(using=self.using):
                permissions = {
                    permission.name: permission
                    for permission in VenuePermission.objects.using(self.using).all()
                }
                for role_name, definition in SYSTEM_ROLES.items():
                    role, created = VenueRole.objects.db_manager(self.using).get_or_create(
                        venue_id=venue_id,
                        name=role_name.value,
                        is_system_role=True,
                        defaults={
                            'level': int(definition['level']),
                            'description': definition['description'],
                            'created_by': created_by,
                        }
                    )
                    if created:
                        created_names.append(role.name)
                    roles.append(role)

                    for permission_name in permissions_for_system_role(role_name):
                        VenueRolePermission.objects.db_manager(self.using).get_or_create(
                            role=role,
                            permission=permissions[permission_name],
                            defaults={'granted_by': created_by, 'granted_at': self.clock()}
                        )

        logger.info(
            f"Default roles ready for venue ({len(created_names)} created)",
            extra={'venue_id': str(venue_id)}
        )
        self.log_permission_change(
            venue_id,
            VenuePermissionAuditLog.ACTION_DEFAULT_ROLES_CREATED,
            details={'created': created_names},
            performed_by=created_by,
            request=request,
        )
        return roles

    # Role-permission bindings

    def get_role_with_permissions(self, role_id) -> Optional[RoleWithPermissions]:
        """Role and its bound permissions, or None when the role does not exist."""
        with store_operation("Failed to fetch role permissions", role_id=role_id):
            role = self._find_role(role_id)
            if role is None:
                return None
            permissions = VenuePermission.objects.using(self.using).filter(
                role_permissions__role=role
            ).order_by('category', 'name')
            return RoleWithPermissions(role=role, permissions=list(permissions))

    def assign_permissions_to_role(self, role_id, permission_ids: List[Any],
                                   granted_by: Optional[User] = None,
                                   request=None) -> List[VenueRolePermission]:
        """
        Bind permissions to a role.

        Rebinding an already bound permission keeps a single row and
        overwrites its attribution.

        Raises:
            RoleNotFound: No role has ``role_id``
            ValidationError: A permission id does not exist
        """
        permission_ids = list(dict.fromkeys(permission_ids))

        with store_operation("Failed to assign permissions to role", role_id=role_id):
            role = self._get_role_or_raise(role_id)
            permissions = list(VenuePermission.objects.using(self.using).filter(id__in=permission_ids))
            if len(permissions) != len(permission_ids):
                found = {str(permission.id) for permission in permissions}
                raise ValidationError(
                    "Unknown permissions",
                    details={'permission_ids': [str(pid) for pid in permission_ids if str(pid) not in found]}
                )

            bindings = []
            with transaction.atomic(using=self.using):
                for permission in permissions:
                    binding, _ = VenueRolePermission.objects.db_manager(self.using).update_or_create(
                        role=role,
                        permission=permission,
                        defaults={'granted_by': granted_by, 'granted_at': self.clock()}
                    )
                    bindings.append(binding)

        self.log_permission_change(
            role.venue_id,
            VenuePermissionAuditLog.ACTION_PERMISSIONS_ASSIGNED,
            role_id=role.id,
            details={'permissions': sorted(permission.name for permission in permissions)},
            performed_by=granted_by,
            request=request,
        )
        return bindings

    def remove_permissions_from_role(self, role_id, permission_ids: List[Any],
                                     removed_by: Optional[User] = None, request=None) -> int:
        """
        Unbind permissions from a role. Missing bindings are ignored.

        Returns:
            Number of bindings deleted
        """
        with store_operation("Failed to remove permissions from role", role_id=role_id):
            role = self._get_role_or_raise(role_id)
            with transaction.atomic(using=self.using):
                deleted, _ = VenueRolePermission.objects.using(self.using).filter(
                    role=role,
                    permission_id__in=list(permission_ids)
                ).delete()

        self.log_permission_change(
            role.venue_id,
            VenuePermissionAuditLog.ACTION_PERMISSIONS_REMOVED,
            role_id=role.id,
            details={'permission_ids': [str(pid) for pid in permission_ids], 'removed': deleted},
            performed_by=removed_by,
            request=request,
        )
        return deleted

    # User role assignments

    def get_user_roles(self, venue_id, user_id) -> List[VenueUserRole]:
        """Active assignments of a user in a venue, with their roles."""
        with store_operation("Failed to fetch user roles", venue_id=venue_id, user_id=user_id):
            return list(
                VenueUserRole.objects.using(self.using)
                .for_user(venue_id, user_id)
                .filter(is_active=True)
                .select_related('role')
                .order_by('-role__level', 'role__name')
            )

    def assign_user_role(self, data: Dict[str, Any], assigned_by: Optional[User] = None,
                         request=None) -> VenueUserRole:
        """
        Assign a role to a user in a venue.

        Every call inserts a new assignment row, even when the user already
        holds the role; each row is revoked independently.

        Args:
            data: venue_id, user_id, role_id and optionally expires_at, notes
            assigned_by: User making the assignment
            request: Django request for audit context

        Raises:
            RoleNotFound: No role has ``role_id``
            ValidationError: The role belongs to another venue or is inactive
        """
        unknown = set(data) - self.USER_ROLE_FIELDS
        if unknown:
            raise ValidationError("Unknown assignment fields", details={'fields': sorted(unknown)})
        missing = [key for key in ('venue_id', 'user_id', 'role_id') if not data.get(key)]
        if missing:
            raise ValidationError("Missing assignment fields", details={'fields': missing})

        with store_operation("Failed to assign user role", venue_id=data['venue_id'],
                             user_id=data['user_id']):
            role = self._get_role_or_raise(data['role_id'])
            if str(role.venue_id) != str(data['venue_id']):
                raise ValidationError(
                    "Role does not belong to this venue",
                    details={'role_id': str(role.id)}
                )
            if not role.is_active:
                raise ValidationError("Cannot assign an inactive role", details={'role_id': str(role.id)})

            with transaction.atomic(using=self.using):
                assignment = VenueUserRole(
                    venue_id=role.venue_id,
                    user_id=data['user_id'],
                    role=role,
                    assigned_by=assigned_by,
                    assigned_at=self.clock(),
                    expires_at=data.get('expires_at'),
                    notes=data.get('notes') or '',
                )
                assignment.save(using=self.using)

        logger.info(
            f"Assigned role {role.name}",
            extra={'venue_id': str(role.venue_id), 'user_id': str(data['user_id'])}
        )
        self.log_permission_change(
            role.venue_id,
            VenuePermissionAuditLog.ACTION_ROLE_ASSIGNED,
            target_user_id=assignment.user_id,
            role_id=role.id,
            details={'notes': assignment.notes},
            performed_by=assigned_by,
            request=request,
        )
        return assignment

    def remove_user_role(self, venue_id, user_id, role_id, removed_by: Optional[User] = None,
                         request=None) -> int:
        """
        Revoke every active assignment of a role to a user in a venue.

        Returns:
            Number of assignments deactivated
        """
        with store_operation("Failed to remove user role", venue_id=venue_id, user_id=user_id):
            with transaction.atomic(using=self.using):
                revoked = VenueUserRole.objects.using(self.using).for_user(venue_id, user_id).filter(
                    role_id=role_id,
                    is_active=True
                ).update(is_active=False, updated_at=self.clock())

        self.log_permission_change(
            venue_id,
            VenuePermissionAuditLog.ACTION_ROLE_REMOVED,
            target_user_id=user_id,
            role_id=role_id,
            details={'revoked': revoked},
            performed_by=removed_by,
            request=request,
        )
        return revoked

    def get_users_with_roles(self, venue_id) -> List[UserWithRoles]:
        """Every user holding an active assignment in the venue with their resolved permissions."""
        with store_operation("Failed to fetch venue users", venue_id=venue_id):
            assignments = (
                VenueUserRole.objects.using(self.using)
                .filter(venue_id=venue_id, is_active=True)
                .select_related('role', 'user')
                .order_by('user__email', '-role__level')
            )

            users = {}
            for assignment in assignments:
                entry = users.setdefault(assignment.user_id, UserWithRoles(user_id=assignment.user_id))
                entry.roles.append(assignment)

        for entry in users.values():
            entry.permissions = self.get_user_permissions(venue_id, entry.user_id)
        return list(users.values())

    # Permission overrides

    def grant_permission_override(self, data: Dict[str, Any], granted_by: Optional[User] = None,
                                  request=None) -> VenueUserPermissionOverride:
        """
        Grant or deny one permission to a user in a venue.

        At most one override exists per (venue, user, permission); writing
        again replaces is_granted, expires_at and reason.

        Args:
            data: venue_id, user_id, permission_id, is_granted and optionally
                expires_at, reason
            granted_by: User writing the override
            request: Django request for audit context
        """
        unknown = set(data) - self.OVERRIDE_FIELDS
        if unknown:
            raise ValidationError("Unknown override fields", details={'fields': sorted(unknown)})
        missing = [key for key in ('venue_id', 'user_id', 'permission_id') if not data.get(key)]
        if 'is_granted' not in data:
            missing.append('is_granted')
        if missing:
            raise ValidationError("Missing override fields", details={'fields': missing})

        with store_operation("Failed to grant permission override", venue_id=data['venue_id'],
                             user_id=data['user_id']):
            if not VenuePermission.objects.using(self.using).filter(id=data['permission_id']).exists():
                raise ValidationError(
                    "Unknown permission",
                    details={'permission_id': str(data['permission_id'])}
                )
            with transaction.atomic(using=self.using):
                override, _ = VenueUserPermissionOverride.objects.db_manager(self.using).update_or_create(
                    venue_id=data['venue_id'],
                    user_id=data['user_id'],
                    permission_id=data['permission_id'],
                    defaults={
                        'is_granted': bool(data['is_granted']),
                        'expires_at': data.get('expires_at'),
                        'reason': data.get('reason') or '',
                        'granted_by': granted_by,
                        'granted_at': self.clock(),
                    }
                )

        self.log_permission_change(
            override.venue_id,
            VenuePermissionAuditLog.ACTION_OVERRIDE_ADDED,
            target_user_id=override.user_id,
            permission_id=override.permission_id,
            details={'is_granted': override.is_granted, 'reason': override.reason},
            performed_by=granted_by,
            request=request,
        )
        return override

    def remove_permission_override(self, venue_id, user_id, permission_id,
                                   removed_by: Optional[User] = None, request=None) -> int:
        """
        Delete a user's override for one permission.

        Returns:
            Number of overrides deleted (0 or 1)
        """
        with store_operation("Failed to remove permission override", venue_id=venue_id, user_id=user_id):
            with transaction.atomic(using=self.using):
                deleted, _ = VenueUserPermissionOverride.objects.using(self.using).for_user(
                    venue_id, user_id
                ).filter(permission_id=permission_id).delete()

        self.log_permission_change(
            venue_id,
            VenuePermissionAuditLog.ACTION_OVERRIDE_REMOVED,
            target_user_id=user_id,
            permission_id=permission_id,
            details={'removed': deleted},
            performed_by=removed_by,
            request=request,
        )
        return deleted

    def get_user_permission_overrides(self, venue_id, user_id) -> List[VenueUserPermissionOverride]:
        """Non-expired overrides of a user in a venue, with their permissions."""
        with store_operation("Failed to fetch permission overrides", venue_id=venue_id, user_id=user_id):
            return list(self._live_overrides(venue_id, user_id, self.clock()))

    # Resolution

    def user_has_permission(self, venue_id, user_id, permission_name: str) -> bool:
        """
        Check whether a user holds a permission in a venue.

        A live override decides the answer. Without one, the permission must
        be bound to a live role assignment. Any failure answers False.
        """
        try:
            now = self.clock()
            override = self._live_overrides(venue_id, user_id, now).filter(
                permission__name=permission_name
            ).first()
            if override is not None:
                return override.is_granted
            return permission_name in self._role_derived_permission_names(venue_id, user_id, now)
        except Exception as e:
            logger.error(
                f"Permission check failed, denying: {e}",
                extra={
                    'venue_id': str(venue_id),
                    'user_id': str(user_id),
                    'permission': permission_name,
                },
                exc_info=True
            )
            return False

    def user_has_any_permission(self, venue_id, user_id, permission_names: Iterable[str]) -> bool:
        """Check if the user holds at least one of ``permission_names``."""
        return any(self.user_has_permission(venue_id, user_id, name) for name in permission_names)

    def user_has_all_permissions(self, venue_id, user_id, permission_names: Iterable[str]) -> bool:
        """Check if the user holds every one of ``permission_names``."""
        return all(self.user_has_permission(venue_id, user_id, name) for name in permission_names)

    def get_user_permissions(self, venue_id, user_id) -> List[str]:
        """
        Resolve every permission a user holds in a venue.

        Returns:
            Sorted permission names
        """
        with store_operation("Failed to fetch user permissions", venue_id=venue_id, user_id=user_id):
            now = self.clock()
            overrides = [
                (override.permission.name, override.is_granted)
                for override in self._live_overrides(venue_id, user_id, now)
            ]
            role_derived = self._role_derived_permission_names(venue_id, user_id, now)
        return sorted(resolve_permission_names(role_derived, overrides))

    def get_user_permissions_data(self, venue_id, user_id) -> UserPermissionsData:
        """Resolved permissions together with the raw assignments and overrides."""
        return UserPermissionsData(
            permissions=self.get_user_permissions(venue_id, user_id),
            role_assignments=self.get_user_roles(venue_id, user_id),
            permission_overrides=self.get_user_permission_overrides(venue_id, user_id),
        )

    # Audit

    def log_permission_change(self, venue_id, action_type, target_user_id=None, role_id=None,
                              permission_id=None, details=None, performed_by=None,
                              request=None) -> Optional[VenuePermissionAuditLog]:
        """Append an audit entry. Failures are logged and return None."""
        return VenuePermissionAuditLog.log_change(
            venue_id=venue_id,
            action_type=action_type,
            performed_by=performed_by,
            target_user_id=target_user_id,
            role_id=role_id,
            permission_id=permission_id,
            details=details,
            request=request,
            performed_at=self.clock(),
            using=self.using,
        )

    def get_audit_log(self, venue_id, limit: int = 100) -> List[VenuePermissionAuditLog]:
        """Most recent audit entries of a venue, newest first."""
        with store_operation("Failed to fetch audit log", venue_id=venue_id):
            return list(
                VenuePermissionAuditLog.objects.using(self.using)
                .for_venue(venue_id)
                .select_related('performed_by', 'target_user', 'role', 'permission')
                .order_by('-performed_at', '-created_at')[:max(int(limit), 0)]
            )

    # Internals

    def _get_role_or_raise(self, role_id) -> VenueRole:
        role = self._find_role(role_id)
        if role is None:
            raise RoleNotFound(f"Role {role_id} not found")
        return role

    def _find_role(self, role_id, for_update=False) -> Optional[VenueRole]:
        roles = VenueRole.objects.using(self.using)
        if for_update:
            roles = roles.select_for_update()
        try:
            return roles.filter(id=role_id).first()
        except DjangoValidationError:
            # not a UUID
            return None

    def _live_overrides(self, venue_id, user_id, now):
        return (
            VenueUserPermissionOverride.objects.using(self.using)
            .for_user(venue_id, user_id)
            .live(now)
            .select_related('permission')
        )

    def _role_derived_permission_names(self, venue_id, user_id, now) -> Set[str]:
        role_ids = VenueUserRole.objects.using(self.using).for_user(venue_id, user_id).active(now).filter(
            role__is_active=True,
            role__venue_id=venue_id,
        ).values_list('role_id', flat=True)

        return set(
            VenueRolePermission.objects.using(self.using)
            .filter(role_id__in=role_ids)
            .values_list('permission__name', flat=True)
        )

    @staticmethod
    def _validate_level(level):
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise ValidationError("Role level must be a positive integer", details={'level': level})


venue_rbac = VenueRolesPermissionsService()


class AuthService:
    """
    Service for JWT authentication at the API boundary.
    """

    @classmethod
    def generate_jwt(cls, user: User) -> str:
        """
        Generate JWT token for a user.

        Args:
            user: User instance

        Returns:
            JWT token string
        """
        now = timezone.now()
        payload = {
            'user_id': str(user.id),
            'email': user.email,
            'exp': now + timedelta(hours=getattr(settings, 'JWT_EXPIRATION_HOURS', 24)),
            'iat': now,
        }

        return jwt.encode(
            payload,
            settings.JWT_SECRET_KEY,
            algorithm=getattr(settings, 'JWT_ALGORITHM', 'HS256')
        )

    @classmethod
    def validate_jwt(cls, token: str) -> Optional[Dict[str, Any]]:
        """
        Validate JWT token and return payload.

        Args:
            token: JWT token string

        Returns:
            Decoded payload dict or None if invalid
        """
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[getattr(settings, 'JWT_ALGORITHM', 'HS256')]
            )
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    @classmethod
    def get_user_from_jwt(cls, token: str) -> Optional[User]:
        """
        Extract and return user from JWT token.

        Args:
            token: JWT token string

        Returns:
            User instance or None if invalid
        """
        payload = cls.validate_jwt(token)
        if not payload:
            return None

        user_id = payload.get('user_id')
        if not user_id:
            return None

        try:
            return User.objects.get(id=user_id, is_active=True)
        except (User.DoesNotExist, DjangoValidationError):
            return None
