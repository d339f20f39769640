"""
Unit tests for the venue RBAC service.

Tests role management, permission bindings, role assignment, permission
overrides, permission resolution and audit logging.
"""
import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.exceptions import RoleNotFound, ServiceError, ValidationError
from apps.rbac.catalog import SystemRoleName
from apps.rbac.models import (
    VenueRole, VenueRoleManager, VenueRolePermission, VenueUserRole,
    VenueUserPermissionOverride, VenuePermissionAuditLog
)
from apps.rbac.services import VenueRolesPermissionsService


def audit_entries(venue, action_type):
    return VenuePermissionAuditLog.objects.filter(venue=venue, action_type=action_type)


@pytest.mark.django_db
class TestPermissionCatalog:
    """Test catalog listing."""

    def test_list_system_permissions_ordered_by_category_then_name(self, venue, service):
        permissions = service.list_system_permissions()

        keys = [(p.category, p.name) for p in permissions]
        assert keys == sorted(keys)
        assert 'staff.manage_roles' in {p.name for p in permissions}

    def test_list_system_permissions_excludes_custom(self, venue, service, make_permission):
        make_permission('custom.thing')
        names = {p.name for p in service.list_system_permissions()}
        assert 'custom.thing' not in names

    def test_list_permissions_by_category(self, venue, service):
        permissions = service.list_permissions_by_category('payroll')

        names = [p.name for p in permissions]
        assert names == sorted(names)
        assert all(name.startswith('payroll.') for name in names)
        assert 'payroll.process' in names

    def test_list_permissions_by_unknown_category_is_empty(self, venue, service):
        assert service.list_permissions_by_category('nope') == []

    def test_get_system_role_permissions(self, service):
        viewer = service.get_system_role_permissions(SystemRoleName.VIEWER.value)
        assert viewer
        assert 'admin.manage_roles' not in viewer
        assert service.get_system_role_permissions('Not A Role') == []

    def test_sync_permission_catalog_is_idempotent(self, venue, service):
        created, updated = service.sync_permission_catalog()
        assert created == 0
        assert updated == 0


@pytest.mark.django_db
class TestRoleStore:
    """Test role CRUD."""

    def test_list_roles_orders_by_level_desc_then_name(self, venue, service, make_role):
        make_role(venue, 'Alpha', level=10)
        make_role(venue, 'Beta', level=10)
        make_role(venue, 'Gamma', level=1)

        roles = service.list_roles(venue.id)

        keys = [(-r.level, r.name) for r in roles]
        assert keys == sorted(keys)
        assert [r.name for r in roles][:2] == ['Alpha', 'Beta']

    def test_list_roles_excludes_inactive_and_other_venues(self, venue, other_venue, service, make_role):
        make_role(venue, 'Retired', is_active=False)
        make_role(other_venue, 'Elsewhere')

        names = {r.name for r in service.list_roles(venue.id)}
        assert 'Retired' not in names
        assert 'Elsewhere' not in names

    def test_get_role_missing_returns_none(self, service, db):
        import uuid
        assert service.get_role(uuid.uuid4()) is None

    def test_create_role(self, venue, service, admin_user):
        role = service.create_role(
            {'venue_id': venue.id, 'name': 'Door Staff', 'level': 2, 'description': 'Front door'},
            created_by=admin_user
        )

        assert role.venue_id == venue.id
        assert role.is_active is True
        assert role.created_by == admin_user
        assert audit_entries(venue, 'role_created').filter(role=role).count() == 1

    def test_create_role_rejects_unknown_fields(self, venue, service):
        with pytest.raises(ValidationError) as exc_info:
            service.create_role({'venue_id': venue.id, 'name': 'X', 'colour': 'red'})
        assert exc_info.value.details == {'fields': ['colour']}

    def test_create_role_rejects_non_positive_level(self, venue, service):
        with pytest.raises(ValidationError):
            service.create_role({'venue_id': venue.id, 'name': 'X', 'level': 0})

    def test_update_role_partial(self, venue, service, make_role, admin_user):
        role = make_role(venue, 'Runner', level=1)

        updated = service.update_role(role.id, {'level': 3}, performed_by=admin_user)

        assert updated.level == 3
        assert updated.name == 'Runner'
        entry = audit_entries(venue, 'role_updated').get(role=role)
        assert entry.details == {'changes': {'level': 3}}

    def test_update_role_cannot_move_venue(self, venue, other_venue, service, make_role):
        role = make_role(venue, 'Runner')
        with pytest.raises(ValidationError):
            service.update_role(role.id, {'venue_id': other_venue.id})

    def test_update_missing_role_raises(self, service, db):
        import uuid
        with pytest.raises(RoleNotFound):
            service.update_role(uuid.uuid4(), {'name': 'x'})

    def test_delete_role_is_soft(self, venue, service, make_role, make_permission, user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission], level=10)
        VenueUserRole.objects.create(venue=venue, user=user, role=role)

        service.delete_role(role.id)

        role.refresh_from_db()
        assert role.is_active is False
        assert VenueRolePermission.objects.filter(role=role).count() == 1
        assert VenueUserRole.objects.filter(role=role, is_active=True).count() == 1
        assert audit_entries(venue, 'role_deleted').count() == 1

    def test_create_default_roles_is_idempotent(self, venue, service):
        before = VenueRole.objects.filter(venue=venue, is_system_role=True).count()
        bindings_before = VenueRolePermission.objects.filter(role__venue=venue).count()

        roles = service.create_default_roles(venue.id)

        assert before == len(SystemRoleName)
        assert len(roles) == len(SystemRoleName)
        assert VenueRole.objects.filter(venue=venue, is_system_role=True).count() == before
        assert VenueRolePermission.objects.filter(role__venue=venue).count() == bindings_before

    def test_store_error_becomes_service_error(self, venue, service):
        with patch.object(VenueRoleManager, 'for_venue', side_effect=DatabaseError('down')):
            with pytest.raises(ServiceError) as exc_info:
                service.list_roles(venue.id)
        assert exc_info.value.message == "Failed to fetch venue roles"
        assert isinstance(exc_info.value.__cause__, DatabaseError)


    def test_malformed_role_id_is_not_found(self, venue, service):
        assert service.get_role('abc') is None
        assert service.get_role_with_permissions('abc') is None
        with pytest.raises(RoleNotFound):
            service.update_role('abc', {'name': 'Renamed'})
        with pytest.raises(RoleNotFound):
            service.assign_permissions_to_role('abc', [])
        with pytest.raises(RoleNotFound):
            service.delete_role('abc')

@pytest.mark.django_db
class TestRolePermissionBinding:
    """Test binding permissions to roles."""

    def test_role_without_bindings_has_empty_permissions(self, venue, service, make_role):
        role = make_role(venue, 'Empty')

        result = service.get_role_with_permissions(role.id)

        assert result.role == role
        assert result.permissions == []

    def test_get_role_with_permissions_missing_role(self, service, db):
        assert service.get_role_with_permissions(uuid.uuid4()) is None

    def test_assign_permissions_twice_keeps_one_binding(self, venue, service, make_role,
                                                        make_permission, admin_user, user):
        role = make_role(venue, 'Manager', level=10)
        permission = make_permission('manage_staff')

        service.assign_permissions_to_role(role.id, [permission.id], granted_by=user)
        service.assign_permissions_to_role(role.id, [permission.id], granted_by=admin_user)

        bindings = VenueRolePermission.objects.filter(role=role, permission=permission)
        assert bindings.count() == 1
        assert bindings.get().granted_by == admin_user
        assert audit_entries(venue, 'permissions_assigned').count() == 2

    def test_assign_unknown_permission_rejected(self, venue, service, make_role):
        import uuid
        role = make_role(venue, 'Manager')
        with pytest.raises(ValidationError):
            service.assign_permissions_to_role(role.id, [uuid.uuid4()])

    def test_remove_missing_binding_is_noop(self, venue, service, make_role, make_permission):
        role = make_role(venue, 'Manager')
        permission = make_permission('manage_staff')

        removed = service.remove_permissions_from_role(role.id, [permission.id])

        assert removed == 0

    def test_remove_binding_hard_deletes(self, venue, service, make_role, make_permission):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission])

        removed = service.remove_permissions_from_role(role.id, [permission.id])

        assert removed == 1
        assert not VenueRolePermission.objects.filter(role=role).exists()
        assert audit_entries(venue, 'permissions_removed').count() == 1


@pytest.mark.django_db
class TestUserRoleAssignment:
    """Test assigning and revoking roles."""

    def test_assign_user_role_audits_once(self, venue, service, make_role, user, admin_user):
        role = make_role(venue, 'Bar Staff')

        assignment = service.assign_user_role(
            {'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id, 'notes': 'weekend cover'},
            assigned_by=admin_user
        )

        assert assignment.is_active is True
        entries = audit_entries(venue, 'role_assigned')
        assert entries.count() == 1
        entry = entries.get()
        assert entry.target_user_id == user.id
        assert entry.role_id == role.id
        assert entry.performed_by == admin_user
        assert entry.details == {'notes': 'weekend cover'}

    def test_assign_same_role_twice_inserts_two_rows(self, venue, service, make_role, user):
        role = make_role(venue, 'Bar Staff')
        data = {'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id}

        service.assign_user_role(data)
        service.assign_user_role(data)

        assert VenueUserRole.objects.filter(user=user, role=role, is_active=True).count() == 2

    def test_assign_role_from_other_venue_rejected(self, venue, other_venue, service, make_role, user):
        role = make_role(other_venue, 'Elsewhere')
        with pytest.raises(ValidationError):
            service.assign_user_role({'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id})

    def test_remove_user_role_deactivates_all_matching(self, venue, service, make_role, user):
        role = make_role(venue, 'Bar Staff')
        data = {'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id}
        service.assign_user_role(data)
        service.assign_user_role(data)

        revoked = service.remove_user_role(venue.id, user.id, role.id)

        assert revoked == 2
        assert VenueUserRole.objects.filter(user=user, role=role).count() == 2
        assert not VenueUserRole.objects.filter(user=user, role=role, is_active=True).exists()
        entries = audit_entries(venue, 'role_removed')
        assert entries.count() == 1
        assert entries.get().target_user_id == user.id

    def test_remove_user_role_stamps_clock_time(self, venue, make_role, user):
        role = make_role(venue, 'Bar Staff')
        later = timezone.now() + timedelta(days=3)
        service = VenueRolesPermissionsService(clock=lambda: later)
        assignment = service.assign_user_role({'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id})

        service.remove_user_role(venue.id, user.id, role.id)

        assignment.refresh_from_db()
        assert assignment.is_active is False
        assert assignment.updated_at == later

    def test_get_user_roles_lists_active_assignments(self, venue, service, make_role, user):
        kept = make_role(venue, 'Kept', level=2)
        dropped = make_role(venue, 'Dropped', level=1)
        VenueUserRole.objects.create(venue=venue, user=user, role=kept)
        VenueUserRole.objects.create(venue=venue, user=user, role=dropped, is_active=False)

        assignments = service.get_user_roles(venue.id, user.id)

        assert [a.role.name for a in assignments] == ['Kept']

    def test_get_users_with_roles(self, venue, service, make_role, make_permission, user, other_user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission], level=10)
        VenueUserRole.objects.create(venue=venue, user=user, role=role)
        VenueUserRole.objects.create(venue=venue, user=other_user, role=role, is_active=False)

        users = service.get_users_with_roles(venue.id)

        assert [u.user_id for u in users] == [user.id]
        assert users[0].permissions == ['manage_staff']
        assert len(users[0].roles) == 1


@pytest.mark.django_db
class TestPermissionOverrides:
    """Test override upsert and removal."""

    def test_grant_override_upserts(self, venue, service, make_permission, user, admin_user):
        permission = make_permission('manage_staff')
        data = {'venue_id': venue.id, 'user_id': user.id, 'permission_id': permission.id}

        service.grant_permission_override({**data, 'is_granted': True, 'reason': 'cover'}, admin_user)
        override = service.grant_permission_override({**data, 'is_granted': False, 'reason': 'suspended'}, admin_user)

        assert VenueUserPermissionOverride.objects.filter(user=user, permission=permission).count() == 1
        assert override.is_granted is False
        assert override.reason == 'suspended'
        last = audit_entries(venue, 'override_added').first()
        assert last.details == {'is_granted': False, 'reason': 'suspended'}
        assert last.permission_id == permission.id

    def test_remove_override_audits_once(self, venue, service, make_permission, user):
        permission = make_permission('manage_staff')
        service.grant_permission_override(
            {'venue_id': venue.id, 'user_id': user.id, 'permission_id': permission.id, 'is_granted': True}
        )

        removed = service.remove_permission_override(venue.id, user.id, permission.id)

        assert removed == 1
        assert not VenueUserPermissionOverride.objects.exists()
        entries = audit_entries(venue, 'override_removed')
        assert entries.count() == 1
        assert entries.get().target_user_id == user.id

    def test_get_user_permission_overrides_skips_expired(self, venue, service, make_permission, user):
        live = make_permission('live.one')
        expired = make_permission('expired.one')
        now = timezone.now()
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=live, is_granted=True, expires_at=now + timedelta(days=1)
        )
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=expired, is_granted=True, expires_at=now - timedelta(days=1)
        )

        overrides = service.get_user_permission_overrides(venue.id, user.id)

        assert [o.permission.name for o in overrides] == ['live.one']


@pytest.mark.django_db
class TestPermissionResolution:
    """Test the resolver: roles, overrides, expiry and failure handling."""

    def test_deny_override_beats_role_grant(self, venue, service, make_role, make_permission, user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission], level=10)
        VenueUserRole.objects.create(venue=venue, user=user, role=role)
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=permission, is_granted=False
        )

        assert service.user_has_permission(venue.id, user.id, 'manage_staff') is False
        assert 'manage_staff' not in service.get_user_permissions(venue.id, user.id)

    def test_grant_override_without_any_role(self, venue, service, make_permission, user):
        permission = make_permission('view_finances')
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=permission, is_granted=True
        )

        assert service.user_has_permission(venue.id, user.id, 'view_finances') is True
        assert service.get_user_permissions(venue.id, user.id) == ['view_finances']

    def test_expired_override_is_ignored(self, venue, service, make_role, make_permission, user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission], level=10)
        VenueUserRole.objects.create(venue=venue, user=user, role=role)
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=permission, is_granted=False,
            expires_at=timezone.now() - timedelta(minutes=1)
        )

        assert service.user_has_permission(venue.id, user.id, 'manage_staff') is True

    def test_override_expires_with_the_clock(self, venue, make_role, make_permission, user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission], level=10)
        VenueUserRole.objects.create(venue=venue, user=user, role=role)
        now = timezone.now()
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=permission, is_granted=False,
            expires_at=now + timedelta(hours=1)
        )

        before = VenueRolesPermissionsService(clock=lambda: now)
        after = VenueRolesPermissionsService(clock=lambda: now + timedelta(hours=2))

        assert before.user_has_permission(venue.id, user.id, 'manage_staff') is False
        assert after.user_has_permission(venue.id, user.id, 'manage_staff') is True

    def test_permissions_union_across_roles(self, venue, service, make_role, make_permission, user):
        a = make_permission('perm.a')
        b = make_permission('perm.b')
        VenueUserRole.objects.create(venue=venue, user=user, role=make_role(venue, 'A', [a]))
        VenueUserRole.objects.create(venue=venue, user=user, role=make_role(venue, 'B', [b]))

        assert service.get_user_permissions(venue.id, user.id) == ['perm.a', 'perm.b']

    def test_inactive_role_contributes_nothing(self, venue, service, make_role, make_permission, user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission], level=10)
        assignment = VenueUserRole.objects.create(venue=venue, user=user, role=role)

        service.delete_role(role.id)

        assert service.user_has_permission(venue.id, user.id, 'manage_staff') is False
        assert service.get_user_permissions(venue.id, user.id) == []
        assert VenueUserRole.objects.filter(id=assignment.id).exists()
        assert VenueRolePermission.objects.filter(role=role).exists()

    def test_inactive_or_expired_assignment_contributes_nothing(self, venue, service, make_role,
                                                                make_permission, user, other_user):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission])
        VenueUserRole.objects.create(venue=venue, user=user, role=role, is_active=False)
        VenueUserRole.objects.create(
            venue=venue, user=other_user, role=role,
            expires_at=timezone.now() - timedelta(days=1)
        )

        assert service.user_has_permission(venue.id, user.id, 'manage_staff') is False
        assert service.user_has_permission(venue.id, other_user.id, 'manage_staff') is False

    def test_permissions_do_not_leak_across_venues(self, venue, other_venue, service, make_role,
                                                   make_permission, user):
        permission = make_permission('manage_staff')
        VenueUserRole.objects.create(venue=venue, user=user, role=make_role(venue, 'Manager', [permission]))

        assert service.user_has_permission(other_venue.id, user.id, 'manage_staff') is False

    def test_unknown_user_resolves_to_false(self, venue, service):
        import uuid
        assert service.user_has_permission(venue.id, uuid.uuid4(), 'manage_staff') is False

    def test_user_has_permission_fails_closed(self, venue, service, make_role, make_permission, user):
        permission = make_permission('manage_staff')
        VenueUserRole.objects.create(venue=venue, user=user, role=make_role(venue, 'Manager', [permission]))

        with patch.object(
            VenueRolesPermissionsService, '_role_derived_permission_names',
            side_effect=DatabaseError('connection lost')
        ):
            assert service.user_has_permission(venue.id, user.id, 'manage_staff') is False

    def test_get_user_permissions_propagates_store_error(self, venue, service, user):
        with patch.object(
            VenueRolesPermissionsService, '_role_derived_permission_names',
            side_effect=DatabaseError('connection lost')
        ):
            with pytest.raises(ServiceError) as exc_info:
                service.get_user_permissions(venue.id, user.id)
        assert exc_info.value.message == "Failed to fetch user permissions"

    def test_any_and_all(self, venue, service, make_role, make_permission, user):
        a = make_permission('perm.a')
        make_permission('perm.b')
        VenueUserRole.objects.create(venue=venue, user=user, role=make_role(venue, 'A', [a]))

        assert service.user_has_any_permission(venue.id, user.id, ['perm.a', 'perm.b']) is True
        assert service.user_has_all_permissions(venue.id, user.id, ['perm.a', 'perm.b']) is False
        assert service.user_has_all_permissions(venue.id, user.id, ['perm.a']) is True

    def test_get_user_permissions_data(self, venue, service, make_role, make_permission, user):
        a = make_permission('perm.a')
        b = make_permission('perm.b')
        VenueUserRole.objects.create(venue=venue, user=user, role=make_role(venue, 'A', [a]))
        VenueUserPermissionOverride.objects.create(venue=venue, user=user, permission=b, is_granted=True)

        data = service.get_user_permissions_data(venue.id, user.id)

        assert data.permissions == ['perm.a', 'perm.b']
        assert len(data.role_assignments) == 1
        assert [o.permission.name for o in data.permission_overrides] == ['perm.b']


@pytest.mark.django_db
class TestAuditLog:
    """Test audit completeness and failure isolation."""

    def test_audit_failure_does_not_block_assignment(self, venue, service, make_role, user):
        role = make_role(venue, 'Bar Staff')

        with patch.object(VenuePermissionAuditLog, 'save', side_effect=DatabaseError('audit down')):
            assignment = service.assign_user_role(
                {'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id}
            )

        assert VenueUserRole.objects.filter(id=assignment.id, is_active=True).exists()
        assert not audit_entries(venue, 'role_assigned').exists()

    def test_audit_failure_does_not_block_override(self, venue, service, make_permission, user):
        permission = make_permission('manage_staff')

        with patch.object(VenuePermissionAuditLog, 'save', side_effect=DatabaseError('audit down')):
            service.grant_permission_override(
                {'venue_id': venue.id, 'user_id': user.id, 'permission_id': permission.id, 'is_granted': True}
            )

        assert service.user_has_permission(venue.id, user.id, 'manage_staff') is True

    def test_log_permission_change_returns_none_on_failure(self, venue, service):
        with patch.object(VenuePermissionAuditLog, 'save', side_effect=RuntimeError('boom')):
            assert service.log_permission_change(venue.id, 'role_created') is None

    def test_get_audit_log_newest_first_with_limit(self, venue, service):
        base = timezone.now()
        for minutes in range(5):
            VenuePermissionAuditLog.objects.create(
                venue=venue,
                action_type='role_updated',
                details={'n': minutes},
                performed_at=base + timedelta(minutes=minutes),
            )

        entries = service.get_audit_log(venue.id, limit=3)

        assert [e.details for e in entries] == [{'n': 4}, {'n': 3}, {'n': 2}]


@pytest.mark.django_db(transaction=True)
class TestAuditLogCommitted:
    """Test audit entries for changes that reference missing rows, with real commits."""

    def test_remove_unknown_role_commits(self, venue, service, user):
        missing = uuid.uuid4()

        with transaction.atomic():
            revoked = service.remove_user_role(venue.id, user.id, missing)

        assert revoked == 0
        entry = audit_entries(venue, 'role_removed').get()
        assert entry.role_id is None
        assert entry.target_user_id == user.id
        assert entry.details == {'revoked': 0, 'role_id': str(missing)}

    def test_remove_unknown_override_commits(self, venue, service):
        missing_user, missing_permission = uuid.uuid4(), uuid.uuid4()

        with transaction.atomic():
            removed = service.remove_permission_override(venue.id, missing_user, missing_permission)

        assert removed == 0
        entry = audit_entries(venue, 'override_removed').get()
        assert entry.target_user_id is None
        assert entry.permission_id is None
        assert entry.details == {
            'removed': 0,
            'target_user_id': str(missing_user),
            'permission_id': str(missing_permission),
        }

    def test_change_in_same_transaction_survives(self, venue, service, make_role, user):
        role = make_role(venue, 'Bar Staff')

        with transaction.atomic():
            assignment = service.assign_user_role(
                {'venue_id': venue.id, 'user_id': user.id, 'role_id': role.id}
            )
            service.remove_user_role(venue.id, user.id, uuid.uuid4())

        assert VenueUserRole.objects.filter(id=assignment.id, is_active=True).exists()

    def test_unknown_venue_skips_entry(self, service, user):
        with transaction.atomic():
            revoked = service.remove_user_role(uuid.uuid4(), user.id, uuid.uuid4())

        assert revoked == 0
        assert not VenuePermissionAuditLog.objects.filter(action_type='role_removed').exists()

@pytest.mark.django_db
def test_manager_scenario(venue, service, make_role, make_permission, user, admin_user):
    """A deny override hides a role grant until the override is removed."""
    manage_staff = make_permission('manage_staff')
    manager = make_role(venue, 'Manager', level=10)
    service.assign_permissions_to_role(manager.id, [manage_staff.id], granted_by=admin_user)
    service.assign_user_role(
        {'venue_id': venue.id, 'user_id': user.id, 'role_id': manager.id},
        assigned_by=admin_user
    )
    assert service.user_has_permission(venue.id, user.id, 'manage_staff') is True

    service.grant_permission_override(
        {
            'venue_id': venue.id,
            'user_id': user.id,
            'permission_id': manage_staff.id,
            'is_granted': False,
            'reason': 'suspended',
        },
        granted_by=admin_user
    )
    assert service.user_has_permission(venue.id, user.id, 'manage_staff') is False

    service.remove_permission_override(venue.id, user.id, manage_staff.id, removed_by=admin_user)
    assert service.user_has_permission(venue.id, user.id, 'manage_staff') is True
