"""
Unit tests for RBAC models.

Tests core functionality of User, VenuePermission, VenueRole,
VenueRolePermission, VenueUserRole, VenueUserPermissionOverride and
VenuePermissionAuditLog models.
"""
from datetime import timedelta

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.rbac.models import (
    AppendOnlyError, User, VenuePermission, VenueRole, VenueRolePermission,
    VenueUserRole, VenueUserPermissionOverride, VenuePermissionAuditLog
)


@pytest.mark.django_db
class TestUserModel:
    """Test User model functionality."""

    def test_create_user(self):
        """Test creating a user with hashed password."""
        user = User.objects.create_user(
            email='test@Example.COM',
            password='testpass123'
        )

        assert user.email == 'test@example.com'
        assert user.is_active is True
        assert user.is_superuser is False
        assert user.password_hash != 'testpass123'
        assert user.check_password('testpass123') is True
        assert user.check_password('wrongpass') is False

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='x')

    def test_get_full_name(self):
        """Test get_full_name method."""
        user = User.objects.create_user(
            email='test@example.com',
            password='testpass123',
            first_name='John',
            last_name='Doe'
        )
        assert user.get_full_name() == 'John Doe'

        user2 = User.objects.create_user(email='test2@example.com', password='testpass123')
        assert user2.get_full_name() == 'test2@example.com'

    def test_update_last_login(self, user):
        assert user.last_login_at is None
        user.update_last_login()
        assert user.last_login_at is not None

    def test_only_superusers_reach_admin(self, user):
        admin = User.objects.create_superuser(email='root@example.com', password='testpass123')

        assert admin.is_staff is True
        assert admin.has_perm('anything') is True
        assert user.is_staff is False
        assert user.has_module_perms('rbac') is False

    def test_by_email_normalizes_domain(self, user):
        assert User.objects.by_email('staff@EXAMPLE.com') == user


@pytest.mark.django_db
class TestVenuePermissionModel:
    """Test VenuePermission model functionality."""

    def test_get_or_create_permission_is_idempotent(self):
        first, created = VenuePermission.objects.get_or_create_permission('reports.export')
        second, created_again = VenuePermission.objects.get_or_create_permission('reports.export')

        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert first.category == 'reports'

    def test_name_is_unique(self, make_permission):
        make_permission('reports.export')
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                VenuePermission.objects.create(name='reports.export', category='reports')

    def test_by_name(self, make_permission):
        permission = make_permission('reports.export')
        assert VenuePermission.objects.by_name('reports.export') == permission
        assert VenuePermission.objects.by_name('missing') is None


@pytest.mark.django_db
class TestVenueRoleModel:
    """Test VenueRole model functionality."""

    def test_for_venue_hides_inactive_roles(self, venue, make_role):
        make_role(venue, 'Retired', is_active=False)
        active = make_role(venue, 'Floor Lead', level=4)

        roles = list(VenueRole.objects.for_venue(venue.id))

        assert active in roles
        assert 'Retired' not in {r.name for r in roles}

    def test_by_name(self, venue, make_role):
        role = make_role(venue, 'Floor Lead')
        assert VenueRole.objects.by_name(venue.id, 'Floor Lead') == role
        assert VenueRole.objects.by_name(venue.id, 'Nobody') is None

    def test_role_binding_is_unique(self, venue, make_role, make_permission):
        permission = make_permission('manage_staff')
        role = make_role(venue, 'Manager', [permission])

        VenueRolePermission.objects.grant_permission(role, permission)

        assert VenueRolePermission.objects.for_role(role).count() == 1
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                VenueRolePermission.objects.create(role=role, permission=permission)


@pytest.mark.django_db
class TestVenueUserRoleModel:
    """Test VenueUserRole model functionality."""

    def test_is_live(self, venue, user, make_role):
        role = make_role(venue, 'Runner')
        now = timezone.now()
        assignment = VenueUserRole.objects.create(
            venue=venue, user=user, role=role, expires_at=now + timedelta(hours=1)
        )

        assert assignment.is_live(now) is True
        assert assignment.is_live(now + timedelta(hours=2)) is False

        assignment.is_active = False
        assert assignment.is_live(now) is False

    def test_active_queryset_filters_expired_and_revoked(self, venue, user, make_role):
        role = make_role(venue, 'Runner')
        now = timezone.now()
        live = VenueUserRole.objects.create(venue=venue, user=user, role=role)
        VenueUserRole.objects.create(venue=venue, user=user, role=role, is_active=False)
        VenueUserRole.objects.create(
            venue=venue, user=user, role=role, expires_at=now - timedelta(seconds=1)
        )

        assert list(VenueUserRole.objects.for_user(venue.id, user.id).active(now)) == [live]


@pytest.mark.django_db
class TestVenueUserPermissionOverrideModel:
    """Test VenueUserPermissionOverride model functionality."""

    def test_one_override_per_permission(self, venue, user, make_permission):
        permission = make_permission('manage_staff')
        VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=permission, is_granted=True
        )

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                VenueUserPermissionOverride.objects.create(
                    venue=venue, user=user, permission=permission, is_granted=False
                )

    def test_live_queryset(self, venue, user, make_permission):
        now = timezone.now()
        forever = VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=make_permission('a'), is_granted=True
        )
        expired = VenueUserPermissionOverride.objects.create(
            venue=venue, user=user, permission=make_permission('b'), is_granted=True,
            expires_at=now - timedelta(minutes=5)
        )

        live = list(VenueUserPermissionOverride.objects.for_user(venue.id, user.id).live(now))

        assert forever in live
        assert expired not in live
        assert expired.is_live(now - timedelta(minutes=10)) is True

    def test_str(self, venue, user, make_permission):
        override = VenueUserPermissionOverride(
            venue=venue, user=user, permission=make_permission('manage_staff'), is_granted=False
        )
        assert str(override).startswith('DENY manage_staff')


@pytest.mark.django_db
class TestVenuePermissionAuditLogModel:
    """Test the append-only audit log."""

    def test_log_change_records_request_context(self, venue, admin_user, user, rf):
        request = rf.get('/', HTTP_USER_AGENT='pytest', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        request.request_id = 'req-123'

        entry = VenuePermissionAuditLog.log_change(
            venue_id=venue.id,
            action_type=VenuePermissionAuditLog.ACTION_ROLE_ASSIGNED,
            performed_by=admin_user,
            target_user_id=user.id,
            details={'notes': 'x'},
            request=request,
        )

        assert entry is not None
        entry.refresh_from_db()
        assert entry.ip_address == '10.0.0.1'
        assert entry.user_agent == 'pytest'
        assert entry.request_id == 'req-123'
        assert entry.performed_by == admin_user

    def test_saved_entry_cannot_be_updated(self, venue):
        entry = VenuePermissionAuditLog.log_change(venue_id=venue.id, action_type='role_created')

        entry.details = {'tampered': True}
        with pytest.raises(AppendOnlyError):
            entry.save()

    def test_entry_cannot_be_deleted(self, venue):
        entry = VenuePermissionAuditLog.log_change(venue_id=venue.id, action_type='role_created')

        with pytest.raises(AppendOnlyError):
            entry.delete()

    def test_queryset_bulk_changes_rejected(self, venue):
        VenuePermissionAuditLog.log_change(venue_id=venue.id, action_type='role_created')

        with pytest.raises(AppendOnlyError):
            VenuePermissionAuditLog.objects.for_venue(venue.id).update(details={})
        with pytest.raises(AppendOnlyError):
            VenuePermissionAuditLog.objects.for_venue(venue.id).delete()
