"""
RBAC models for venue-scoped access control.

Implements:
- User identity (can hold roles in many venues)
- VenuePermission (global catalog of named permissions)
- VenueRole (per-venue roles with an authority level, soft deleted)
- VenueRolePermission (maps permissions to roles)
- VenueUserRole (assigns roles to users within a venue, soft revoked)
- VenueUserPermissionOverride (per-user grant/deny with optional expiry)
- VenuePermissionAuditLog (append-only audit trail)
"""
import logging
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models, transaction
from django.db.models import Q
from django.contrib.auth.hashers import make_password, check_password
from django.utils import timezone
from apps.core.models import BaseModel
from apps.rbac.catalog import PermissionCategory

logger = logging.getLogger(__name__)


class UserManager(models.Manager):
    """
    Manager for User queries.

    Compatible with Django's authentication system and admin interface.
    """

    def active(self):
        """Return only active users."""
        return self.filter(is_active=True)

    def by_email(self, email):
        """Find user by email."""
        return self.filter(email=self.normalize_email(email)).first()

    def create_user(self, email, password=None, **extra_fields):
        """Create a new user with hashed password."""
        if not email:
            raise ValueError('Email address is required')

        email = self.normalize_email(email)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_superuser', False)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.password_hash = make_password(None)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create a superuser with admin access.

        This method is required for Django's createsuperuser command.
        """
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_email(email):
        """Normalize the email address by lowercasing the domain part."""
        email = email or ''
        try:
            email_name, domain_part = email.strip().rsplit('@', 1)
        except ValueError:
            pass
        else:
            email = email_name + '@' + domain_part.lower()
        return email

    def get_by_natural_key(self, email):
        return self.get(**{self.model.USERNAME_FIELD: email})


class User(BaseModel):
    """
    Global user identity.

    A single person can hold roles in several venues. Authentication happens
    at the User level; authorization is resolved per venue.

    This is the AUTH_USER_MODEL for the entire application, including Django admin.
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text="User email address (unique globally)"
    )
    password_hash = models.CharField(
        max_length=255,
        help_text="Hashed password",
        db_column='password_hash'
    )
    first_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="User first name"
    )
    last_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="User last name"
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether user account is active"
    )
    is_superuser = models.BooleanField(
        default=False,
        help_text="Platform administrator (Django admin access)"
    )
    last_login_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last login timestamp"
    )

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'created_at']),
        ]

    def __str__(self):
        return self.email

    @property
    def password(self):
        """Alias for password_hash; Django admin expects a 'password' field."""
        return self.password_hash

    @password.setter
    def password(self, value):
        self.password_hash = value

    def check_password(self, raw_password):
        """Check if provided password matches stored hash."""
        return check_password(raw_password, self.password_hash)

    def set_password(self, raw_password):
        """Set user password (hashes automatically)."""
        self.password_hash = make_password(raw_password)

    def get_full_name(self):
        """Return full name or email if name not set."""
        if self.first_name or self.last_name:
            return f"{self.first_name} {self.last_name}".strip()
        return self.email

    def get_username(self):
        return self.email

    def update_last_login(self):
        """Update last_login_at to current time."""
        self.last_login_at = timezone.now()
        self.save(update_fields=['last_login_at'])

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    @property
    def is_staff(self):
        """Superusers are the only Django admin users."""
        return self.is_superuser

    def has_perm(self, perm, obj=None):
        """Django admin permission check; venue permissions live in VenueRolesPermissionsService."""
        return self.is_active and self.is_superuser

    def has_perms(self, perm_list, obj=None):
        return self.is_active and self.is_superuser

    def has_module_perms(self, app_label):
        return self.is_active and self.is_superuser

    def natural_key(self):
        return (self.email,)


class VenuePermissionManager(models.Manager):
    """Manager for VenuePermission queries."""

    def by_name(self, name):
        """Find permission by name."""
        return self.filter(name=name).first()

    def by_category(self, category):
        """Get all permissions in a category, ordered by name."""
        return self.filter(category=category).order_by('name')

    def system(self):
        """Get system-defined permissions ordered by category then name."""
        return self.filter(is_system_permission=True).order_by('category', 'name')

    def get_or_create_permission(self, name, description='', category='', is_system_permission=True):
        """Get or create permission (idempotent)."""
        return self.get_or_create(
            name=name,
            defaults={
                'description': description,
                'category': category or name.split('.', 1)[0],
                'is_system_permission': is_system_permission,
            }
        )


class VenuePermission(BaseModel):
    """
    Global permission definitions shared by all venues.

    The catalog in apps.rbac.catalog is seeded by the
    seed_venue_permissions command.
    """

    CATEGORY_CHOICES = [(category.value, category.value.title()) for category in PermissionCategory]

    name = models.CharField(
        max_length=100,
        unique=True,
        db_index=True,
        help_text="Unique permission name (e.g., 'staff.manage_roles')"
    )
    description = models.TextField(
        blank=True,
        help_text="What this permission allows"
    )
    category = models.CharField(
        max_length=50,
        choices=CATEGORY_CHOICES,
        db_index=True,
        help_text="Permission category (e.g., 'staff', 'payroll')"
    )
    is_system_permission = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this permission is part of the seeded catalog"
    )

    objects = VenuePermissionManager()

    class Meta:
        db_table = 'venue_permissions'
        ordering = ['category', 'name']
        indexes = [
            models.Index(fields=['category', 'name']),
            models.Index(fields=['is_system_permission', 'category']),
        ]

    def __str__(self):
        return self.name


class VenueRoleManager(models.Manager):
    """Manager for VenueRole queries with venue scoping."""

    def for_venue(self, venue_id):
        """Active roles for a venue, highest level first then by name."""
        return self.filter(venue_id=venue_id, is_active=True).order_by('-level', 'name')

    def by_name(self, venue_id, name):
        """Find an active role by venue and name."""
        return self.filter(venue_id=venue_id, name=name, is_active=True).first()


class VenueRole(BaseModel):
    """
    Per-venue role definitions.

    Deleting a role sets is_active to False. Its bindings and assignments stay
    in place but no longer contribute to anyone's permissions.
    """

    venue = models.ForeignKey(
        'venues.Venue',
        on_delete=models.CASCADE,
        related_name='roles',
        db_index=True,
        help_text="Venue this role belongs to"
    )
    name = models.CharField(
        max_length=100,
        help_text="Role name (e.g., 'Bar Manager')"
    )
    description = models.TextField(
        blank=True,
        help_text="Role description"
    )
    level = models.PositiveSmallIntegerField(
        default=1,
        db_index=True,
        help_text="Authority level; higher means more authority (display ordering only)"
    )
    is_system_role = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a seeded system role"
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="False once the role has been deleted"
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venue_roles_created',
        help_text="User who created the role"
    )

    objects = VenueRoleManager()

    class Meta:
        db_table = 'venue_roles'
        ordering = ['venue', '-level', 'name']
        indexes = [
            models.Index(fields=['venue', 'is_active', 'level']),
            models.Index(fields=['venue', 'name']),
        ]

    def __str__(self):
        return f"{self.name} (level {self.level})"


class VenueRolePermissionManager(models.Manager):
    """Manager for VenueRolePermission queries."""

    def for_role(self, role):
        return self.filter(role=role)

    def grant_permission(self, role, permission, granted_by=None):
        """Bind permission to role; rebinding only refreshes attribution."""
        return self.update_or_create(
            role=role,
            permission=permission,
            defaults={'granted_by': granted_by}
        )


class VenueRolePermission(BaseModel):
    """
    Maps permissions to roles.

    At most one row per (role, permission). Removal is a hard delete.
    """

    role = models.ForeignKey(
        VenueRole,
        on_delete=models.CASCADE,
        related_name='role_permissions',
        db_index=True,
        help_text="Role that grants this permission"
    )
    permission = models.ForeignKey(
        VenuePermission,
        on_delete=models.CASCADE,
        related_name='role_permissions',
        db_index=True,
        help_text="Permission being granted"
    )
    granted_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='role_permissions_granted',
        help_text="User who last bound this permission"
    )
    granted_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the binding was last written"
    )

    objects = VenueRolePermissionManager()

    class Meta:
        db_table = 'venue_role_permissions'
        ordering = ['role', 'permission']
        constraints = [
            models.UniqueConstraint(fields=['role', 'permission'], name='uniq_venue_role_permission'),
        ]

    def __str__(self):
        return f"{self.role.name} -> {self.permission.name}"


class VenueUserRoleQuerySet(models.QuerySet):

    def active(self, now=None):
        """Assignments that currently confer their role."""
        now = now or timezone.now()
        return self.filter(is_active=True).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=now)
        )

    def for_user(self, venue_id, user_id):
        return self.filter(venue_id=venue_id, user_id=user_id)


class VenueUserRole(BaseModel):
    """
    Assigns a role to a user within a venue.

    A user may hold several assignments at once; their permissions union.
    Revoking flips is_active to False so the history remains.
    """

    venue = models.ForeignKey(
        'venues.Venue',
        on_delete=models.CASCADE,
        related_name='user_roles',
        db_index=True,
        help_text="Venue the assignment applies to"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='venue_roles',
        db_index=True,
        help_text="User holding the role"
    )
    role = models.ForeignKey(
        VenueRole,
        on_delete=models.CASCADE,
        related_name='user_roles',
        db_index=True,
        help_text="Role assigned"
    )
    assigned_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venue_role_assignments_made',
        help_text="User who assigned this role"
    )
    assigned_at = models.DateTimeField(
        default=timezone.now,
        help_text="When role was assigned"
    )
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Assignment stops conferring the role after this time"
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="False once the assignment has been revoked"
    )
    notes = models.TextField(
        blank=True,
        help_text="Free-text notes about the assignment"
    )

    objects = VenueUserRoleQuerySet.as_manager()

    class Meta:
        db_table = 'venue_user_roles'
        ordering = ['-assigned_at']
        indexes = [
            models.Index(fields=['venue', 'user', 'is_active']),
            models.Index(fields=['role', 'is_active']),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.role.name}"

    def is_live(self, now=None):
        """Whether this assignment currently confers its role."""
        now = now or timezone.now()
        return self.is_active and (self.expires_at is None or self.expires_at > now)


class VenueUserPermissionOverrideQuerySet(models.QuerySet):

    def live(self, now=None):
        """Overrides that have not expired."""
        now = now or timezone.now()
        return self.filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))

    def for_user(self, venue_id, user_id):
        return self.filter(venue_id=venue_id, user_id=user_id)


class VenueUserPermissionOverride(BaseModel):
    """
    Per-user permission override (grant or deny).

    A live override decides its permission outright: a deny silences every
    role-derived grant and a grant adds a permission no role confers.
    Expired overrides are ignored at read time and are never swept.
    """

    venue = models.ForeignKey(
        'venues.Venue',
        on_delete=models.CASCADE,
        related_name='permission_overrides',
        db_index=True,
        help_text="Venue the override applies to"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='venue_permission_overrides',
        db_index=True,
        help_text="User the override applies to"
    )
    permission = models.ForeignKey(
        VenuePermission,
        on_delete=models.CASCADE,
        related_name='overrides',
        db_index=True,
        help_text="Permission being granted or denied"
    )
    is_granted = models.BooleanField(
        help_text="True = grant, False = deny"
    )
    granted_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venue_overrides_made',
        help_text="User who wrote this override"
    )
    granted_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the override was last written"
    )
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Override is ignored after this time"
    )
    reason = models.TextField(
        blank=True,
        help_text="Reason for this override"
    )

    objects = VenueUserPermissionOverrideQuerySet.as_manager()

    class Meta:
        db_table = 'venue_user_permission_overrides'
        ordering = ['venue', 'user', 'permission']
        constraints = [
            models.UniqueConstraint(
                fields=['venue', 'user', 'permission'],
                name='uniq_venue_user_permission_override'
            ),
        ]
        indexes = [
            models.Index(fields=['venue', 'user', 'expires_at']),
        ]

    def __str__(self):
        action = "GRANT" if self.is_granted else "DENY"
        return f"{action} {self.permission.name} to {self.user_id}"

    def is_live(self, now=None):
        now = now or timezone.now()
        return self.expires_at is None or self.expires_at > now


class AppendOnlyError(Exception):
    """Raised on attempts to modify or remove an audit log entry."""


class VenuePermissionAuditLogQuerySet(models.QuerySet):

    def for_venue(self, venue_id):
        return self.filter(venue_id=venue_id)

    def update(self, **kwargs):
        raise AppendOnlyError("Audit log entries cannot be updated")

    def delete(self):
        raise AppendOnlyError("Audit log entries cannot be deleted")


class VenuePermissionAuditLog(BaseModel):
    """
    Append-only audit trail of venue authorization changes.
    """

    ACTION_ROLE_CREATED = 'role_created'
    ACTION_ROLE_UPDATED = 'role_updated'
    ACTION_ROLE_DELETED = 'role_deleted'
    ACTION_PERMISSIONS_ASSIGNED = 'permissions_assigned'
    ACTION_PERMISSIONS_REMOVED = 'permissions_removed'
    ACTION_ROLE_ASSIGNED = 'role_assigned'
    ACTION_ROLE_REMOVED = 'role_removed'
    ACTION_OVERRIDE_ADDED = 'override_added'
    ACTION_OVERRIDE_REMOVED = 'override_removed'
    ACTION_DEFAULT_ROLES_CREATED = 'default_roles_created'

    ACTION_CHOICES = [
        (ACTION_ROLE_CREATED, 'Role created'),
        (ACTION_ROLE_UPDATED, 'Role updated'),
        (ACTION_ROLE_DELETED, 'Role deleted'),
        (ACTION_PERMISSIONS_ASSIGNED, 'Permissions assigned to role'),
        (ACTION_PERMISSIONS_REMOVED, 'Permissions removed from role'),
        (ACTION_ROLE_ASSIGNED, 'Role assigned'),
        (ACTION_ROLE_REMOVED, 'Role removed'),
        (ACTION_OVERRIDE_ADDED, 'Override added'),
        (ACTION_OVERRIDE_REMOVED, 'Override removed'),
        (ACTION_DEFAULT_ROLES_CREATED, 'Default roles created'),
    ]

    venue = models.ForeignKey(
        'venues.Venue',
        on_delete=models.CASCADE,
        related_name='permission_audit_logs',
        db_index=True,
        help_text="Venue this action belongs to"
    )
    action_type = models.CharField(
        max_length=50,
        choices=ACTION_CHOICES,
        db_index=True,
        help_text="Action performed"
    )
    performed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venue_audit_actions',
        help_text="User who performed the action (null for system actions)"
    )
    target_user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venue_audit_targets',
        help_text="User affected by the action"
    )
    role = models.ForeignKey(
        VenueRole,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="Role affected by the action"
    )
    permission = models.ForeignKey(
        VenuePermission,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="Permission affected by the action"
    )
    details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Free-form details of the change"
    )
    performed_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the action was performed"
    )

    # Request Context
    ip_address = models.GenericIPAddressField(
        null=True,
        blank=True,
        help_text="IP address of the request"
    )
    user_agent = models.TextField(
        blank=True,
        help_text="User agent string"
    )
    request_id = models.CharField(
        max_length=64,
        blank=True,
        db_index=True,
        help_text="Request ID for tracing"
    )

    objects = VenuePermissionAuditLogQuerySet.as_manager()

    class Meta:
        db_table = 'venue_permission_audit_log'
        ordering = ['-performed_at', '-created_at']
        indexes = [
            models.Index(fields=['venue', 'performed_at']),
            models.Index(fields=['venue', 'action_type', 'performed_at']),
            models.Index(fields=['target_user', 'performed_at']),
        ]

    def __str__(self):
        return f"{self.venue_id} - {self.action_type} @ {self.performed_at:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyError("Audit log entries cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError("Audit log entries cannot be deleted")

    @classmethod
    def log_change(cls, venue_id, action_type, performed_by=None, target_user_id=None,
                   role_id=None, permission_id=None, details=None, request=None,
                   performed_at=None, using='default'):
        """
        Append an audit entry, never raising.

        The insert runs in its own savepoint so a failure leaves an enclosing
        transaction usable and the triggering change intact.

        Args:
            venue_id: Venue the change belongs to
            action_type: One of the ACTION_* constants
            performed_by: User performing the action (None for system actions)
            target_user_id: User affected by the change
            role_id: Role affected by the change
            permission_id: Permission affected by the change
            details: Free-form JSON payload
            request: Django request object (for IP, user agent, request ID)
            performed_at: Timestamp of the change (defaults to now)
            using: Database alias

        Returns:
            VenuePermissionAuditLog instance, or None if the write failed
        """
        if performed_by is not None and not performed_by.is_authenticated:
            performed_by = None

        log_data = {
            'venue_id': venue_id,
            'action_type': action_type,
            'performed_by': performed_by,
            'target_user_id': target_user_id,
            'role_id': role_id,
            'permission_id': permission_id,
            'details': details or {},
            'performed_at': performed_at or timezone.now(),
        }

        if request is not None:
            log_data['ip_address'] = cls._get_client_ip(request)
            log_data['user_agent'] = request.META.get('HTTP_USER_AGENT', '')
            log_data['request_id'] = str(getattr(request, 'request_id', '') or '')

        try:
            with transaction.atomic(using=using):
                cls._detach_missing_references(log_data, using)
                entry = cls(**log_data)
                entry.save(using=using)
        except Exception as e:
            logger.error(
                f"Failed to write permission audit log: {e}",
                extra={
                    'action_type': action_type,
                    'venue_id': str(venue_id),
                },
                exc_info=True
            )
            return None
        return entry

    @staticmethod
    def _detach_missing_references(log_data, using):
        """
        Null out references to rows that do not exist, keeping the raw ids in details.

        Foreign keys are checked at commit, so a dangling id would otherwise
        fail the caller's transaction instead of this insert.
        """
        from apps.venues.models import Venue

        if not Venue.objects.using(using).filter(pk=log_data['venue_id']).exists():
            raise LookupError(f"Venue {log_data['venue_id']} does not exist")

        references = (
            ('target_user_id', User),
            ('role_id', VenueRole),
            ('permission_id', VenuePermission),
        )
        for key, model in references:
            value = log_data[key]
            if value is None:
                continue
            try:
                exists = model._default_manager.using(using).filter(pk=value).exists()
            except DjangoValidationError:
                exists = False
            if not exists:
                log_data[key] = None
                log_data['details'] = {**log_data['details'], key: str(value)}

    @staticmethod
    def _get_client_ip(request):
        """Extract client IP from request."""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
