"""
Pytest configuration and fixtures.
"""
import pytest
from django.conf import settings
import django
from django.core.management import call_command


def pytest_configure(config):
    """Configure Django settings for tests."""
    settings.DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'ATOMIC_REQUESTS': False,
    }
    settings.SECURE_SSL_REDIRECT = False
    django.setup()


@pytest.fixture(scope='session')
def django_db_setup(django_db_setup, django_db_blocker):
    """Set up test database, creating tables for apps without migrations."""
    with django_db_blocker.unblock():
        call_command('migrate', '--run-syncdb', verbosity=0)


@pytest.fixture
def user(db):
    """Create a test user."""
    from apps.rbac.models import User
    return User.objects.create_user(
        email='staff@example.com',
        password='testpass123',
        first_name='Sam',
        last_name='Staff'
    )


@pytest.fixture
def admin_user(db):
    """Create a user who administers venues."""
    from apps.rbac.models import User
    return User.objects.create_user(
        email='admin@example.com',
        password='testpass123',
        first_name='Alex',
        last_name='Admin'
    )


@pytest.fixture
def other_user(db):
    """Create a second, unrelated user."""
    from apps.rbac.models import User
    return User.objects.create_user(
        email='other@example.com',
        password='testpass123'
    )


@pytest.fixture
def venue(db):
    """Create a test venue (system roles are seeded on creation)."""
    from apps.venues.models import Venue
    return Venue.objects.create(
        name='Blue Room',
        slug='blue-room',
        status='active'
    )


@pytest.fixture
def other_venue(db):
    """Create a second venue."""
    from apps.venues.models import Venue
    return Venue.objects.create(
        name='Green Hall',
        slug='green-hall',
        status='active'
    )


@pytest.fixture
def service():
    """Return a venue RBAC service bound to the default database."""
    from apps.rbac.services import VenueRolesPermissionsService
    return VenueRolesPermissionsService()


@pytest.fixture
def make_permission(db):
    """Factory for permissions outside the seeded catalog."""
    from apps.rbac.models import VenuePermission

    def _make(name, category='staff'):
        return VenuePermission.objects.get_or_create(
            name=name,
            defaults={'category': category, 'description': name, 'is_system_permission': False}
        )[0]

    return _make


@pytest.fixture
def make_role(db):
    """Factory for custom venue roles bound to the given permissions."""
    from apps.rbac.models import VenueRole, VenueRolePermission

    def _make(venue, name, permissions=(), level=1, is_active=True):
        role = VenueRole.objects.create(venue=venue, name=name, level=level, is_active=is_active)
        for permission in permissions:
            VenueRolePermission.objects.grant_permission(role, permission)
        return role

    return _make
