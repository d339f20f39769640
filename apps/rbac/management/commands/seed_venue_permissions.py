"""
Management command to seed the venue permission catalog.

Creates every VenuePermission defined in apps.rbac.catalog. This command is
idempotent and safe to re-run.
"""
from django.core.management.base import BaseCommand, CommandError
from apps.core.exceptions import ServiceError
from apps.rbac.catalog import PermissionCategory, PermissionName
from apps.rbac.models import VenuePermission
from apps.rbac.services import venue_rbac


class Command(BaseCommand):
    help = 'Seed the venue permission catalog (idempotent)'

    def handle(self, *args, **options):
        """Create or update all catalog permissions."""

        self.stdout.write('Seeding venue permissions...\n')

        try:
            created_count, updated_count = venue_rbac.sync_permission_catalog()
        except ServiceError as e:
            raise CommandError(e.message)

        total = len(PermissionName)
        self.stdout.write(
            self.style.SUCCESS(
                f'\n✓ Seeding complete: {created_count} created, {updated_count} updated, '
                f'{total - created_count - updated_count} unchanged'
            )
        )

        # Display summary by category
        self.stdout.write('\n' + '=' * 70)
        self.stdout.write('Permissions Summary by Category:')
        self.stdout.write('=' * 70)

        for category in PermissionCategory:
            names = VenuePermission.objects.by_category(category.value).values_list('name', flat=True)
            self.stdout.write(f'\n{category.value.upper()} ({len(names)}):')
            for name in names:
                self.stdout.write(f'  • {name}')
