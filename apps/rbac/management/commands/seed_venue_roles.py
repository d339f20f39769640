"""
Management command to seed system roles for venues.

Creates the system roles (Venue Owner, Venue Manager, ... Viewer) with
their default permissions for one or all venues. This command is
idempotent and safe to re-run.
"""
from django.core.management.base import BaseCommand, CommandError
from apps.core.exceptions import ServiceError
from apps.rbac.catalog import SYSTEM_ROLES
from apps.rbac.services import venue_rbac
from apps.venues.models import Venue


class Command(BaseCommand):
    help = 'Seed system roles for venue(s) (idempotent)'

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            '--venue',
            type=str,
            help='Venue ID or slug to seed roles for',
        )
        parser.add_argument(
            '--all',
            action='store_true',
            help='Seed roles for all venues',
        )

    def handle(self, *args, **options):
        """Seed system roles for specified venue(s)."""

        venue_identifier = options.get('venue')
        seed_all = options.get('all')

        if not venue_identifier and not seed_all:
            raise CommandError(
                'You must specify either --venue=<id|slug> or --all'
            )

        if venue_identifier and seed_all:
            raise CommandError(
                'Cannot specify both --venue and --all'
            )

        if seed_all:
            venues = list(Venue.objects.all())
            self.stdout.write(f'Seeding roles for all {len(venues)} venues...\n')
        else:
            venue = Venue.objects.resolve(venue_identifier)
            if not venue:
                raise CommandError(f'Venue not found: {venue_identifier}')
            venues = [venue]
            self.stdout.write(f'Seeding roles for venue: {venue.name}\n')

        for venue in venues:
            self.stdout.write(f'\n{venue.name} ({venue.slug}):')
            try:
                roles = venue_rbac.create_default_roles(venue.id)
            except ServiceError as e:
                raise CommandError(f'{venue.slug}: {e.message}')

            for role in roles:
                self.stdout.write(
                    self.style.HTTP_INFO(f'    {role.name} (level {role.level})')
                )

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✓ Seeding complete: {len(SYSTEM_ROLES)} system roles ensured '
                f'across {len(venues)} venue(s)'
            )
        )
