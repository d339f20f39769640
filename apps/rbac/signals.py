"""
RBAC signals for automatic role seeding.

Seeds the system roles when a new venue is created and assigns the
Venue Owner role to the creating user if specified.
"""
import logging
from django.db.models.signals import post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender='venues.Venue')
def seed_roles_on_venue_creation(sender, instance, created, **kwargs):
    """
    Automatically seed system roles when a new venue is created.

    This signal:
    1. Creates the system roles with their default permissions
    2. Assigns the Venue Owner role to ``instance._created_by_user`` if set
    """
    if not created or kwargs.get('raw'):
        return

    # Import here to avoid circular imports
    from apps.rbac.catalog import SystemRoleName
    from apps.rbac.services import venue_rbac

    creator = getattr(instance, '_created_by_user', None)
    roles = venue_rbac.create_default_roles(instance.id, created_by=creator)

    if creator is not None:
        owner_role = next(role for role in roles if role.name == SystemRoleName.VENUE_OWNER.value)
        venue_rbac.assign_user_role(
            {
                'venue_id': instance.id,
                'user_id': creator.id,
                'role_id': owner_role.id,
                'notes': 'Venue creator',
            },
            assigned_by=creator,
        )
        logger.info(
            "Assigned Venue Owner role to venue creator",
            extra={'venue_id': str(instance.id), 'user_id': str(creator.id)}
        )
