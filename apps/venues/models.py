"""
Venue models.

A venue owns its roles, role assignments, permission overrides and
permission audit trail.
"""
from django.core.exceptions import ValidationError
from django.db import models
from apps.core.models import BaseModel


class VenueManager(models.Manager):
    """Manager for venue queries."""

    def active(self):
        """Return only active venues."""
        return self.filter(status='active')

    def by_slug(self, slug):
        """Find venue by slug."""
        return self.filter(slug=slug).first()

    def resolve(self, identifier):
        """
        Find a venue by slug or by UUID string.

        Returns None when nothing matches or the identifier is not a
        valid UUID and matches no slug.
        """
        venue = self.by_slug(identifier)
        if venue:
            return venue
        try:
            return self.filter(id=identifier).first()
        except (ValueError, ValidationError):
            return None


class Venue(BaseModel):
    """
    Venue model representing an isolated venue account.

    Creating a venue seeds its system roles. Set ``_created_by_user`` on the
    instance before the first save to have that user assigned the
    Venue Owner role.
    """

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('suspended', 'Suspended'),
        ('closed', 'Closed'),
    ]

    name = models.CharField(
        max_length=255,
        help_text="Venue name"
    )
    slug = models.SlugField(
        unique=True,
        max_length=100,
        help_text="URL-friendly identifier"
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='active',
        db_index=True,
        help_text="Current venue status"
    )
    contact_email = models.EmailField(
        null=True,
        blank=True,
        help_text="Primary contact email"
    )
    timezone = models.CharField(
        max_length=50,
        default='UTC',
        help_text="Venue timezone"
    )
    created_by = models.ForeignKey(
        'rbac.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venues_created',
        help_text="User who created the venue"
    )

    # Custom manager
    objects = VenueManager()

    class Meta:
        db_table = 'venues'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at']),
        ]

    def __str__(self):
        return f"{self.name} ({self.slug})"

    def is_active(self):
        """Check if the venue accepts requests."""
        return self.status == 'active'
