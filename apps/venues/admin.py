"""
Django admin configuration for venues app.
"""
from django.contrib import admin
from .models import Venue


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    """Admin interface for Venue model."""
    list_display = ['name', 'slug', 'status', 'contact_email', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'slug', 'contact_email']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']
