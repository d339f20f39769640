"""
Django admin configuration for core app.
"""
from django.contrib import admin


# Customize admin site header and title
admin.site.site_header = "VenueHub Administration"
admin.site.site_title = "VenueHub Admin"
admin.site.index_title = "Venue roles and permissions"
