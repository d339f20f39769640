"""
Custom authentication backend for VenueHub.

Provides email-based authentication compatible with Django admin.
"""
from django.contrib.auth.backends import BaseBackend
from django.contrib.auth import get_user_model

User = get_user_model()


class EmailAuthBackend(BaseBackend):
    """
    Authenticate using email address instead of username.

    This backend is compatible with Django admin and session authentication.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate user by email and password.

        Django admin passes the email as ``username``.

        Returns:
            User instance if authentication succeeds, None otherwise
        """
        email = username or kwargs.get('email')

        if not email or not password:
            return None

        user = User.objects.by_email(email)
        if user is None:
            # Hash once so unknown emails take as long as wrong passwords
            User().set_password(password)
            return None

        if user.is_active and user.check_password(password):
            return user

        return None

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValueError):
            return None
