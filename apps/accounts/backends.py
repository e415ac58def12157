# apps/accounts/backends.py
from django.contrib.auth.backends import ModelBackend

from apps.common.exceptions import ServiceError
from .services import IdentityService


class EmailBackend(ModelBackend):
    """
    Authenticate using email instead of username.

    Delegates to IdentityService.login_local so the admin site and the API
    share one credential check, including the timing-safe failure path.
    """
    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        # Support both 'email' and 'username' parameters
        email = email or username

        if not email or not password:
            return None

        try:
            user = IdentityService.login_local(email, password)
        except ServiceError:
            return None

        return user if self.user_can_authenticate(user) else None
