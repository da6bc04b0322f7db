"""Email + password authentication backend.

Accounts are created with ``username`` equal to the lower-cased email,
but clients log in with an ``email`` field.  This backend resolves that
field so SimpleJWT's token view can authenticate storefront users.
"""

from __future__ import annotations

import structlog
from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

logger = structlog.get_logger(__name__)


class EmailBackend(ModelBackend):
    def authenticate(self, request, email=None, password=None, **kwargs):
        if email is None or password is None:
            return None

        User = get_user_model()
        user = User._default_manager.filter(email__iexact=email.strip()).first()
        if user is None:
            # Unknown emails still pay for one hash.
            User().set_password(password)
            logger.info("auth.login_failed", reason="unknown_email")
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        logger.info("auth.login_failed", reason="bad_credentials", user_id=user.pk)
        return None
