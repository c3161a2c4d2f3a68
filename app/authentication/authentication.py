"""
Bearer token authentication for protected endpoints.

ActiveUserJWTAuthentication is the default DRF authentication class. For
every request carrying ``Authorization: Bearer <token>`` it:

    1. Verifies the access token signature and expiry (simplejwt)
    2. Re-fetches the user by the ``userId`` claim
    3. Rejects users that no longer exist or are not active

The email and role embedded in the token are never trusted; permission
checks read the freshly loaded user. A suspension therefore takes effect
on the next request, not when the token expires.

Failures raise AuthenticationFailed/InvalidToken, which DRF renders as
401 with ``WWW-Authenticate: Bearer``.
"""

from __future__ import annotations

import logging

from django.utils.translation import gettext_lazy as _
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken
from rest_framework_simplejwt.settings import api_settings

logger = logging.getLogger(__name__)


class ActiveUserJWTAuthentication(JWTAuthentication):
    """simplejwt authentication that only admits users whose status is active."""

    def get_user(self, validated_token):
        from authentication.models import User

        try:
            user_id = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError as e:
            raise InvalidToken(_("Token contained no recognizable user identification")) from e

        user = User.objects.filter(pk=user_id).first()
        if user is None:
            raise AuthenticationFailed(_("User not found"), code="user_not_found")

        if user.status != User.Status.ACTIVE:
            logger.info(f"Rejected access token for {user.status} user_id={user.pk}")
            raise AuthenticationFailed(_("User is inactive"), code="account_inactive")

        return user
