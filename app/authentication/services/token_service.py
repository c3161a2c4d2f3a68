"""
Access and refresh token issuance.

Access tokens are signed JWTs (simplejwt ``AccessToken``) carrying
``userId``, ``email`` and ``role``; they live for ACCESS_TOKEN_LIFETIME
(15 minutes) and are never stored.

Refresh tokens are opaque random strings stored in the ``refresh_tokens``
table with an absolute expiry of REFRESH_TOKEN_LIFETIME (7 days). Every
refresh rotates the token: the presented row is deleted and a new one is
issued in the same transaction.

Related files:
    - models.py: RefreshToken
    - authentication.py: Validates access tokens on protected requests
    - services/auth_service.py: Login, refresh and logout flows
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import AuthenticationError
from core.helpers import generate_token

if TYPE_CHECKING:
    from authentication.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    """Freshly minted credentials for one session."""

    access_token: str
    refresh_token: str


class TokenService:
    """
    Mint, validate, rotate and revoke session tokens.

    Usage:
        from authentication.services import TokenService

        pair = TokenService.issue_tokens(user)
        user, pair = TokenService.rotate_refresh_token(pair.refresh_token)
        TokenService.revoke_refresh_token(pair.refresh_token)
    """

    REFRESH_TOKEN_BYTES = 32

    @staticmethod
    def create_access_token(user: User) -> str:
        """
        Sign an access token for the user.

        The embedded role is informational; protected views re-read the
        user from the database on every request.
        """
        token = AccessToken.for_user(user)
        # for_user stringifies the id; clients expect the numeric pk
        token[api_settings.USER_ID_CLAIM] = user.pk
        token["email"] = user.email
        token["role"] = user.role
        return str(token)

    @staticmethod
    def decode_access_token(raw_token: str) -> AccessToken:
        """
        Verify signature and expiry of an access token.

        Raises:
            AuthenticationError: If the token is malformed, tampered with,
                signed with another key, or expired
        """
        try:
            return AccessToken(raw_token)
        except TokenError as e:
            raise AuthenticationError(
                "Invalid or expired access token", error_code="TOKEN_INVALID"
            ) from e

    @staticmethod
    def store_refresh_token(user: User) -> str:
        """Create and persist a new refresh token for the user."""
        from authentication.models import RefreshToken

        raw_token = generate_token(TokenService.REFRESH_TOKEN_BYTES)
        RefreshToken.objects.create(
            user=user,
            token=raw_token,
            expires_at=timezone.now() + settings.REFRESH_TOKEN_LIFETIME,
        )
        return raw_token

    @staticmethod
    def issue_tokens(user: User) -> TokenPair:
        """
        Mint an access token and persist a new refresh token.

        Args:
            user: The authenticated, active user

        Returns:
            TokenPair with both raw token strings
        """
        pair = TokenPair(
            access_token=TokenService.create_access_token(user),
            refresh_token=TokenService.store_refresh_token(user),
        )
        logger.debug(f"Issued token pair for user_id={user.pk}")
        return pair

    @staticmethod
    def validate_refresh_token(raw_token: str | None) -> int | None:
        """
        Look up the user id bound to an unexpired refresh token.

        Returns:
            The user id, or None if the token is unknown or expired
        """
        from authentication.models import RefreshToken

        if not raw_token:
            return None
        return (
            RefreshToken.objects.unexpired()
            .filter(token=raw_token)
            .values_list("user_id", flat=True)
            .first()
        )

    @staticmethod
    def rotate_refresh_token(raw_token: str | None) -> tuple[User, TokenPair]:
        """
        Exchange a refresh token for a new token pair.

        The old row is deleted before the new one is created, inside one
        transaction. When two requests present the same token concurrently,
        only the one whose delete removes the row proceeds; the other gets
        AuthenticationError.

        Args:
            raw_token: The refresh token presented by the client

        Returns:
            Tuple of (user, new TokenPair)

        Raises:
            AuthenticationError: If the token is missing, unknown, expired,
                already rotated, or the user is not active
        """
        from authentication.models import RefreshToken, User

        if not raw_token:
            raise AuthenticationError(
                "Refresh token not provided", error_code="REFRESH_TOKEN_MISSING"
            )

        with transaction.atomic():
            user_id = TokenService.validate_refresh_token(raw_token)
            if user_id is None:
                raise AuthenticationError(
                    "Invalid refresh token", error_code="REFRESH_TOKEN_INVALID"
                )

            deleted, _ = (
                RefreshToken.objects.unexpired().filter(token=raw_token).delete()
            )
            if not deleted:
                logger.warning(f"Refresh token reuse lost race for user_id={user_id}")
                raise AuthenticationError(
                    "Invalid refresh token", error_code="REFRESH_TOKEN_INVALID"
                )

            user = User.objects.filter(pk=user_id).first()
            if user is None or user.status != User.Status.ACTIVE:
                raise AuthenticationError(
                    "User not found or inactive", error_code="USER_INACTIVE"
                )

            pair = TokenService.issue_tokens(user)

        logger.info(f"Refresh token rotated for user_id={user.pk}")
        return user, pair

    @staticmethod
    def revoke_refresh_token(raw_token: str | None) -> bool:
        """
        Delete a refresh token. Idempotent.

        Returns:
            True if a row was deleted
        """
        from authentication.models import RefreshToken

        if not raw_token:
            return False
        deleted, _ = RefreshToken.objects.filter(token=raw_token).delete()
        return deleted > 0

    @staticmethod
    def revoke_all_for_user(user: User) -> int:
        """Delete every refresh token of the user (e.g. after a password reset)."""
        from authentication.models import RefreshToken

        deleted, _ = RefreshToken.objects.filter(user=user).delete()
        if deleted:
            logger.info(f"Revoked {deleted} refresh token(s) for user_id={user.pk}")
        return deleted
