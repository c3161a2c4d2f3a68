"""
Single-use verification tokens.

Tokens are stored in the ``user_tokens`` table keyed by their own value and
tagged with a purpose. Redeeming a token deletes its row, so each token
succeeds at most once; unknown, expired and already-redeemed tokens all
return None.

Purposes:
    - email_verification: 64-hex token mailed after registration
    - password_reset: 64-hex token mailed by forgot-password or returned by
      the verify-code confirmation
    - verify_password: 6-digit numeric code for the verify-code flow
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.helpers import generate_numeric_code, generate_token

if TYPE_CHECKING:
    from authentication.models import User

logger = logging.getLogger(__name__)


class VerificationTokenService:
    """
    Issue and redeem purpose-tagged, expiring, single-use tokens.

    Usage:
        from authentication.models import VerificationToken
        from authentication.services import VerificationTokenService

        token = VerificationTokenService.issue(
            user, VerificationToken.Purpose.EMAIL_VERIFICATION
        )
        user_id = VerificationTokenService.redeem(
            token, VerificationToken.Purpose.EMAIL_VERIFICATION
        )
    """

    CODE_DIGITS = 6
    # Six-digit codes share the primary key space with every other token
    MAX_CODE_ATTEMPTS = 5

    @staticmethod
    def _generate(purpose: str) -> str:
        from authentication.models import VerificationToken

        if purpose == VerificationToken.Purpose.VERIFY_PASSWORD:
            return generate_numeric_code(VerificationTokenService.CODE_DIGITS)
        return generate_token()

    @staticmethod
    def issue(user: User, purpose: str) -> str:
        """
        Create a token for the user and purpose.

        Args:
            user: Token owner
            purpose: A VerificationToken.Purpose value

        Returns:
            The raw token (or numeric code) to deliver to the user
        """
        from authentication.models import VerificationToken

        expires_at = timezone.now() + settings.VERIFICATION_TOKEN_LIFETIME
        attempts = VerificationTokenService.MAX_CODE_ATTEMPTS

        for attempt in range(1, attempts + 1):
            token = VerificationTokenService._generate(purpose)
            try:
                with transaction.atomic():
                    VerificationToken.objects.create(
                        token=token,
                        user=user,
                        purpose=purpose,
                        expires_at=expires_at,
                    )
            except IntegrityError:
                if attempt == attempts:
                    raise
                logger.debug(f"{purpose} token collision, regenerating")
                continue
            logger.debug(f"Issued {purpose} token for user_id={user.pk}")
            return token

    @staticmethod
    def issue_code(user: User) -> str:
        """
        Replace the user's verify-password codes with a fresh one.

        Only the most recent code is valid.
        """
        from authentication.models import VerificationToken

        purpose = VerificationToken.Purpose.VERIFY_PASSWORD
        VerificationTokenService.revoke(user, purpose)
        return VerificationTokenService.issue(user, purpose)

    @staticmethod
    def redeem(token: str | None, purpose: str, user: User | None = None) -> int | None:
        """
        Consume a token and return its owner's id.

        The row is deleted as part of redemption. Two concurrent redemptions
        of the same token cannot both succeed: only the request whose delete
        removed the row gets the user id.

        Args:
            token: Raw token value presented by the client
            purpose: Expected purpose; a token issued for another purpose
                does not match
            user: When given, the token must also belong to this user

        Returns:
            The user id, or None if the token is invalid, expired or used
        """
        from authentication.models import VerificationToken

        if not token:
            return None

        matches = VerificationToken.objects.unexpired().filter(
            token=token, purpose=purpose
        )
        if user is not None:
            matches = matches.filter(user=user)

        user_id = matches.values_list("user_id", flat=True).first()
        if user_id is None:
            return None

        deleted, _ = matches.delete()
        if not deleted:
            return None

        logger.info(f"Redeemed {purpose} token for user_id={user_id}")
        return user_id

    @staticmethod
    def revoke(user: User, purpose: str) -> int:
        """Delete all of the user's tokens for a purpose."""
        from authentication.models import VerificationToken

        deleted, _ = VerificationToken.objects.filter(user=user, purpose=purpose).delete()
        return deleted
