"""
Authentication flows.

This module provides the AuthService class, which orchestrates the
credential store, the token services and the notifier into the user-facing
flows: registration, login, refresh, logout, email verification, password
reset, the verify-code variant, social login, profile and role management.

Related files:
    - services/token_service.py: Access/refresh token issuance and rotation
    - services/verification_service.py: Single-use verification tokens
    - tasks.py: Async email sending
    - views.py: HTTP layer calling these methods

Security:
    - Unknown emails and wrong passwords produce the same error
    - Enumeration-sensitive flows never reveal whether an account exists
    - Emails are queued after commit; delivery failures never fail a flow
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from authentication.services.token_service import TokenService
from authentication.services.verification_service import VerificationTokenService
from authentication.validators import validate_password_strength
from core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from toolkit.helpers import mask_email

if TYPE_CHECKING:
    from authentication.models import Profile, User
    from authentication.providers import SocialIdentity
    from authentication.services.token_service import TokenPair

logger = logging.getLogger(__name__)


# Editable profile fields, in API order
PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "title",
    "function",
    "geo_id",
    "avatar_id",
    "pen_name",
    "location",
)
NULLABLE_PROFILE_FIELDS = ("geo_id", "avatar_id")


def _queue_task(task, *args) -> None:
    """
    Queue a Celery task once the current transaction commits.

    Broker failures are logged and swallowed so that mail delivery never
    decides the outcome of the flow that triggered it.
    """

    def _send():
        try:
            task.delay(*args)
        except Exception:
            logger.exception(f"Failed to queue task {task.name}")

    transaction.on_commit(_send)


class AuthService:
    """
    Centralized authentication business logic.

    Every method is a static entry point used by the views; errors are
    raised as core.exceptions subclasses and rendered by the API
    exception handler.

    Usage:
        from authentication.services import AuthService

        user = AuthService.register("a@x.com", "Passw0rd1")
        user, tokens = AuthService.login("a@x.com", "Passw0rd1")
        user, tokens = AuthService.refresh(tokens.refresh_token)
        AuthService.logout(tokens.refresh_token)
    """

    # =========================================================================
    # Registration and login
    # =========================================================================

    @staticmethod
    def check_password_strength(password: str) -> None:
        """
        Raise ValidationError (400) if the password is too weak.

        Raises:
            ValidationError: WEAK_PASSWORD with one message per broken rule
        """
        try:
            validate_password_strength(password)
        except DjangoValidationError as e:
            raise ValidationError(
                "Password does not meet requirements",
                error_code="WEAK_PASSWORD",
                details={"password": e.messages},
            ) from e

    @staticmethod
    def register(
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> User:
        """
        Create a pending account and queue its verification email.

        Args:
            email: Email address (stored lowercased)
            password: Plaintext password
            first_name: Optional first name for the profile stub
            last_name: Optional last name for the profile stub

        Returns:
            The created User (status pending)

        Raises:
            ValidationError: If the password is too weak
            ConflictError: If the email is already registered
        """
        from authentication.models import Profile, User, VerificationToken
        from authentication.tasks import send_verification_email

        AuthService.check_password_strength(password)

        with transaction.atomic():
            try:
                with transaction.atomic():
                    user = User.objects.create_user(email=email, password=password)
            except IntegrityError as e:
                logger.info(f"Registration rejected, email exists: {mask_email(email)}")
                raise ConflictError(
                    "Email already exists", error_code="EMAIL_EXISTS"
                ) from e

            Profile.objects.create(
                user=user,
                first_name=(first_name or "").strip(),
                last_name=(last_name or "").strip(),
            )
            token = VerificationTokenService.issue(
                user, VerificationToken.Purpose.EMAIL_VERIFICATION
            )
            _queue_task(send_verification_email, user.pk, token)

        logger.info(f"User registered: {mask_email(user.email)} (id={user.pk})")
        return user

    @staticmethod
    def authenticate(email: str, password: str) -> User:
        """
        Check an email/password pair and the account status.

        Raises:
            AuthenticationError: INVALID_CREDENTIALS for unknown emails,
                wrong or unusable passwords; ACCOUNT_PENDING or
                ACCOUNT_SUSPENDED for correct credentials on an
                account that is not active
        """
        from authentication.models import User

        user = User.objects.filter(email=User.objects.normalize_email(email)).first()
        if user is None:
            # Run the hasher once so unknown emails take as long as known ones
            User().set_password(password)
            raise AuthenticationError(
                "Invalid credentials", error_code="INVALID_CREDENTIALS"
            )

        if not user.check_password(password):
            logger.info(f"Failed login for user_id={user.pk}")
            raise AuthenticationError(
                "Invalid credentials", error_code="INVALID_CREDENTIALS"
            )

        if user.status == User.Status.PENDING:
            raise AuthenticationError(
                "Account not verified. Please check your email for verification link.",
                error_code="ACCOUNT_PENDING",
            )
        if user.status == User.Status.SUSPENDED:
            raise AuthenticationError(
                "Account suspended. Please contact support.",
                error_code="ACCOUNT_SUSPENDED",
            )
        return user

    @staticmethod
    def login(email: str, password: str) -> tuple[User, TokenPair]:
        """
        Authenticate and open a new session.

        Returns:
            Tuple of (user, TokenPair)
        """
        user = AuthService.authenticate(email, password)

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        tokens = TokenService.issue_tokens(user)

        logger.info(f"User logged in: user_id={user.pk}")
        return user, tokens

    @staticmethod
    def refresh(refresh_token: str | None) -> tuple[User, TokenPair]:
        """Rotate a refresh token. See TokenService.rotate_refresh_token."""
        return TokenService.rotate_refresh_token(refresh_token)

    @staticmethod
    def logout(refresh_token: str | None) -> None:
        """Revoke the session's refresh token. Absence is not an error."""
        if TokenService.revoke_refresh_token(refresh_token):
            logger.info("Refresh token revoked on logout")

    # =========================================================================
    # Email verification
    # =========================================================================

    @staticmethod
    def verify_email(token: str) -> User:
        """
        Redeem an email verification token and activate the account.

        Raises:
            ValidationError: INVALID_TOKEN if the token is unknown,
                expired or already used
        """
        from authentication.models import User, VerificationToken

        with transaction.atomic():
            user_id = VerificationTokenService.redeem(
                token, VerificationToken.Purpose.EMAIL_VERIFICATION
            )
            user = User.objects.filter(pk=user_id).first() if user_id else None
            if user is None:
                raise ValidationError(
                    "Invalid or expired verification token",
                    error_code="INVALID_TOKEN",
                )
            if user.status == User.Status.PENDING:
                AuthService.activate_user(user)

        return user

    @staticmethod
    def resend_verification(email: str) -> None:
        """
        Replace a pending account's verification token and mail it again.

        Does nothing, silently, when no pending account has this email.
        """
        from authentication.models import User, VerificationToken
        from authentication.tasks import send_verification_email

        user = User.objects.filter(
            email=User.objects.normalize_email(email),
            status=User.Status.PENDING,
        ).first()
        if user is None:
            logger.debug(f"Resend verification skipped for {mask_email(email)}")
            return

        purpose = VerificationToken.Purpose.EMAIL_VERIFICATION
        with transaction.atomic():
            VerificationTokenService.revoke(user, purpose)
            token = VerificationTokenService.issue(user, purpose)
            _queue_task(send_verification_email, user.pk, token)

        logger.info(f"Verification email re-sent for user_id={user.pk}")

    # =========================================================================
    # Password reset
    # =========================================================================

    @staticmethod
    def request_password_reset(email: str) -> None:
        """
        Issue a password reset token and mail it, if the account exists.

        Callers must respond identically whether or not anything was sent.
        """
        from authentication.models import User, VerificationToken
        from authentication.tasks import send_password_reset_email

        user = User.objects.filter(email=User.objects.normalize_email(email)).first()
        if user is None:
            logger.debug(f"Password reset requested for unknown email {mask_email(email)}")
            return

        with transaction.atomic():
            token = VerificationTokenService.issue(
                user, VerificationToken.Purpose.PASSWORD_RESET
            )
            _queue_task(send_password_reset_email, user.pk, token)

        logger.info(f"Password reset requested for user_id={user.pk}")

    @staticmethod
    def reset_password(token: str, password: str) -> User:
        """
        Redeem a reset token and set a new password.

        Every refresh token of the user is revoked, ending all sessions.

        Raises:
            ValidationError: WEAK_PASSWORD, or INVALID_TOKEN if the token is
                unknown, expired or already used
        """
        from authentication.models import User, VerificationToken

        AuthService.check_password_strength(password)

        with transaction.atomic():
            user_id = VerificationTokenService.redeem(
                token, VerificationToken.Purpose.PASSWORD_RESET
            )
            user = User.objects.filter(pk=user_id).first() if user_id else None
            if user is None:
                raise ValidationError(
                    "Invalid or expired reset token", error_code="INVALID_TOKEN"
                )
            user.set_password(password)
            user.save(update_fields=["password"])
            TokenService.revoke_all_for_user(user)

        logger.info(f"Password reset completed for user_id={user.pk}")
        return user

    @staticmethod
    def request_verify_code(email: str) -> None:
        """
        Mail a fresh 6-digit verification code, if the account exists.

        Earlier codes of the user stop working.
        """
        from authentication.models import User
        from authentication.tasks import send_verify_code_email

        user = User.objects.filter(email=User.objects.normalize_email(email)).first()
        if user is None:
            logger.debug(f"Verify code requested for unknown email {mask_email(email)}")
            return

        with transaction.atomic():
            code = VerificationTokenService.issue_code(user)
            _queue_task(send_verify_code_email, user.pk, code)

        logger.info(f"Verify code issued for user_id={user.pk}")

    @staticmethod
    def confirm_verify_code(email: str, code: str) -> str:
        """
        Exchange a verification code for a password reset token.

        Args:
            email: Account the code was sent to
            code: 6-digit code from the email

        Returns:
            A password_reset token accepted by reset_password()

        Raises:
            ValidationError: INVALID_CODE if the code does not match the
                account, is expired or was already used
        """
        from authentication.models import User, VerificationToken

        user = User.objects.filter(email=User.objects.normalize_email(email)).first()

        with transaction.atomic():
            user_id = None
            if user is not None:
                user_id = VerificationTokenService.redeem(
                    code, VerificationToken.Purpose.VERIFY_PASSWORD, user=user
                )
            if user_id is None:
                raise ValidationError(
                    "Invalid or expired verification code", error_code="INVALID_CODE"
                )
            reset_token = VerificationTokenService.issue(
                user, VerificationToken.Purpose.PASSWORD_RESET
            )

        logger.info(f"Verify code confirmed for user_id={user.pk}")
        return reset_token

    # =========================================================================
    # Social login
    # =========================================================================

    @staticmethod
    def social_login(identity: SocialIdentity) -> tuple[User, Profile, TokenPair]:
        """
        Find or create the user behind a provider identity and sign them in.

        New accounts are created active with an unusable password. Pending
        accounts are activated, since the provider vouches for the email.
        Name fields are copied to the profile when the provider sent them.

        Args:
            identity: Normalized identity returned by an IdentityProvider

        Returns:
            Tuple of (user, profile, TokenPair)

        Raises:
            AuthenticationError: EMAIL_UNVERIFIED if the provider has not
                verified the email; ACCOUNT_SUSPENDED for suspended accounts
        """
        from authentication.models import Profile, User

        if not identity.email or not identity.verified_email:
            raise AuthenticationError(
                "Email not verified by provider", error_code="EMAIL_UNVERIFIED"
            )

        email = User.objects.normalize_email(identity.email)

        with transaction.atomic():
            user = User.objects.filter(email=email).first()
            if user is None:
                try:
                    with transaction.atomic():
                        user = User.objects.create_user(
                            email=email, status=User.Status.ACTIVE
                        )
                    logger.info(f"User created from social login: user_id={user.pk}")
                except IntegrityError:
                    # Concurrent first login with the same email
                    user = User.objects.get(email=email)

            if user.status == User.Status.SUSPENDED:
                raise AuthenticationError(
                    "Account suspended. Please contact support.",
                    error_code="ACCOUNT_SUSPENDED",
                )
            if user.status == User.Status.PENDING:
                AuthService.activate_user(user)

            profile, _ = Profile.objects.get_or_create(user=user)
            changed = []
            if identity.given_name:
                profile.first_name = identity.given_name
                changed.append("first_name")
            if identity.family_name:
                profile.last_name = identity.family_name
                changed.append("last_name")
            if changed:
                profile.save(update_fields=[*changed, "updated_at"])

            user.last_login = timezone.now()
            user.save(update_fields=["last_login"])
            tokens = TokenService.issue_tokens(user)

        return user, profile, tokens

    # =========================================================================
    # Account status
    # =========================================================================

    @staticmethod
    def activate_user(user: User) -> User:
        """Mark a pending account active."""
        from authentication.models import User

        user.status = User.Status.ACTIVE
        user.save(update_fields=["status"])
        logger.info(f"User activated: user_id={user.pk}")
        return user

    @staticmethod
    def suspend_user(user: User) -> User:
        """
        Suspend an account and end all of its sessions.

        The status change revokes every refresh token (signals.py).
        Outstanding access tokens stop working immediately because the
        authentication class re-reads the status on every request.
        """
        from authentication.models import User

        user.status = User.Status.SUSPENDED
        user.save(update_fields=["status"])

        logger.warning(f"User suspended: user_id={user.pk}")
        return user

    # =========================================================================
    # Profile and role
    # =========================================================================

    @staticmethod
    def get_or_create_profile(user: User) -> Profile:
        """
        Get or create user profile.

        Args:
            user: User instance

        Returns:
            Profile instance for the user
        """
        from authentication.models import Profile

        profile, created = Profile.objects.get_or_create(user=user)
        if created:
            logger.debug(f"Profile created for user_id={user.pk}")
        return profile

    @staticmethod
    def update_profile(user: User, data: dict, partial: bool = False) -> Profile:
        """
        Upsert the user's profile.

        Args:
            user: Profile owner
            data: Validated field values keyed by model field name
            partial: When False, fields absent from data are cleared
                (empty string, or None for the id references)

        Returns:
            The saved Profile
        """
        profile = AuthService.get_or_create_profile(user)

        for field in PROFILE_FIELDS:
            if field in data:
                value = data[field]
            elif partial:
                continue
            else:
                value = None if field in NULLABLE_PROFILE_FIELDS else ""
            if value is None and field not in NULLABLE_PROFILE_FIELDS:
                value = ""
            setattr(profile, field, value)

        profile.save()
        logger.info(f"Profile updated for user_id={user.pk}")
        return profile

    @staticmethod
    def change_role(actor: User, role: str, target_user_id: int | None = None) -> User:
        """
        Change a user's role.

        Only admins may change roles. The target defaults to the actor.

        Args:
            actor: Authenticated user performing the change
            role: New role, one of User.Role
            target_user_id: Id of the user to update (defaults to actor)

        Returns:
            The updated user

        Raises:
            PermissionDeniedError: If the actor is not an admin
            ValidationError: INVALID_ROLE for unknown roles
            NotFoundError: If the target user does not exist
        """
        from authentication.models import User

        if not actor.is_admin:
            logger.warning(f"Role change denied for user_id={actor.pk}")
            raise PermissionDeniedError(
                "Only administrators can change roles", error_code="ADMIN_REQUIRED"
            )

        if role not in User.Role.values:
            raise ValidationError(
                f"Invalid role. Valid roles are: {', '.join(User.Role.values)}",
                error_code="INVALID_ROLE",
            )

        if target_user_id is None or target_user_id == actor.pk:
            target = actor
        else:
            target = User.objects.filter(pk=target_user_id).first()
            if target is None:
                raise NotFoundError(
                    f"User with ID {target_user_id} not found",
                    error_code="USER_NOT_FOUND",
                    details={"user_id": target_user_id},
                )

        previous = target.role
        target.role = role
        target.save(update_fields=["role"])

        logger.info(
            f"Role changed for user_id={target.pk}: {previous} -> {role} "
            f"(by user_id={actor.pk})"
        )
        return target
