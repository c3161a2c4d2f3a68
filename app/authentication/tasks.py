"""
Celery tasks for authentication.

This module defines async tasks for:
- Sending verification emails
- Sending password reset emails
- Sending verify-code emails
- Cleaning up expired tokens

Email tasks receive the raw token or code to embed in the message.
Tokens are never logged.

Related files:
    - services/auth_service.py: Queues these tasks after commit
    - migrations/0002_add_token_cleanup_schedule.py: Beat schedule for cleanup
    - toolkit/services/email.py: Email transport

Usage:
    from authentication.tasks import send_verification_email
    send_verification_email.delay(user_id, token)
"""

import logging
from urllib.parse import urlencode

from celery import shared_task
from django.conf import settings

from toolkit.services.email import EmailService

logger = logging.getLogger(__name__)


def _frontend_url(path: str, **params) -> str:
    return f"{settings.FRONTEND_URL}{path}?{urlencode(params)}"


def _lifetime_hours() -> int:
    return int(settings.VERIFICATION_TOKEN_LIFETIME.total_seconds() // 3600)


def _get_user(user_id: int):
    from authentication.models import User

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        logger.error(f"User {user_id} not found for email task")
    return user


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_verification_email(self, user_id: int, token: str) -> bool:
    """
    Send email verification link to user.

    Args:
        user_id: ID of the user to send email to
        token: Raw email_verification token

    Returns:
        True if email was sent, False if the user no longer exists
    """
    user = _get_user(user_id)
    if user is None:
        return False

    return EmailService.send(
        to=user.email,
        subject=f"Verify Your Email - {settings.EMAIL_BRAND_NAME}",
        template_name="authentication/emails/verification",
        context={
            "verification_url": _frontend_url("/auth/verify", token=token),
            "expiry_hours": _lifetime_hours(),
        },
    )


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_password_reset_email(self, user_id: int, token: str) -> bool:
    """
    Send password reset link to user.

    Args:
        user_id: ID of the user to send email to
        token: Raw password_reset token

    Returns:
        True if email was sent, False if the user no longer exists
    """
    user = _get_user(user_id)
    if user is None:
        return False

    return EmailService.send(
        to=user.email,
        subject=f"Reset Your Password - {settings.EMAIL_BRAND_NAME}",
        template_name="authentication/emails/password_reset",
        context={
            "reset_url": _frontend_url("/auth/reset-password", token=token),
            "expiry_hours": _lifetime_hours(),
        },
    )


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_verify_code_email(self, user_id: int, code: str) -> bool:
    """Send the 6-digit verification code to user."""
    user = _get_user(user_id)
    if user is None:
        return False

    return EmailService.send(
        to=user.email,
        subject=f"Your Verification Code - {settings.EMAIL_BRAND_NAME}",
        template_name="authentication/emails/verify_code",
        context={"code": code, "expiry_hours": _lifetime_hours()},
    )


@shared_task
def cleanup_expired_tokens() -> int:
    """
    Remove expired refresh and verification tokens.

    Expiry is already enforced at redemption time; this only keeps the
    tables small. Scheduled hourly via celery-beat.

    Returns:
        Number of rows deleted
    """
    from authentication.models import RefreshToken, VerificationToken

    refresh_deleted, _ = RefreshToken.objects.expired().delete()
    verification_deleted, _ = VerificationToken.objects.expired().delete()

    total = refresh_deleted + verification_deleted
    logger.info(
        f"Cleaned up {refresh_deleted} refresh and "
        f"{verification_deleted} verification tokens"
    )
    return total

