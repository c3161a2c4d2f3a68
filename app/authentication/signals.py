"""
Django signals for authentication.

This module defines signal handlers for:
- Revoking every refresh token of a user whose status becomes suspended
- Logging account status transitions

Suspension can happen through AuthService.suspend_user, the admin action,
or by editing the status field in the admin; the handlers cover all three.

Related files:
    - models.py: User model
    - apps.py: Signal import in ready()
"""

import logging

from django.conf import settings
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=settings.AUTH_USER_MODEL)
def remember_previous_status(sender, instance, **kwargs):
    """Stash the stored status so post_save can detect a transition."""
    update_fields = kwargs.get("update_fields")
    if instance.pk is None or (
        update_fields is not None and "status" not in update_fields
    ):
        instance._previous_status = None
        return
    instance._previous_status = (
        sender.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def handle_status_change(sender, instance, created, **kwargs):
    """
    Log status transitions and end all sessions of suspended users.

    Args:
        sender: The User model class
        instance: The User instance that was saved
        created: Boolean indicating if this is a new record
        **kwargs: Additional signal arguments
    """
    previous = getattr(instance, "_previous_status", None)
    if created or previous is None or previous == instance.status:
        return

    logger.info(f"User {instance.pk} status changed: {previous} -> {instance.status}")

    if instance.status == sender.Status.SUSPENDED:
        from authentication.services import TokenService

        TokenService.revoke_all_for_user(instance)
