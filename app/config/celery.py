"""
Celery configuration for the auth service.

Celery runs the work that must not block a request:
- Outbound email (verification links, password reset links, verify codes)
- Periodic cleanup of expired refresh and verification tokens

Redis is both the message broker and result backend. Tasks are
auto-discovered from every installed Django app, and periodic schedules live
in the database (django-celery-beat), seeded by migrations.

Usage:
    from authentication.tasks import send_verification_email
    send_verification_email.delay(user.id, token)

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import logging
import os

from celery import Celery

logger = logging.getLogger(__name__)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()


@app.task(bind=True, ignore_result=True)
def debug_task(self):
    """Log the request context to verify worker connectivity."""
    logger.info("Celery debug task request: %r", self.request)
