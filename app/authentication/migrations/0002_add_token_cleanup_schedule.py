"""
Schedule the hourly cleanup of expired refresh and verification tokens.

Expiry is enforced at redemption time, so the cleanup only keeps the
refresh_tokens and user_tokens tables from growing without bound.
"""

from django.db import migrations

TASK_NAME = "Auth: Cleanup Expired Tokens"


def create_periodic_tasks(apps, schema_editor):
    """Create the hourly token cleanup schedule."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule_1hour, _ = IntervalSchedule.objects.get_or_create(
        every=1,
        period="hours",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "authentication.tasks.cleanup_expired_tokens",
            "interval": schedule_1hour,
            "enabled": True,
            "description": (
                "Deletes refresh tokens and verification tokens whose "
                "expiry has passed."
            ),
        },
    )


def remove_periodic_tasks(apps, schema_editor):
    """Remove the cleanup schedule on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")
    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("authentication", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
