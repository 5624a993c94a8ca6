"""
Add celery-beat schedule for reconciling cashbox balances.

This migration creates the periodic task schedule for the
reconcile_cashboxes task, which replays every cashbox's entries and
repairs any cached balance that drifted from its history. The interval
comes from LEDGER_RECONCILIATION_INTERVAL_MINUTES.
"""

from django.conf import settings
from django.db import migrations

TASK_NAME = "Reconcile Cashbox Balances"


def create_periodic_task(apps, schema_editor):
    """Create the periodic task for cashbox reconciliation."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=settings.LEDGER_RECONCILIATION_INTERVAL_MINUTES,
        period="minutes",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "ledger.tasks.reconcile_cashboxes",
            "interval": schedule,
            "enabled": True,
            "description": (
                "Recalculates every cashbox balance from its ledger entries "
                "and corrects drift."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("ledger", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
