"""
Celery configuration for the NEUQueue platform.

This module sets up the Celery application used for periodic queue
maintenance: refreshing stored wait estimates and expiring stale sessions.
"""

import logging
import os

from celery import Celery
from celery.signals import task_failure, task_retry, task_success

logger = logging.getLogger(__name__)

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "neuqueue.settings.production")

app = Celery("neuqueue")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()

app.conf.task_routes = {
    "apps.queueapp.tasks.*": {"queue": "queues"},
    "apps.sessionsapp.tasks.*": {"queue": "default"},
}

app.conf.beat_schedule = {
    "refresh-queue-wait-times": {
        "task": "apps.queueapp.tasks.refresh_all_wait_times",
        "schedule": 300.0,  # Every 5 minutes
        "options": {"expires": 240},
    },
    "expire-stale-sessions": {
        "task": "apps.sessionsapp.tasks.expire_stale_sessions",
        "schedule": 1800.0,  # Every 30 minutes
    },
}


# Add task monitoring
@task_success.connect
def task_success_handler(sender=None, **kwargs):
    logger.info(f"Task {sender.name} succeeded")


@task_failure.connect
def task_failure_handler(sender=None, exception=None, **kwargs):
    logger.error(f"Task {sender.name} failed: {exception}")


@task_retry.connect
def task_retry_handler(sender=None, reason=None, **kwargs):
    logger.warning(f"Task {sender.name} retrying: {reason}")
