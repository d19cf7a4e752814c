from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class QueueStatus(models.TextChoices):
    WAITING = "waiting", _("Waiting")
    SERVING = "serving", _("Serving")
    COMPLETED = "completed", _("Completed")
    CANCELLED = "cancelled", _("Cancelled")
    NO_SHOW = "no_show", _("No Show")


ACTIVE_STATUSES = (QueueStatus.WAITING, QueueStatus.SERVING)
REMOVED_STATUSES = (QueueStatus.CANCELLED, QueueStatus.NO_SHOW)

# Allowed moves of the ledger state machine; terminal statuses have none
ALLOWED_TRANSITIONS = {
    QueueStatus.WAITING: (QueueStatus.SERVING, QueueStatus.CANCELLED, QueueStatus.NO_SHOW),
    QueueStatus.SERVING: (QueueStatus.COMPLETED, QueueStatus.CANCELLED, QueueStatus.NO_SHOW),
    QueueStatus.COMPLETED: (),
    QueueStatus.CANCELLED: (),
    QueueStatus.NO_SHOW: (),
}

PURPOSE_ABBREVIATIONS = {
    "payment": "PAY",
    "clinic": "CLI",
    "auditing": "AUD",
    "registrar": "REG",
}
DEFAULT_ABBREVIATION = "QUE"

DEFAULTS = {
    # Estimation engine
    "RECENT_COMPLETED_LIMIT": 20,
    "MIN_SERVICE_MINUTES": 0.17,
    "MAX_SERVICE_MINUTES": 120,
    "DEFAULT_SERVICE_MINUTES": 5,
    "AVERAGE_SERVICE_CACHE_TTL": 60,
    # Analytics
    "RECENT_SERVED_LIMIT": 50,
    "MIN_WAIT_MINUTES": 0.17,
    "MAX_WAIT_MINUTES": 240,
    "THROUGHPUT_DEFAULT_DAYS": 7,
    # Customer sessions
    "SESSION_LIFETIME_HOURS": 8,
}


def queue_setting(name):
    """Read a tunable from ``settings.NEUQUEUE`` falling back to the defaults above"""
    return getattr(settings, "NEUQUEUE", {}).get(name, DEFAULTS[name])
