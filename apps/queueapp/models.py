import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.stationsapp.models import Counter, Purpose, Station

from .constants import ACTIVE_STATUSES, ALLOWED_TRANSITIONS, REMOVED_STATUSES, QueueStatus


class QueueEntryQuerySet(models.QuerySet):
    def active(self):
        """Entries still holding a position (waiting or serving)"""
        return self.filter(status__in=ACTIVE_STATUSES)

    def for_station(self, station_id):
        return self.filter(station_id=station_id)


class QueueEntry(models.Model):
    """One customer's visit to a station"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    station = models.ForeignKey(
        Station,
        on_delete=models.PROTECT,
        related_name="queue_entries",
        verbose_name=_("Station"),
    )
    # Kept for audit even if the counter is later removed
    counter = models.ForeignKey(
        Counter,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="queue_entries",
        verbose_name=_("Counter"),
        null=True,
        blank=True,
    )
    queue_number = models.CharField(_("Queue Number"), max_length=20)
    purpose = models.CharField(_("Purpose"), max_length=20, choices=Purpose.choices)
    customer_email = models.EmailField(_("Customer Email"))
    status = models.CharField(
        _("Status"), max_length=10, choices=QueueStatus.choices, default=QueueStatus.WAITING
    )
    position = models.PositiveIntegerField(_("Position"))
    estimated_wait_time = models.PositiveIntegerField(
        _("Estimated Wait Time (minutes)"), null=True, blank=True
    )
    session_ref = models.UUIDField(_("Session Reference"), null=True, blank=True)
    created_at = models.DateTimeField(_("Created At"), default=timezone.now, editable=False)
    served_at = models.DateTimeField(_("Served At"), null=True, blank=True)
    served_by = models.CharField(_("Served By"), max_length=128, blank=True)
    completed_at = models.DateTimeField(_("Completed At"), null=True, blank=True)
    cancelled_at = models.DateTimeField(_("Cancelled At"), null=True, blank=True)
    cancelled_by = models.CharField(_("Cancelled By"), max_length=128, blank=True)

    objects = QueueEntryQuerySet.as_manager()

    class Meta:
        verbose_name = _("Queue Entry")
        verbose_name_plural = _("Queue Entries")
        ordering = ["position"]
        indexes = [
            models.Index(fields=["station", "status", "position"]),
            models.Index(fields=["counter", "status"]),
            models.Index(fields=["station", "status", "completed_at"]),
            models.Index(fields=["session_ref"]),
            models.Index(fields=["served_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["station", "customer_email"],
                condition=Q(status__in=ACTIVE_STATUSES),
                name="unique_active_entry_per_customer",
            ),
            models.CheckConstraint(
                condition=Q(position__gte=1),
                name="queue_entry_position_positive",
            ),
            models.CheckConstraint(
                condition=~Q(status__in=[QueueStatus.SERVING, QueueStatus.COMPLETED])
                | Q(served_at__isnull=False),
                name="queue_entry_served_at_when_served",
            ),
            models.CheckConstraint(
                condition=(Q(status=QueueStatus.COMPLETED) & Q(completed_at__isnull=False))
                | (~Q(status=QueueStatus.COMPLETED) & Q(completed_at__isnull=True)),
                name="queue_entry_completed_at_iff_completed",
            ),
            models.CheckConstraint(
                condition=(Q(status__in=REMOVED_STATUSES) & Q(cancelled_at__isnull=False))
                | (~Q(status__in=REMOVED_STATUSES) & Q(cancelled_at__isnull=True)),
                name="queue_entry_cancelled_at_iff_removed",
            ),
        ]

    def __str__(self):
        return f"{self.queue_number} - {self.customer_email} ({self.status})"

    def save(self, *args, **kwargs):
        if self.customer_email:
            self.customer_email = self.customer_email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES

    def can_transition_to(self, status):
        return status in ALLOWED_TRANSITIONS.get(self.status, ())
