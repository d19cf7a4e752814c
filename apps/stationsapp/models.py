import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class Purpose(models.TextChoices):
    PAYMENT = "payment", _("Payment")
    CLINIC = "clinic", _("Clinic")
    AUDITING = "auditing", _("Auditing")
    REGISTRAR = "registrar", _("Registrar")


class Station(models.Model):
    """Service point with a fixed purpose, hosting one or more counters"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("Name"), max_length=100, unique=True)
    type = models.CharField(_("Type"), max_length=20, choices=Purpose.choices)
    description = models.TextField(_("Description"), blank=True)
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Station")
        verbose_name_plural = _("Stations")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["type"]),
        ]

    def __str__(self):
        return f"{self.name} ({self.type})"


class Counter(models.Model):
    """Staffed service window belonging to a station"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    station = models.ForeignKey(
        Station, on_delete=models.CASCADE, related_name="counters", verbose_name=_("Station")
    )
    number = models.PositiveIntegerField(_("Counter Number"))
    # Staff identity comes from the external auth provider, so no FK here
    assigned_staff_id = models.CharField(
        _("Assigned Staff"), max_length=128, null=True, blank=True
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    class Meta:
        verbose_name = _("Counter")
        verbose_name_plural = _("Counters")
        ordering = ["station", "number"]
        constraints = [
            models.UniqueConstraint(
                fields=["station", "number"], name="unique_counter_number_per_station"
            ),
        ]
        indexes = [
            models.Index(fields=["station", "assigned_staff_id"]),
        ]

    def __str__(self):
        return f"{self.station.name} - Counter {self.number}"

    @property
    def is_active(self):
        """A counter is active while a staff member is assigned to it"""
        return self.assigned_staff_id is not None
