import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class SessionType(models.TextChoices):
    FORM = "form", _("Form")
    QUEUE = "queue", _("Queue")


class CustomerSession(models.Model):
    """Short-lived credential issued when a customer scans a station QR code"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    type = models.CharField(
        _("Type"), max_length=10, choices=SessionType.choices, default=SessionType.FORM
    )
    issued_at = models.DateTimeField(_("Issued At"), default=timezone.now)
    expires_at = models.DateTimeField(_("Expires At"))
    joined_at = models.DateTimeField(_("Joined At"), null=True, blank=True)
    used = models.BooleanField(_("Used"), default=False)
    used_at = models.DateTimeField(_("Used At"), null=True, blank=True)
    status = models.CharField(_("Status"), max_length=20, blank=True)
    # Staff member who generated the QR code
    created_by = models.CharField(_("Created By"), max_length=128, blank=True)

    class Meta:
        verbose_name = _("Customer Session")
        verbose_name_plural = _("Customer Sessions")
        indexes = [
            models.Index(fields=["used", "expires_at"]),
        ]

    def __str__(self):
        return f"{self.type} session {self.id}"

    @property
    def is_expired(self):
        return timezone.now() > self.expires_at
