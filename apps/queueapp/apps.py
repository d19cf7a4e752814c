from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class QueueAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.queueapp"
    verbose_name = _("Queue Management")
