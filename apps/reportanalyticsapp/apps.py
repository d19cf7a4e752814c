from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ReportAnalyticsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.reportanalyticsapp"
    verbose_name = _("Report Analytics")
