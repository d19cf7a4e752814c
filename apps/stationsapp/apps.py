from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StationsAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.stationsapp"
    verbose_name = _("Stations and Counters")
