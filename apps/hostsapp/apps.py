# apps/hostsapp/apps.py
from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class HostsAppConfig(AppConfig):
    name = "apps.hostsapp"
    label = "hostsapp"
    verbose_name = _("Hosts & Availability")
    default_auto_field = "django.db.models.BigAutoField"
