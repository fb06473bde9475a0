# apps/eventsapp/apps.py
from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class EventsAppConfig(AppConfig):
    name = "apps.eventsapp"
    label = "eventsapp"
    verbose_name = _("Events")
    default_auto_field = "django.db.models.BigAutoField"
