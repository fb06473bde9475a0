# apps/bookingapp/urls.py
from django.urls import path

from apps.bookingapp.views import (
    AvailableTimesView,
    RoundRobinSelectView,
    RoundRobinStatsView,
    TroubleshootView,
)

urlpatterns = [
    path(
        "events/<uuid:event_id>/troubleshoot/",
        TroubleshootView.as_view(),
        name="event-troubleshoot",
    ),
    path(
        "events/<uuid:event_id>/available-times/",
        AvailableTimesView.as_view(),
        name="event-available-times",
    ),
    path(
        "events/<uuid:event_id>/round-robin/",
        RoundRobinStatsView.as_view(),
        name="event-round-robin-stats",
    ),
    path(
        "events/<uuid:event_id>/round-robin/select/",
        RoundRobinSelectView.as_view(),
        name="event-round-robin-select",
    ),
]
