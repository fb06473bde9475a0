# apps/eventsapp/tests/factories.py
import uuid

import factory
from factory.django import DjangoModelFactory

from apps.eventsapp.models import Event, EventHost
from apps.hostsapp.tests.factories import HostFactory


class EventFactory(DjangoModelFactory):
    class Meta:
        model = Event

    id = factory.LazyFunction(uuid.uuid4)
    slug = factory.Sequence(lambda n: f"event-{n}")
    name = factory.Sequence(lambda n: f"Office Hours {n}")
    host = factory.SubFactory(HostFactory)
    meeting_type = "one_on_one"
    duration_minutes = 30
    min_notice_hours = 24
    booking_window_days = 60
    buffer_before = 0
    buffer_after = 0
    start_time_increment = 30
    max_attendees = 1
    display_timezone = "America/New_York"
    round_robin_strategy = "cycle"
    round_robin_period = "all_time"


class EventHostFactory(DjangoModelFactory):
    class Meta:
        model = EventHost

    id = factory.LazyFunction(uuid.uuid4)
    event = factory.SubFactory(EventFactory)
    host = factory.SubFactory(HostFactory)
    role = "host"
    priority = 3
