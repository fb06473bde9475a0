# apps/bookingapp/tests/factories.py
import datetime
import uuid

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from apps.bookingapp.models import Booking, Slot
from apps.eventsapp.tests.factories import EventFactory


class SlotFactory(DjangoModelFactory):
    class Meta:
        model = Slot

    id = factory.LazyFunction(uuid.uuid4)
    event = factory.SubFactory(EventFactory)
    start_time = factory.LazyFunction(lambda: timezone.now() + datetime.timedelta(days=3))
    end_time = factory.LazyAttribute(
        lambda o: o.start_time + datetime.timedelta(minutes=o.event.duration_minutes)
    )
    is_cancelled = False
    assigned_host = None


class BookingFactory(DjangoModelFactory):
    class Meta:
        model = Booking

    id = factory.LazyFunction(uuid.uuid4)
    slot = factory.SubFactory(SlotFactory)
    attendee_name = factory.Faker("name")
    attendee_email = factory.Faker("email")
    assigned_host = factory.LazyAttribute(lambda o: o.slot.assigned_host)
