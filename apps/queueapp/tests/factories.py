# apps/queueapp/tests/factories.py
import uuid

import factory
from factory.django import DjangoModelFactory

from apps.queueapp.constants import QueueStatus
from apps.queueapp.models import QueueEntry
from apps.queueapp.utils.queue_utils import format_queue_number
from apps.stationsapp.tests.factories import StationFactory


class QueueEntryFactory(DjangoModelFactory):
    class Meta:
        model = QueueEntry

    id = factory.LazyFunction(uuid.uuid4)
    station = factory.SubFactory(StationFactory)
    purpose = factory.LazyAttribute(lambda o: o.station.type)
    customer_email = factory.Sequence(lambda n: f"student{n}@neu.edu.ph")
    status = QueueStatus.WAITING
    position = 1
    queue_number = factory.LazyAttribute(lambda o: format_queue_number(o.purpose, o.position))
