# apps/stationsapp/tests/factories.py
import uuid

import factory
from factory.django import DjangoModelFactory

from apps.stationsapp.models import Counter, Purpose, Station


class StationFactory(DjangoModelFactory):
    class Meta:
        model = Station

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Station {n}")
    type = Purpose.PAYMENT
    description = factory.Faker("sentence")


class CounterFactory(DjangoModelFactory):
    class Meta:
        model = Counter

    id = factory.LazyFunction(uuid.uuid4)
    station = factory.SubFactory(StationFactory)
    number = factory.Sequence(lambda n: n + 1)
    assigned_staff_id = factory.Sequence(lambda n: f"staff-{n}")
