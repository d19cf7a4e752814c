from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.stationsapp.tests.factories import CounterFactory, StationFactory


class StationModelTest(TestCase):
    def test_str_representation(self):
        """Test the string representation of a Station"""
        station = StationFactory(name="Registrar", type="registrar")
        self.assertEqual(str(station), "Registrar (registrar)")


class CounterModelTest(TestCase):
    def setUp(self):
        self.station = StationFactory(name="Clinic", type="clinic")

    def test_str_representation(self):
        """Test the string representation of a Counter"""
        counter = CounterFactory(station=self.station, number=2)
        self.assertEqual(str(counter), "Clinic - Counter 2")

    def test_is_active_follows_staff_assignment(self):
        """Test a counter is active only while staffed"""
        counter = CounterFactory(station=self.station, assigned_staff_id="staff-7")
        self.assertTrue(counter.is_active)

        counter.assigned_staff_id = None
        self.assertFalse(counter.is_active)

    def test_counter_number_unique_per_station(self):
        """Test two counters of a station cannot share a number"""
        CounterFactory(station=self.station, number=1)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CounterFactory(station=self.station, number=1)
