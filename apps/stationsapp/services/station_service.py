import logging

from django.core.exceptions import ValidationError

from core.exceptions import ResourceNotFoundException

from ..models import Counter, Station

logger = logging.getLogger(__name__)


class StationService:
    """Read-only lookups over stations and counters"""

    @staticmethod
    def get_station(station_id, for_update=False):
        """
        Fetch a station or raise ResourceNotFoundException.

        With ``for_update`` the row is locked until the surrounding
        transaction ends; queue mutations use this as the per-station lock.
        """
        queryset = Station.objects.all()
        if for_update:
            queryset = queryset.select_for_update()

        try:
            return queryset.get(id=station_id)
        except (Station.DoesNotExist, ValidationError, ValueError):
            raise ResourceNotFoundException("Station not found.")

    @staticmethod
    def get_counter(counter_id):
        try:
            return Counter.objects.select_related("station").get(id=counter_id)
        except (Counter.DoesNotExist, ValidationError, ValueError):
            raise ResourceNotFoundException("Counter not found.")

    @staticmethod
    def count_active_counters(station_id):
        """Number of counters at the station with a staff member assigned"""
        return Counter.objects.filter(
            station_id=station_id, assigned_staff_id__isnull=False
        ).count()

    @staticmethod
    def get_available_stations():
        """Stations a customer may join, with their number of active counters"""
        stations = list(Station.objects.all())
        active = {}
        for counter in Counter.objects.filter(assigned_staff_id__isnull=False).only(
            "station_id"
        ):
            active[counter.station_id] = active.get(counter.station_id, 0) + 1

        for station in stations:
            station.active_counters = active.get(station.id, 0)

        return stations
