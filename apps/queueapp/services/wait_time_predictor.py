import logging

from django.core.cache import cache
from django.db import transaction

from apps.queueapp.constants import QueueStatus, queue_setting
from apps.queueapp.models import QueueEntry
from apps.queueapp.utils.queue_utils import minutes_between, round_half_up
from apps.stationsapp.services.station_service import StationService

logger = logging.getLogger(__name__)


class WaitTimePredictor:
    """
    Wait time estimation from historical service durations.

    The average service time comes from the most recently completed entries
    at a station, and the estimate for a customer is the time needed to clear
    everyone ahead of them spread over the counters currently staffed.
    """

    @staticmethod
    def _average_cache_key(station_id):
        return f"queue:avg_service_minutes:{station_id}"

    @staticmethod
    def get_average_service_time_minutes(station_id, use_cache=True):
        """
        Average service duration (served -> completed) at a station in minutes.

        Uses the most recent completed entries, ignores samples outside the
        configured bounds, and falls back to the default when none qualify.
        With ``use_cache=False`` the cache is neither read nor written, for
        callers inside a transaction that has not committed yet.
        """
        cache_key = WaitTimePredictor._average_cache_key(station_id)
        if use_cache:
            cached = cache.get(cache_key)
            if cached is not None:
                return cached

        recent_entries = QueueEntry.objects.filter(
            station_id=station_id,
            status=QueueStatus.COMPLETED,
            served_at__isnull=False,
            completed_at__isnull=False,
        ).order_by("-completed_at")[: queue_setting("RECENT_COMPLETED_LIMIT")]

        min_minutes = queue_setting("MIN_SERVICE_MINUTES")
        max_minutes = queue_setting("MAX_SERVICE_MINUTES")

        durations = []
        for entry in recent_entries:
            duration = minutes_between(entry.served_at, entry.completed_at)
            if min_minutes <= duration <= max_minutes:  # Ignore outliers
                durations.append(duration)

        if durations:
            average = sum(durations) / len(durations)
        else:
            average = queue_setting("DEFAULT_SERVICE_MINUTES")

        if use_cache:
            cache.set(cache_key, average, queue_setting("AVERAGE_SERVICE_CACHE_TTL"))
        return average

    @staticmethod
    def invalidate_average_service_time(station_id):
        cache.delete(WaitTimePredictor._average_cache_key(station_id))

    @staticmethod
    def get_effective_counters(station_id):
        """Staffed counters at the station, never less than 1"""
        return max(1, StationService.count_active_counters(station_id))

    @staticmethod
    def calculate_estimated_wait_time(station_id, position):
        """Minutes until the customer at ``position`` is likely to be called"""
        people_ahead = max(0, position - 1)
        if people_ahead == 0:
            return 0

        average = WaitTimePredictor.get_average_service_time_minutes(station_id)
        counters = WaitTimePredictor.get_effective_counters(station_id)
        return round_half_up(people_ahead * average / counters)

    @staticmethod
    def refresh_estimated_wait_times_for_station(station_id, use_cache=True):
        """
        Rewrite the cached estimate of every active entry at a station.

        Entries are walked in position order so each estimate is the time to
        clear the entries strictly ahead of it. Returns the number updated.
        """
        entries = list(
            QueueEntry.objects.active().for_station(station_id).order_by("position")
        )
        if not entries:
            return 0

        average = WaitTimePredictor.get_average_service_time_minutes(station_id, use_cache)
        counters = WaitTimePredictor.get_effective_counters(station_id)

        for people_ahead, entry in enumerate(entries):
            entry.estimated_wait_time = round_half_up(people_ahead * average / counters)

        with transaction.atomic():
            QueueEntry.objects.bulk_update(entries, ["estimated_wait_time"])

        logger.debug(
            f"Refreshed wait times for {len(entries)} entries at station {station_id} "
            f"(avg={average:.2f}m, counters={counters})"
        )
        return len(entries)
