# apps/reportanalyticsapp/services/analytics_service.py
"""
Analytics Service

Read-only reports over the queue ledger: average customer wait time and
completed throughput per station.
"""

from datetime import datetime, time, timedelta

from django.db.models import Count, Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.queueapp.constants import QueueStatus, queue_setting
from apps.queueapp.models import QueueEntry
from apps.queueapp.utils.queue_utils import minutes_between, round_half_up
from apps.stationsapp.models import Station
from core.exceptions import InvalidDataException


class AnalyticsService:
    """
    Service for station-level queue reports.
    Every report returns a mapping of station id to its metric.
    """

    @staticmethod
    def _parse_bound(value, end_of_day=False):
        try:
            # Bare dates first: parse_datetime would read them as midnight
            parsed_date = parse_date(value)
            if parsed_date is not None:
                parsed = datetime.combine(
                    parsed_date, time.max if end_of_day else time.min
                )
            else:
                parsed = parse_datetime(value)
                if parsed is None:
                    raise ValueError(value)
        except ValueError:
            raise InvalidDataException(
                "Invalid date format. Use ISO 8601 dates (YYYY-MM-DD).",
                details={"value": value},
            )

        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed

    @staticmethod
    def parse_date_range(start_date=None, end_date=None):
        """
        Turn optional query strings into an aware (start, end) pair.

        Args:
            start_date (str): ISO date or datetime
            end_date (str): ISO date or datetime; a bare date covers the whole day

        Returns:
            tuple: (start, end), or (None, None) when neither was given
        """
        if not start_date and not end_date:
            return None, None

        if not start_date or not end_date:
            raise InvalidDataException("Both start_date and end_date are required.")

        start = AnalyticsService._parse_bound(start_date)
        end = AnalyticsService._parse_bound(end_date, end_of_day=True)

        if start > end:
            raise InvalidDataException("start_date must be before end_date.")

        return start, end

    @staticmethod
    def get_average_wait_time(start=None, end=None):
        """
        Average time between joining and being called, per station.

        Without a range only the most recent served entries of each station
        are sampled. Samples outside the configured bounds are ignored.

        Returns:
            dict: {station_id: {station_name, average_wait_time_minutes, sample_count}}
        """
        min_minutes = queue_setting("MIN_WAIT_MINUTES")
        max_minutes = queue_setting("MAX_WAIT_MINUTES")

        results = {}
        for station in Station.objects.all():
            entries = QueueEntry.objects.filter(
                station=station,
                status__in=[QueueStatus.COMPLETED, QueueStatus.SERVING],
                served_at__isnull=False,
            ).only("created_at", "served_at")
            if start and end:
                entries = entries.filter(served_at__gte=start, served_at__lte=end)
                entries = entries.order_by("-served_at")
            else:
                entries = entries.order_by("-served_at")[: queue_setting("RECENT_SERVED_LIMIT")]

            waits = []
            for entry in entries:
                wait = minutes_between(entry.created_at, entry.served_at)
                if min_minutes <= wait <= max_minutes:
                    waits.append(wait)

            average = round_half_up(sum(waits) / len(waits), 1) if waits else 0

            results[str(station.id)] = {
                "station_name": station.name,
                "average_wait_time_minutes": average,
                "sample_count": len(waits),
            }

        return results

    @staticmethod
    def get_completed_throughput(start=None, end=None):
        """
        Number of completed entries per station in the range.

        Defaults to the last few days when no range is given.

        Returns:
            dict: {station_id: {station_name, completed_count}}
        """
        if not (start and end):
            end = timezone.now()
            start = end - timedelta(days=queue_setting("THROUGHPUT_DEFAULT_DAYS"))

        stations = Station.objects.annotate(
            completed_count=Count(
                "queue_entries",
                filter=Q(
                    queue_entries__status=QueueStatus.COMPLETED,
                    queue_entries__completed_at__gte=start,
                    queue_entries__completed_at__lte=end,
                ),
            )
        )

        return {
            str(station.id): {
                "station_name": station.name,
                "completed_count": station.completed_count,
            }
            for station in stations
        }
