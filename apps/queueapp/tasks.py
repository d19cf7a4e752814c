import logging

from celery import shared_task

from .models import QueueEntry
from .services.wait_time_predictor import WaitTimePredictor

logger = logging.getLogger(__name__)


@shared_task
def refresh_all_wait_times():
    """Refresh stored wait estimates for every station that has people waiting"""
    station_ids = (
        QueueEntry.objects.active()
        .order_by()
        .values_list("station_id", flat=True)
        .distinct()
    )

    refreshed = 0
    for station_id in station_ids:
        try:
            refreshed += WaitTimePredictor.refresh_estimated_wait_times_for_station(station_id)
        except Exception as e:
            # One broken station must not stop the others
            logger.error(f"Error refreshing wait times for station {station_id}: {str(e)}")

    logger.info(f"Refreshed wait times for {refreshed} queue entries")
    return refreshed


@shared_task
def refresh_station_wait_times(station_id):
    """Refresh stored wait estimates for one station"""
    return WaitTimePredictor.refresh_estimated_wait_times_for_station(station_id)
