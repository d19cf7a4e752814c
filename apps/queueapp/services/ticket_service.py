import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.queueapp.constants import QueueStatus
from apps.queueapp.models import QueueEntry
from apps.queueapp.services.queue_service import QueueService
from apps.queueapp.services.wait_time_predictor import WaitTimePredictor
from apps.sessionsapp.services.session_service import SessionService
from apps.stationsapp.services.station_service import StationService
from core.exceptions import InvalidStateTransitionException, ResourceNotFoundException

logger = logging.getLogger(__name__)


class TicketService:
    """
    Status transitions of a single queue entry.

    waiting -> serving -> completed, and waiting|serving -> cancelled|no_show.
    Terminal statuses never change again.
    """

    @staticmethod
    def _lock_entry(queue_id):
        """
        Lock the entry's station, then the entry itself.

        Station first, in the same order as joins, so that transitions and
        joins at one station cannot deadlock.
        """
        try:
            station_id = (
                QueueEntry.objects.filter(id=queue_id)
                .values_list("station_id", flat=True)
                .first()
            )
        except (ValidationError, ValueError):
            station_id = None
        if station_id is None:
            raise ResourceNotFoundException("Queue not found")

        StationService.get_station(station_id, for_update=True)
        return QueueEntry.objects.select_for_update().get(id=queue_id)

    @staticmethod
    def _ensure_transition(entry, target_status, action):
        if not entry.can_transition_to(target_status):
            logger.warning(
                f"Rejected {action} for {entry.queue_number}: status is {entry.status}"
            )
            raise InvalidStateTransitionException(
                f'Cannot {action}. Queue status is "{entry.status}"',
                current_status=entry.status,
            )

    @staticmethod
    def _leave_queue(entry, status, **fields):
        """
        Move an active entry to a terminal status and close the gap it leaves.

        Runs inside the caller's transaction with the station lock held.
        Estimates are computed from this transaction's view of the ledger, so
        the shared average cache is bypassed until the commit.
        """
        removed_position = entry.position
        entry.status = status
        for name, value in fields.items():
            setattr(entry, name, value)
        entry.save(update_fields=["status", *fields.keys()])

        SessionService.invalidate(entry.session_ref)
        QueueService.resequence_after_removal(entry.station_id, removed_position)
        WaitTimePredictor.refresh_estimated_wait_times_for_station(
            entry.station_id, use_cache=False
        )

    @staticmethod
    @transaction.atomic
    def start_service(queue_id, counter_id, acting_staff_id):
        """Call a waiting customer to a counter"""
        entry = TicketService._lock_entry(queue_id)
        TicketService._ensure_transition(entry, QueueStatus.SERVING, "start service")

        counter = StationService.get_counter(counter_id)

        entry.status = QueueStatus.SERVING
        entry.counter = counter
        entry.served_by = str(acting_staff_id) if acting_staff_id else ""
        entry.served_at = timezone.now()
        entry.save(update_fields=["status", "counter", "served_by", "served_at"])

        logger.info(f"{entry.queue_number} is being served at counter {counter.number}")
        return entry

    @staticmethod
    @transaction.atomic
    def complete_service(queue_id):
        """Finish serving a customer"""
        entry = TicketService._lock_entry(queue_id)
        TicketService._ensure_transition(entry, QueueStatus.COMPLETED, "complete service")

        TicketService._leave_queue(
            entry, QueueStatus.COMPLETED, completed_at=timezone.now()
        )

        # The station average only gains the new sample once it is committed
        station_id = entry.station_id
        transaction.on_commit(
            lambda: WaitTimePredictor.invalidate_average_service_time(station_id)
        )

        logger.info(f"{entry.queue_number} completed")
        return entry

    @staticmethod
    @transaction.atomic
    def cancel_queue(queue_id, acting_user_id=None):
        """Withdraw an entry, by staff or by the customer who owns it"""
        entry = TicketService._lock_entry(queue_id)
        TicketService._ensure_transition(entry, QueueStatus.CANCELLED, "cancel queue")

        TicketService._leave_queue(
            entry,
            QueueStatus.CANCELLED,
            cancelled_at=timezone.now(),
            cancelled_by=str(acting_user_id) if acting_user_id else "customer",
        )

        logger.info(f"{entry.queue_number} cancelled by {entry.cancelled_by}")
        return entry

    @staticmethod
    @transaction.atomic
    def mark_no_show(queue_id, acting_staff_id):
        """Record that a called customer did not turn up"""
        entry = TicketService._lock_entry(queue_id)
        TicketService._ensure_transition(entry, QueueStatus.NO_SHOW, "mark as no-show")

        TicketService._leave_queue(
            entry,
            QueueStatus.NO_SHOW,
            cancelled_at=timezone.now(),
            cancelled_by=str(acting_staff_id) if acting_staff_id else "",
        )

        logger.info(f"{entry.queue_number} marked as no-show")
        return entry
