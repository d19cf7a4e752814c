import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from apps.queueapp.constants import QueueStatus
from apps.queueapp.filters import QueueEntryFilter
from apps.queueapp.models import QueueEntry
from apps.queueapp.utils.queue_utils import format_queue_number
from apps.sessionsapp.services.session_service import SessionService
from apps.stationsapp.services.station_service import StationService
from core.exceptions import (
    DuplicateResourceException,
    InvalidDataException,
    PurposeMismatchException,
    ResourceNotFoundException,
)
from core.utils.pagination import StartAfterCursorPagination

logger = logging.getLogger(__name__)

DUPLICATE_ENTRY_MESSAGE = "You are already in the queue, or try another email address"


class QueueService:
    """
    Station-level queue coordination.

    Every operation that changes positions at a station holds that station's
    row lock for the length of its transaction, so joins and removals at the
    same station are applied one after another.
    """

    @staticmethod
    def get_entry(queue_id):
        try:
            return QueueEntry.objects.select_related("station").get(id=queue_id)
        except (QueueEntry.DoesNotExist, ValidationError, ValueError):
            raise ResourceNotFoundException("Queue not found")

    @staticmethod
    @transaction.atomic
    def join_queue(station_id, customer_email, purpose, session_ref):
        """
        Add a customer to the end of a station's queue.

        Args:
            station_id: Station to join
            customer_email: Customer's email (stored lowercase)
            purpose: Purpose selected by the customer, must match the station type
            session_ref: Form session that authorised the join; consumed here

        Returns:
            QueueEntry: The new waiting entry
        """
        email = customer_email.strip().lower()
        station = StationService.get_station(station_id, for_update=True)

        if station.type != purpose:
            raise PurposeMismatchException(
                f'Purpose mismatch. Station type is "{station.type}" '
                f'but provided purpose is "{purpose}".'
            )

        active_entries = QueueEntry.objects.active().for_station(station.id)
        if active_entries.filter(customer_email=email).exists():
            logger.warning(f"Duplicate join attempt for {email} at station {station.name}")
            raise DuplicateResourceException(DUPLICATE_ENTRY_MESSAGE)

        SessionService.mark_joined(session_ref)

        position = active_entries.count() + 1
        try:
            # Savepoint so a constraint violation leaves the outer transaction usable
            with transaction.atomic():
                entry = QueueEntry.objects.create(
                    station=station,
                    queue_number=format_queue_number(purpose, position),
                    purpose=purpose,
                    customer_email=email,
                    status=QueueStatus.WAITING,
                    position=position,
                    session_ref=session_ref,
                )
        except IntegrityError:
            raise DuplicateResourceException(DUPLICATE_ENTRY_MESSAGE)

        logger.info(
            f"{entry.queue_number} joined station {station.name} at position {position}"
        )
        return entry

    @staticmethod
    def resequence_after_removal(station_id, removed_position):
        """
        Close the gap left by an entry that left the active set.

        Must run inside the transaction that removed the entry while the
        station lock is held. Returns the number of entries moved up.
        """
        to_shift = list(
            QueueEntry.objects.active()
            .for_station(station_id)
            .filter(position__gt=removed_position)
            .order_by("position")
        )
        if not to_shift:
            return 0

        for entry in to_shift:
            entry.position -= 1

        with transaction.atomic():
            QueueEntry.objects.bulk_update(to_shift, ["position"])

        logger.info(
            f"Resequenced {len(to_shift)} entries at station {station_id} "
            f"after removal of position {removed_position}"
        )
        return len(to_shift)

    @staticmethod
    def get_queue(session_ref, status=None):
        """Latest entry created through a customer session, optionally by status"""
        entries = QueueEntry.objects.select_related("station").filter(
            session_ref=session_ref
        )
        if status:
            entries = entries.filter(status=status)

        entry = entries.order_by("-created_at").first()
        if entry is None:
            raise ResourceNotFoundException("Queue not found")
        return entry

    @staticmethod
    def _filter_entries(entries, status=None, filters=None):
        data = dict(filters or {})
        if status:
            data["status"] = status

        filterset = QueueEntryFilter(data, queryset=entries)
        if not filterset.is_valid():
            raise InvalidDataException(
                "Invalid filter parameters.", details=filterset.errors.get_json_data()
            )
        return filterset.qs

    @staticmethod
    def list_queues_by_station(station_id, status=None, limit=None, cursor=None, filters=None):
        """
        Page through a station's entries in position order.

        Args:
            station_id: Owning station
            status: Optional status to match
            limit: Page size
            cursor: Id of the last entry of the previous page
            filters: Extra QueueEntryFilter parameters (email, created_after, ...)

        Returns:
            tuple: (entries, next_cursor)
        """
        station = StationService.get_station(station_id)
        entries = QueueEntry.objects.select_related("station").for_station(station.id)
        entries = QueueService._filter_entries(entries, status, filters)

        return StartAfterCursorPagination().paginate_queryset(
            entries, limit=limit, cursor=cursor
        )

    @staticmethod
    def list_queues_by_counter(counter_id, status=None, limit=None, cursor=None, filters=None):
        """
        Page through the entries handled at a counter in position order.

        Returns:
            tuple: (entries, next_cursor)
        """
        counter = StationService.get_counter(counter_id)
        entries = QueueEntry.objects.select_related("station").filter(counter_id=counter.id)
        entries = QueueService._filter_entries(entries, status, filters)

        return StartAfterCursorPagination().paginate_queryset(
            entries, limit=limit, cursor=cursor
        )

    @staticmethod
    def get_current_serving(counter_id):
        """Entry currently being served at a counter"""
        counter = StationService.get_counter(counter_id)
        entry = (
            QueueEntry.objects.select_related("station")
            .filter(counter_id=counter.id, status=QueueStatus.SERVING)
            .order_by("-served_at")
            .first()
        )
        if entry is None:
            raise ResourceNotFoundException("No customer is currently being served at this counter")
        return entry
