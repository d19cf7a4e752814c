import uuid
from unittest.mock import patch

from django.test import TestCase

from apps.queueapp.constants import QueueStatus
from apps.queueapp.models import QueueEntry
from apps.queueapp.services.queue_service import QueueService
from apps.queueapp.services.ticket_service import TicketService
from apps.queueapp.tests.factories import QueueEntryFactory
from apps.sessionsapp.models import CustomerSession, SessionType
from apps.sessionsapp.tests.factories import CustomerSessionFactory
from apps.stationsapp.tests.factories import CounterFactory, StationFactory
from core.exceptions import (
    DuplicateResourceException,
    InvalidDataException,
    InvalidStateTransitionException,
    PurposeMismatchException,
    ResourceNotFoundException,
)


class QueueTestMixin:
    def setUp(self):
        self.station = StationFactory(name="Cashier", type="payment")
        self.counter = CounterFactory(station=self.station, number=1, assigned_staff_id="staff-1")

    def join(self, email, station=None, purpose="payment"):
        session = CustomerSessionFactory()
        return QueueService.join_queue(
            station_id=(station or self.station).id,
            customer_email=email,
            purpose=purpose,
            session_ref=session.id,
        )

    def active_positions(self, station=None):
        return list(
            QueueEntry.objects.active()
            .for_station((station or self.station).id)
            .order_by("position")
            .values_list("position", flat=True)
        )


class JoinQueueTest(QueueTestMixin, TestCase):
    def test_join_queue(self):
        """Test joining an empty queue"""
        entry = self.join("Juan@NEU.edu.ph")

        self.assertIsInstance(entry, QueueEntry)
        self.assertEqual(entry.station_id, self.station.id)
        self.assertEqual(entry.status, QueueStatus.WAITING)
        self.assertEqual(entry.position, 1)
        self.assertEqual(entry.queue_number, "PAY-001")
        self.assertEqual(entry.customer_email, "juan@neu.edu.ph")
        self.assertIsNone(entry.counter)

    def test_join_appends_to_the_end(self):
        """Test each join takes the next position"""
        self.join("a@neu.edu.ph")
        self.join("b@neu.edu.ph")
        entry = self.join("c@neu.edu.ph")

        self.assertEqual(entry.position, 3)
        self.assertEqual(entry.queue_number, "PAY-003")
        self.assertEqual(self.active_positions(), [1, 2, 3])

    def test_join_switches_session_to_queue(self):
        """Test the form session becomes a queue session"""
        entry = self.join("juan@neu.edu.ph")

        session = CustomerSession.objects.get(id=entry.session_ref)
        self.assertEqual(session.type, SessionType.QUEUE)
        self.assertIsNotNone(session.joined_at)
        self.assertFalse(session.used)

    def test_join_purpose_mismatch(self):
        """Test the purpose must match the station type"""
        with self.assertRaises(PurposeMismatchException) as ctx:
            self.join("juan@neu.edu.ph", purpose="clinic")

        self.assertEqual(
            ctx.exception.message,
            'Purpose mismatch. Station type is "payment" but provided purpose is "clinic".',
        )
        self.assertFalse(QueueEntry.objects.exists())

    def test_join_unknown_station(self):
        """Test joining a station that does not exist"""
        with self.assertRaises(ResourceNotFoundException):
            QueueService.join_queue(
                station_id=uuid.uuid4(),
                customer_email="juan@neu.edu.ph",
                purpose="payment",
                session_ref=CustomerSessionFactory().id,
            )

    def test_join_duplicate_email(self):
        """Test an active customer cannot join the same station twice"""
        self.join("juan@neu.edu.ph")
        session = CustomerSessionFactory()

        with self.assertRaises(DuplicateResourceException):
            QueueService.join_queue(
                station_id=self.station.id,
                customer_email="JUAN@neu.edu.ph",
                purpose="payment",
                session_ref=session.id,
            )

        # The rejected attempt does not consume the session
        session.refresh_from_db()
        self.assertEqual(session.type, SessionType.FORM)
        self.assertEqual(QueueEntry.objects.count(), 1)

    def test_session_joins_at_most_once(self):
        """Test one form session cannot back two entries"""
        session = CustomerSessionFactory()
        QueueService.join_queue(self.station.id, "a@neu.edu.ph", "payment", session.id)

        with self.assertRaises(DuplicateResourceException):
            QueueService.join_queue(self.station.id, "b@neu.edu.ph", "payment", session.id)

        self.assertEqual(QueueEntry.objects.count(), 1)

    def test_rejoin_after_cancellation(self):
        """Test a customer may join again once their entry is terminal"""
        first = self.join("juan@neu.edu.ph")
        TicketService.cancel_queue(first.id)

        second = self.join("juan@neu.edu.ph")

        self.assertNotEqual(first.id, second.id)
        self.assertEqual(second.position, 1)

    def test_queue_number_after_compaction(self):
        """Test the queue number follows the position at join time"""
        first = self.join("a@neu.edu.ph")
        self.join("b@neu.edu.ph")
        self.join("c@neu.edu.ph")
        TicketService.cancel_queue(first.id)

        entry = self.join("d@neu.edu.ph")

        self.assertEqual(entry.position, 3)
        self.assertEqual(entry.queue_number, "PAY-003")


class TicketTransitionTest(QueueTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.first = self.join("a@neu.edu.ph")
        self.second = self.join("b@neu.edu.ph")
        self.third = self.join("c@neu.edu.ph")

    def refresh(self, *entries):
        for entry in entries:
            entry.refresh_from_db()

    def test_start_service(self):
        """Test calling a waiting customer to a counter"""
        entry = TicketService.start_service(self.first.id, self.counter.id, "staff-1")

        self.assertEqual(entry.status, QueueStatus.SERVING)
        self.assertEqual(entry.counter_id, self.counter.id)
        self.assertEqual(entry.served_by, "staff-1")
        self.assertIsNotNone(entry.served_at)
        # Serving entries keep their place
        self.assertEqual(self.active_positions(), [1, 2, 3])

    def test_start_service_unknown_counter(self):
        """Test starting service at a counter that does not exist"""
        with self.assertRaises(ResourceNotFoundException):
            TicketService.start_service(self.first.id, uuid.uuid4(), "staff-1")

        self.first.refresh_from_db()
        self.assertEqual(self.first.status, QueueStatus.WAITING)

    def test_start_service_twice(self):
        """Test a serving entry cannot be started again"""
        TicketService.start_service(self.first.id, self.counter.id, "staff-1")

        with self.assertRaises(InvalidStateTransitionException) as ctx:
            TicketService.start_service(self.first.id, self.counter.id, "staff-1")

        self.assertEqual(ctx.exception.message, 'Cannot start service. Queue status is "serving"')
        self.assertEqual(ctx.exception.details, {"current_status": "serving"})
        self.assertEqual(ctx.exception.status_code, 400)

    def test_complete_requires_serving(self):
        """Test a waiting entry cannot be completed"""
        with self.assertRaises(InvalidStateTransitionException) as ctx:
            TicketService.complete_service(self.first.id)

        self.assertEqual(
            ctx.exception.message, 'Cannot complete service. Queue status is "waiting"'
        )

    def test_complete_service(self):
        """Test completing closes the gap and refreshes estimates"""
        TicketService.start_service(self.first.id, self.counter.id, "staff-1")

        entry = TicketService.complete_service(self.first.id)

        self.assertEqual(entry.status, QueueStatus.COMPLETED)
        self.assertIsNotNone(entry.completed_at)
        self.refresh(self.second, self.third)
        self.assertEqual((self.second.position, self.third.position), (1, 2))
        self.assertEqual(self.second.estimated_wait_time, 0)
        self.assertEqual(self.third.estimated_wait_time, 5)

    def test_complete_invalidates_session(self):
        """Test the customer's session cannot be reused after completion"""
        TicketService.start_service(self.first.id, self.counter.id, "staff-1")
        TicketService.complete_service(self.first.id)

        session = CustomerSession.objects.get(id=self.first.session_ref)
        self.assertTrue(session.used)
        self.assertIsNotNone(session.used_at)
        self.assertEqual(session.status, "completed")

    @patch("apps.queueapp.services.wait_time_predictor.cache")
    def test_complete_invalidates_average_after_commit(self, mock_cache):
        """Test the cached station average is dropped only once completion commits"""
        TicketService.start_service(self.first.id, self.counter.id, "staff-1")

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            TicketService.complete_service(self.first.id)

        # Nothing computed inside the open transaction reaches the cache
        mock_cache.get.assert_not_called()
        mock_cache.set.assert_not_called()
        mock_cache.delete.assert_not_called()

        self.assertEqual(len(callbacks), 1)
        callbacks[0]()
        mock_cache.delete.assert_called_once_with(
            f"queue:avg_service_minutes:{self.station.id}"
        )

    def test_cancel_middle_entry(self):
        """Test cancelling shifts later entries up by one"""
        entry = TicketService.cancel_queue(self.second.id)

        self.assertEqual(entry.status, QueueStatus.CANCELLED)
        self.assertIsNotNone(entry.cancelled_at)
        self.assertEqual(entry.cancelled_by, "customer")
        self.refresh(self.first, self.third)
        self.assertEqual((self.first.position, self.third.position), (1, 2))
        self.assertEqual(self.active_positions(), [1, 2])
        self.assertEqual((self.first.estimated_wait_time, self.third.estimated_wait_time), (0, 5))

    def test_cancel_first_entry_refreshes_estimates(self):
        """Test the entries behind a cancelled head get fresh estimates"""
        TicketService.cancel_queue(self.first.id)

        self.refresh(self.second, self.third)
        self.assertEqual((self.second.position, self.third.position), (1, 2))
        self.assertEqual(self.second.estimated_wait_time, 0)
        self.assertEqual(self.third.estimated_wait_time, 5)

    def test_cancel_by_staff(self):
        """Test the acting staff member is recorded"""
        entry = TicketService.cancel_queue(self.first.id, acting_user_id="staff-9")
        self.assertEqual(entry.cancelled_by, "staff-9")

    def test_cancel_serving_entry(self):
        """Test a serving entry may still be cancelled"""
        TicketService.start_service(self.first.id, self.counter.id, "staff-1")

        entry = TicketService.cancel_queue(self.first.id)

        self.assertEqual(entry.status, QueueStatus.CANCELLED)
        self.assertEqual(self.active_positions(), [1, 2])

    def test_mark_no_show(self):
        """Test a no-show leaves the queue and later entries move up"""
        entry = TicketService.mark_no_show(self.first.id, "staff-1")

        self.assertEqual(entry.status, QueueStatus.NO_SHOW)
        self.assertIsNotNone(entry.cancelled_at)
        self.assertEqual(entry.cancelled_by, "staff-1")
        self.refresh(self.second, self.third)
        self.assertEqual((self.second.position, self.third.position), (1, 2))
        self.assertEqual(self.second.estimated_wait_time, 0)
        self.assertEqual(self.third.estimated_wait_time, 5)

    def test_terminal_entries_are_immutable(self):
        """Test no transition leaves a terminal status"""
        TicketService.cancel_queue(self.first.id)
        TicketService.mark_no_show(self.second.id, "staff-1")
        TicketService.start_service(self.third.id, self.counter.id, "staff-1")
        TicketService.complete_service(self.third.id)

        for entry in (self.first, self.second, self.third):
            with self.assertRaises(InvalidStateTransitionException):
                TicketService.start_service(entry.id, self.counter.id, "staff-1")
            with self.assertRaises(InvalidStateTransitionException):
                TicketService.complete_service(entry.id)
            with self.assertRaises(InvalidStateTransitionException):
                TicketService.cancel_queue(entry.id)
            with self.assertRaises(InvalidStateTransitionException):
                TicketService.mark_no_show(entry.id, "staff-1")

    def test_terminal_entry_keeps_its_position(self):
        """Test resequencing only moves active entries"""
        TicketService.cancel_queue(self.first.id)
        TicketService.cancel_queue(self.second.id)

        self.refresh(self.first, self.second, self.third)
        self.assertEqual(self.first.position, 1)
        self.assertEqual(self.second.position, 1)
        self.assertEqual(self.third.position, 1)

    def test_positions_stay_contiguous(self):
        """Test a mix of joins and removals leaves positions 1..n"""
        fourth = self.join("d@neu.edu.ph")
        fifth = self.join("e@neu.edu.ph")

        TicketService.cancel_queue(self.second.id)
        TicketService.mark_no_show(fourth.id, "staff-1")
        TicketService.start_service(self.first.id, self.counter.id, "staff-1")
        TicketService.complete_service(self.first.id)
        self.join("f@neu.edu.ph")

        self.assertEqual(self.active_positions(), [1, 2, 3])
        fifth.refresh_from_db()
        self.assertEqual(fifth.position, 2)

    def test_unknown_entry(self):
        """Test transitions on a missing entry"""
        with self.assertRaises(ResourceNotFoundException):
            TicketService.complete_service(uuid.uuid4())
        with self.assertRaises(ResourceNotFoundException):
            TicketService.cancel_queue("not-a-uuid")


class QueueQueryTest(QueueTestMixin, TestCase):
    def test_get_entry(self):
        """Test fetching an entry by id"""
        entry = self.join("juan@neu.edu.ph")
        self.assertEqual(QueueService.get_entry(entry.id), entry)

    def test_get_entry_not_found(self):
        """Test a missing or malformed id"""
        with self.assertRaises(ResourceNotFoundException):
            QueueService.get_entry(uuid.uuid4())
        with self.assertRaises(ResourceNotFoundException):
            QueueService.get_entry("not-a-uuid")

    def test_get_queue_by_session(self):
        """Test the entry created with a session is found"""
        entry = self.join("juan@neu.edu.ph")

        self.assertEqual(QueueService.get_queue(entry.session_ref), entry)
        self.assertEqual(QueueService.get_queue(entry.session_ref, QueueStatus.WAITING), entry)

        with self.assertRaises(ResourceNotFoundException):
            QueueService.get_queue(entry.session_ref, QueueStatus.SERVING)

    def test_get_queue_unknown_session(self):
        """Test a session with no entry"""
        with self.assertRaises(ResourceNotFoundException):
            QueueService.get_queue(uuid.uuid4())

    def test_list_by_station_pages_in_position_order(self):
        """Test cursor pagination walks the queue in order"""
        entries = [self.join(f"student{index}@neu.edu.ph") for index in range(5)]

        page, cursor = QueueService.list_queues_by_station(self.station.id, limit=2)
        self.assertEqual([entry.position for entry in page], [1, 2])
        self.assertEqual(cursor, str(entries[1].id))

        page, cursor = QueueService.list_queues_by_station(
            self.station.id, limit=2, cursor=cursor
        )
        self.assertEqual([entry.position for entry in page], [3, 4])

        page, cursor = QueueService.list_queues_by_station(
            self.station.id, limit=2, cursor=cursor
        )
        self.assertEqual(page, [entries[4]])
        self.assertEqual(cursor, str(entries[4].id))

        page, cursor = QueueService.list_queues_by_station(
            self.station.id, limit=2, cursor=cursor
        )
        self.assertEqual(page, [])
        self.assertIsNone(cursor)

    def test_list_by_station_default_limit(self):
        """Test pages default to 10 entries"""
        for index in range(12):
            self.join(f"student{index}@neu.edu.ph")

        page, _ = QueueService.list_queues_by_station(self.station.id)
        self.assertEqual(len(page), 10)

    def test_list_by_station_with_repeated_positions(self):
        """Test pagination neither skips nor repeats entries sharing a position"""
        first = self.join("a@neu.edu.ph")
        TicketService.cancel_queue(first.id)
        self.join("b@neu.edu.ph")
        self.join("c@neu.edu.ph")

        seen = []
        cursor = None
        while True:
            page, cursor = QueueService.list_queues_by_station(
                self.station.id, limit=1, cursor=cursor
            )
            if not page:
                break
            seen.extend(entry.id for entry in page)

        self.assertEqual(len(seen), 3)
        self.assertEqual(len(set(seen)), 3)

    def test_list_by_station_status_filter(self):
        """Test filtering a listing by status"""
        first = self.join("a@neu.edu.ph")
        self.join("b@neu.edu.ph")
        TicketService.cancel_queue(first.id)

        page, _ = QueueService.list_queues_by_station(self.station.id, status="waiting")
        self.assertEqual([entry.customer_email for entry in page], ["b@neu.edu.ph"])

        page, _ = QueueService.list_queues_by_station(
            self.station.id, filters={"email": "A@neu.edu.ph"}
        )
        self.assertEqual([entry.id for entry in page], [first.id])

    def test_list_by_station_invalid_status(self):
        """Test an unknown status is rejected"""
        with self.assertRaises(InvalidDataException):
            QueueService.list_queues_by_station(self.station.id, status="lost")

    def test_list_by_station_unknown_station(self):
        """Test listing a station that does not exist"""
        with self.assertRaises(ResourceNotFoundException):
            QueueService.list_queues_by_station(uuid.uuid4())

    def test_list_by_station_unknown_cursor(self):
        """Test a cursor that names no entry"""
        self.join("juan@neu.edu.ph")
        with self.assertRaises(ResourceNotFoundException):
            QueueService.list_queues_by_station(self.station.id, cursor=uuid.uuid4())

    def test_list_by_station_cursor_from_other_station(self):
        """Test a cursor must name an entry of the listing being paged"""
        self.join("juan@neu.edu.ph")
        registrar = StationFactory(name="Registrar", type="registrar")
        foreign = self.join("maria@neu.edu.ph", station=registrar, purpose="registrar")

        with self.assertRaises(ResourceNotFoundException):
            QueueService.list_queues_by_station(self.station.id, cursor=foreign.id)

        with self.assertRaises(ResourceNotFoundException):
            QueueService.list_queues_by_station(self.station.id, cursor="not-a-uuid")

    def test_list_by_counter(self):
        """Test only entries handled at the counter are listed"""
        first = self.join("a@neu.edu.ph")
        self.join("b@neu.edu.ph")
        TicketService.start_service(first.id, self.counter.id, "staff-1")

        page, cursor = QueueService.list_queues_by_counter(self.counter.id)

        self.assertEqual([entry.id for entry in page], [first.id])
        self.assertEqual(cursor, str(first.id))

    def test_list_by_counter_unknown_counter(self):
        """Test listing a counter that does not exist"""
        with self.assertRaises(ResourceNotFoundException):
            QueueService.list_queues_by_counter(uuid.uuid4())

    def test_get_current_serving(self):
        """Test the entry being served at a counter"""
        entry = self.join("juan@neu.edu.ph")
        TicketService.start_service(entry.id, self.counter.id, "staff-1")

        self.assertEqual(QueueService.get_current_serving(self.counter.id).id, entry.id)

    def test_get_current_serving_idle_counter(self):
        """Test an idle counter has nobody being served"""
        QueueEntryFactory(station=self.station)
        with self.assertRaises(ResourceNotFoundException):
            QueueService.get_current_serving(self.counter.id)
