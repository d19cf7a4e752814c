"""
Queue app views for the NEUQueue platform
Customer endpoints (join, view, cancel) authorise with a QR session;
staff endpoints require an authenticated user.
"""

from django.conf import settings
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from api.documentation.api_doc_decorators import document_api_endpoint
from apps.sessionsapp.models import SessionType
from apps.sessionsapp.permissions import customer_session_required, get_qr_id
from apps.sessionsapp.services.session_service import SessionService
from core.exceptions import PermissionDeniedException
from core.utils.pagination import StartAfterCursorPagination

from .serializers import (
    CustomerQueueQuerySerializer,
    CustomerQueueSerializer,
    JoinQueueSerializer,
    QueueEntrySerializer,
    QueueListQuerySerializer,
    StartServiceSerializer,
)
from .services.queue_service import QueueService
from .services.ticket_service import TicketService
from .services.wait_time_predictor import WaitTimePredictor

LIST_QUERY_PARAMS = [
    {"name": "status", "description": "Filter by entry status", "required": False},
    {"name": "email", "description": "Filter by customer email", "required": False},
    {"name": "created_after", "description": "ISO datetime lower bound on join time", "required": False},
    {"name": "created_before", "description": "ISO datetime upper bound on join time", "required": False},
    {"name": "limit", "description": "Page size (default 10)", "required": False, "type": "integer"},
    {"name": "cursor", "description": "Id of the last entry of the previous page", "required": False},
]


@document_api_endpoint(
    summary="Issue a QR session",
    description=(
        "Create a form session for customers to scan. The returned url points "
        "at the customer app and carries the session id as qr_id."
    ),
    responses={
        201: "Created - Returns the session id and link",
        401: "Unauthorized - Authentication required",
    },
    tags=["Queue Operations"],
)
class IssueQrSessionView(APIView):
    """Generate the session behind a station QR code"""

    def post(self, request):
        session = SessionService.issue_session(created_by=str(request.user.pk))

        return Response(
            {
                "qr_id": str(session.id),
                "url": f"{settings.NEUQUEUE_ROOT_URL}?qr_id={session.id}",
                "expires_at": session.expires_at,
            },
            status=status.HTTP_201_CREATED,
        )


@document_api_endpoint(
    summary="Join a queue",
    description="Add the customer to the end of a station's queue using a form session",
    request_body=JoinQueueSerializer,
    responses={
        201: "Created - Customer joined the queue",
        400: "Bad Request - Invalid data or purpose mismatch",
        401: "Unauthorized - Session expired",
        403: "Forbidden - Wrong or used session",
        404: "Not Found - Station or session not found",
        409: "Conflict - Customer already in the queue",
    },
    tags=["Queue Operations"],
)
class JoinQueueView(APIView):
    """Add customer to queue"""

    permission_classes = [customer_session_required(SessionType.FORM)]

    def post(self, request):
        serializer = JoinQueueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = QueueService.join_queue(
            station_id=serializer.validated_data["station_id"],
            customer_email=serializer.validated_data["email"],
            purpose=serializer.validated_data["purpose"],
            session_ref=request.customer_session.id,
        )

        return Response(
            {
                "message": "Queue created successfully",
                "queue_id": str(entry.id),
                "queue_number": entry.queue_number,
                "position": entry.position,
            },
            status=status.HTTP_201_CREATED,
        )


@document_api_endpoint(
    summary="Get my queue entry",
    description="Return the entry created with the customer's session, with a fresh wait estimate",
    responses={
        200: "Success - Returns the queue entry",
        403: "Forbidden - Wrong or used session",
        404: "Not Found - No entry for this session",
    },
    query_params=[
        {"name": "qr_id", "description": "Customer session id", "required": True},
        {"name": "status", "description": "Only match an entry in this status", "required": False},
    ],
    tags=["Queue Operations"],
)
class CustomerQueueView(APIView):
    """Customer's own queue entry"""

    permission_classes = [customer_session_required(SessionType.QUEUE)]

    def get(self, request):
        serializer = CustomerQueueQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        entry = QueueService.get_queue(
            request.customer_session.id, serializer.validated_data.get("status")
        )

        # Stored estimates are a cache; show a value computed now
        if entry.is_active:
            entry.estimated_wait_time = WaitTimePredictor.calculate_estimated_wait_time(
                entry.station_id, entry.position
            )

        return Response(CustomerQueueSerializer(entry).data)


@document_api_endpoint(
    summary="List queue entries for a station",
    description="Page through a station's entries in position order",
    responses={
        200: "Success - Returns a page of entries and the next cursor",
        401: "Unauthorized - Authentication required",
        404: "Not Found - Station or cursor not found",
    },
    path_params=[{"name": "station_id", "description": "Station ID"}],
    query_params=LIST_QUERY_PARAMS,
    tags=["Queue Entries"],
)
class StationQueueListView(APIView):
    """List queue entries of a station"""

    def get(self, request, station_id):
        params = QueueListQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        entries, next_cursor = QueueService.list_queues_by_station(
            station_id,
            filters=request.query_params.dict(),
            **params.validated_data,
        )

        return StartAfterCursorPagination(results_key="queues").get_paginated_response(
            QueueEntrySerializer(entries, many=True).data, next_cursor
        )


@document_api_endpoint(
    summary="List queue entries for a counter",
    description="Page through the entries handled at a counter in position order",
    responses={
        200: "Success - Returns a page of entries and the next cursor",
        401: "Unauthorized - Authentication required",
        404: "Not Found - Counter or cursor not found",
    },
    path_params=[{"name": "counter_id", "description": "Counter ID"}],
    query_params=LIST_QUERY_PARAMS,
    tags=["Queue Entries"],
)
class CounterQueueListView(APIView):
    """List queue entries of a counter"""

    def get(self, request, counter_id):
        params = QueueListQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        entries, next_cursor = QueueService.list_queues_by_counter(
            counter_id,
            filters=request.query_params.dict(),
            **params.validated_data,
        )

        return StartAfterCursorPagination(results_key="queues").get_paginated_response(
            QueueEntrySerializer(entries, many=True).data, next_cursor
        )


@document_api_endpoint(
    summary="Current customer at a counter",
    description="Return the entry currently being served at a counter",
    responses={
        200: "Success - Returns the serving entry",
        401: "Unauthorized - Authentication required",
        404: "Not Found - Counter not found or idle",
    },
    path_params=[{"name": "counter_id", "description": "Counter ID"}],
    tags=["Queue Entries"],
)
class CurrentServingView(APIView):
    def get(self, request, counter_id):
        entry = QueueService.get_current_serving(counter_id)
        return Response(QueueEntrySerializer(entry).data)


@document_api_endpoint(
    summary="Start serving a customer",
    description="Move a waiting entry to serving at the given counter",
    request_body=StartServiceSerializer,
    responses={
        200: "Success - Entry is being served",
        400: "Bad Request - Entry is not waiting",
        401: "Unauthorized - Authentication required",
        404: "Not Found - Entry or counter not found",
    },
    path_params=[{"name": "queue_id", "description": "Queue entry ID"}],
    tags=["Queue Operations"],
)
class StartServiceView(APIView):
    def post(self, request, queue_id):
        serializer = StartServiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = TicketService.start_service(
            queue_id, serializer.validated_data["counter_id"], request.user.pk
        )
        return Response(
            {"message": "Service started", "queue": QueueEntrySerializer(entry).data}
        )


@document_api_endpoint(
    summary="Complete service",
    description="Finish serving an entry; remaining estimates are refreshed",
    responses={
        200: "Success - Entry completed",
        400: "Bad Request - Entry is not being served",
        401: "Unauthorized - Authentication required",
        404: "Not Found - Entry not found",
    },
    path_params=[{"name": "queue_id", "description": "Queue entry ID"}],
    tags=["Queue Operations"],
)
class CompleteServiceView(APIView):
    def post(self, request, queue_id):
        entry = TicketService.complete_service(queue_id)
        return Response(
            {"message": "Service completed", "queue": QueueEntrySerializer(entry).data}
        )


@document_api_endpoint(
    summary="Cancel a queue entry",
    description=(
        "Withdraw an entry. Staff can cancel any entry; a customer can cancel "
        "their own entry with the queue session that created it."
    ),
    responses={
        200: "Success - Entry cancelled",
        400: "Bad Request - Entry already finished",
        403: "Forbidden - Entry belongs to another session",
        404: "Not Found - Entry not found",
    },
    path_params=[{"name": "queue_id", "description": "Queue entry ID"}],
    tags=["Queue Operations"],
)
class CancelQueueView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, queue_id):
        acting_user_id = None
        if request.user and request.user.is_authenticated:
            acting_user_id = request.user.pk
        else:
            session = SessionService.verify_session(get_qr_id(request), SessionType.QUEUE)
            entry = QueueService.get_entry(queue_id)
            if entry.session_ref != session.id:
                raise PermissionDeniedException("You can only cancel your own queue entry")

        entry = TicketService.cancel_queue(queue_id, acting_user_id)
        return Response(
            {"message": "Queue cancelled", "queue": QueueEntrySerializer(entry).data}
        )


@document_api_endpoint(
    summary="Mark a customer as no-show",
    description="Remove an entry whose customer did not turn up; later entries move up",
    responses={
        200: "Success - Entry marked as no-show",
        400: "Bad Request - Entry already finished",
        401: "Unauthorized - Authentication required",
        404: "Not Found - Entry not found",
    },
    path_params=[{"name": "queue_id", "description": "Queue entry ID"}],
    tags=["Queue Operations"],
)
class MarkNoShowView(APIView):
    def post(self, request, queue_id):
        entry = TicketService.mark_no_show(queue_id, request.user.pk)
        return Response(
            {"message": "Marked as no-show", "queue": QueueEntrySerializer(entry).data}
        )
