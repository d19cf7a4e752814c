from django.urls import path

from . import views

app_name = "queueapp"

urlpatterns = [
    # QR sessions (staff)
    path("qr/", views.IssueQrSessionView.as_view(), name="issue-qr"),
    # Customer operations
    path("join/", views.JoinQueueView.as_view(), name="join-queue"),
    path("mine/", views.CustomerQueueView.as_view(), name="customer-queue"),
    # Listings
    path(
        "station/<uuid:station_id>/",
        views.StationQueueListView.as_view(),
        name="station-queues",
    ),
    path(
        "counter/<uuid:counter_id>/",
        views.CounterQueueListView.as_view(),
        name="counter-queues",
    ),
    path(
        "counter/<uuid:counter_id>/current/",
        views.CurrentServingView.as_view(),
        name="current-serving",
    ),
    # Ledger transitions
    path("<uuid:queue_id>/start/", views.StartServiceView.as_view(), name="start-service"),
    path(
        "<uuid:queue_id>/complete/",
        views.CompleteServiceView.as_view(),
        name="complete-service",
    ),
    path("<uuid:queue_id>/cancel/", views.CancelQueueView.as_view(), name="cancel-queue"),
    path("<uuid:queue_id>/no-show/", views.MarkNoShowView.as_view(), name="mark-no-show"),
]
