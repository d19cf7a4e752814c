from django.urls import path

from apps.reportanalyticsapp import views

app_name = "reportanalyticsapp"

urlpatterns = [
    path(
        "average-wait-time/",
        views.AverageWaitTimeView.as_view(),
        name="average-wait-time",
    ),
    path(
        "completed-throughput/",
        views.CompletedThroughputView.as_view(),
        name="completed-throughput",
    ),
]
