# api/v1/urls.py
from django.urls import include, path

urlpatterns = [
    path("queue/", include("apps.queueapp.urls")),
    path("stations/", include("apps.stationsapp.urls")),
    path("analytics/", include("apps.reportanalyticsapp.urls")),
]
