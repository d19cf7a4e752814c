from django.urls import path

from . import views

app_name = "stationsapp"

urlpatterns = [
    path("available/", views.AvailableStationsView.as_view(), name="available-stations"),
]
