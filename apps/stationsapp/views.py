from rest_framework.response import Response
from rest_framework.views import APIView

from api.documentation.api_doc_decorators import document_api_endpoint
from apps.sessionsapp.models import SessionType
from apps.sessionsapp.permissions import customer_session_required

from .serializers import StationSerializer
from .services.station_service import StationService


@document_api_endpoint(
    summary="Stations available to join",
    description="List stations with their number of staffed counters for the join form",
    responses={
        200: "Success - Returns the stations",
        403: "Forbidden - Wrong or used session",
        404: "Not Found - Session not found",
    },
    query_params=[{"name": "qr_id", "description": "Customer session id", "required": True}],
    tags=["Stations"],
)
class AvailableStationsView(APIView):
    permission_classes = [customer_session_required(SessionType.FORM)]

    def get(self, request):
        stations = StationService.get_available_stations()
        return Response({"stations": StationSerializer(stations, many=True).data})
