from rest_framework.response import Response
from rest_framework.views import APIView

from api.documentation.api_doc_decorators import document_api_endpoint
from apps.reportanalyticsapp.services.analytics_service import AnalyticsService

DATE_RANGE_PARAMS = [
    {"name": "start_date", "description": "ISO date or datetime (requires end_date)", "required": False},
    {"name": "end_date", "description": "ISO date or datetime (requires start_date)", "required": False},
]


def get_date_range(request):
    return AnalyticsService.parse_date_range(
        request.query_params.get("start_date"), request.query_params.get("end_date")
    )


@document_api_endpoint(
    summary="Average wait time per station",
    description=(
        "Average minutes between joining and being called. Without a date range "
        "only the most recent served entries of each station are sampled."
    ),
    responses={
        200: "Success - Returns a map of station id to average wait",
        400: "Bad Request - Invalid date range",
        401: "Unauthorized - Authentication required",
    },
    query_params=DATE_RANGE_PARAMS,
    tags=["Analytics"],
)
class AverageWaitTimeView(APIView):
    def get(self, request):
        start, end = get_date_range(request)
        return Response(AnalyticsService.get_average_wait_time(start, end))


@document_api_endpoint(
    summary="Completed throughput per station",
    description="Number of completed entries per station; defaults to the last 7 days",
    responses={
        200: "Success - Returns a map of station id to completed count",
        400: "Bad Request - Invalid date range",
        401: "Unauthorized - Authentication required",
    },
    query_params=DATE_RANGE_PARAMS,
    tags=["Analytics"],
)
class CompletedThroughputView(APIView):
    def get(self, request):
        start, end = get_date_range(request)
        return Response(AnalyticsService.get_completed_throughput(start, end))
