from django_filters import rest_framework as filters

from .constants import QueueStatus
from .models import QueueEntry


class QueueEntryFilter(filters.FilterSet):
    status = filters.ChoiceFilter(choices=QueueStatus.choices)
    email = filters.CharFilter(field_name="customer_email", lookup_expr="iexact")
    created_after = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = QueueEntry
        fields = ["status", "email", "created_after", "created_before"]
