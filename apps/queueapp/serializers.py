from rest_framework import serializers

from apps.stationsapp.models import Purpose

from .constants import QueueStatus
from .models import QueueEntry
from .utils.queue_utils import format_time_interval


class QueueEntrySerializer(serializers.ModelSerializer):
    station_name = serializers.CharField(source="station.name", read_only=True)

    class Meta:
        model = QueueEntry
        fields = [
            "id",
            "station",
            "station_name",
            "counter",
            "queue_number",
            "purpose",
            "customer_email",
            "status",
            "position",
            "estimated_wait_time",
            "created_at",
            "served_at",
            "served_by",
            "completed_at",
            "cancelled_at",
            "cancelled_by",
        ]
        read_only_fields = fields


class CustomerQueueSerializer(QueueEntrySerializer):
    """Entry as shown to the customer who owns it"""

    estimated_wait_display = serializers.SerializerMethodField()

    class Meta(QueueEntrySerializer.Meta):
        fields = [
            "id",
            "station",
            "station_name",
            "queue_number",
            "purpose",
            "status",
            "position",
            "estimated_wait_time",
            "estimated_wait_display",
            "created_at",
            "served_at",
        ]

    def get_estimated_wait_display(self, obj):
        if not obj.is_active or obj.estimated_wait_time is None:
            return None
        return format_time_interval(obj.estimated_wait_time)


class JoinQueueSerializer(serializers.Serializer):
    qr_id = serializers.UUIDField()
    station_id = serializers.UUIDField()
    email = serializers.EmailField()
    purpose = serializers.ChoiceField(choices=Purpose.choices, default=Purpose.PAYMENT)


class StartServiceSerializer(serializers.Serializer):
    counter_id = serializers.UUIDField()


class CustomerQueueQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=QueueStatus.choices, required=False)


class QueueListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)
    cursor = serializers.UUIDField(required=False)
