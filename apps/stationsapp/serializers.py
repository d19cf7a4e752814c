from rest_framework import serializers

from .models import Station


class StationSerializer(serializers.ModelSerializer):
    active_counters = serializers.IntegerField(read_only=True)

    class Meta:
        model = Station
        fields = ["id", "name", "type", "description", "active_counters"]
        read_only_fields = fields
