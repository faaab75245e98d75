from rest_framework import serializers

from .services.report import DEFAULT_PERIOD_DAYS


class BurnoutReportQuerySerializer(serializers.Serializer):
    period = serializers.IntegerField(
        min_value=1, max_value=366, required=False, default=DEFAULT_PERIOD_DAYS
    )
    department = serializers.CharField(required=False, allow_blank=False)
