from rest_framework import serializers

from .exceptions import UnsupportedRuleType
from .models import ComplianceLog, ComplianceRule
from .services.rules import get_rule_registry


class ComplianceRuleSerializer(serializers.ModelSerializer):
    # Plain CharField so unknown types surface as UnsupportedRuleType (422)
    type = serializers.CharField(max_length=50)

    class Meta:
        model = ComplianceRule
        fields = [
            "id",
            "name",
            "description",
            "type",
            "threshold",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_type(self, value):
        if not get_rule_registry().is_supported(value):
            raise UnsupportedRuleType(value)
        return value


class ComplianceLogSerializer(serializers.ModelSerializer):
    rule_name = serializers.ReadOnlyField(source="rule.name")
    rule_type = serializers.ReadOnlyField(source="rule.type")
    employee_name = serializers.ReadOnlyField(source="employee.get_full_name")
    resolved_by = serializers.SerializerMethodField()

    class Meta:
        model = ComplianceLog
        fields = [
            "id",
            "rule",
            "rule_name",
            "rule_type",
            "employee",
            "employee_name",
            "violation_date",
            "details",
            "actual_value",
            "threshold",
            "status",
            "resolved_at",
            "resolved_by",
            "resolution_note",
            "created_at",
        ]
        read_only_fields = fields

    def get_resolved_by(self, obj):
        return obj.resolved_by.username if obj.resolved_by_id else None


class ResolveLogSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="")


class ComplianceRunSerializer(serializers.Serializer):
    period_start = serializers.DateTimeField(required=False)
    period_end = serializers.DateTimeField(required=False)
    employee_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, allow_empty=False
    )
    run_async = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if ("period_start" in attrs) != ("period_end" in attrs):
            raise serializers.ValidationError(
                "period_start and period_end must be provided together"
            )
        return attrs
