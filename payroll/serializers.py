from rest_framework import serializers

from .models import PayrollOverride, PayrollRecord
from .services import calculator
from .services.contracts import PayProfile, PayrollStatus


class PayrollRecordSerializer(serializers.ModelSerializer):
    employee_name = serializers.ReadOnlyField(source="employee.get_full_name")
    is_voided = serializers.ReadOnlyField()

    class Meta:
        model = PayrollRecord
        fields = [
            "id",
            "employee",
            "employee_name",
            "pay_period",
            "currency",
            "base_salary",
            "allowances_breakdown",
            "bonuses_breakdown",
            "taxes_breakdown",
            "deductions_breakdown",
            "allowances_total",
            "bonuses_total",
            "gross_salary",
            "taxes_total",
            "deductions_total",
            "net_salary",
            "attendance_summary",
            "status",
            "error_code",
            "error_message",
            "is_voided",
            "processed_at",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields


class PayrollGenerateSerializer(serializers.Serializer):
    # Plain CharField so malformed periods surface as InvalidPayPeriod
    pay_period = serializers.CharField()
    employee_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), required=False, allow_empty=False
    )
    regenerate = serializers.BooleanField(required=False, default=False)
    run_async = serializers.BooleanField(required=False, default=False)

    def validate_pay_period(self, value):
        calculator.validate_pay_period(value)
        return value


class PayrollStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[PayrollStatus.PROCESSED.value, PayrollStatus.PAID.value]
    )


class PayrollOverrideSerializer(serializers.ModelSerializer):
    employee_name = serializers.ReadOnlyField(source="employee.get_full_name")

    class Meta:
        model = PayrollOverride
        fields = ["id", "employee", "employee_name", "pay_period", "profile", "updated_at"]
        read_only_fields = fields


class PayrollOverrideWriteSerializer(serializers.Serializer):
    """
    Body of an override PUT: the pay profile items.

    Malformed items surface as InvalidPayItem from the calculator contracts.
    """

    profile = serializers.DictField()

    def validate_profile(self, value):
        try:
            return PayProfile.from_dict(value).to_dict()
        except (TypeError, ValueError) as e:
            raise serializers.ValidationError(str(e))
