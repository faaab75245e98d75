import django_filters

from .models import ComplianceLog


class ComplianceLogFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ComplianceLog.STATUS_CHOICES)
    employee = django_filters.NumberFilter(field_name="employee__id")
    rule = django_filters.NumberFilter(field_name="rule__id")
    rule_type = django_filters.CharFilter(field_name="rule__type")
    date_from = django_filters.DateFilter(field_name="violation_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="violation_date", lookup_expr="lte")

    class Meta:
        model = ComplianceLog
        fields = ["status", "employee", "rule", "rule_type", "date_from", "date_to"]
