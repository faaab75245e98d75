import django_filters

from .models import PayrollRecord


class PayrollRecordFilter(django_filters.FilterSet):
    pay_period = django_filters.CharFilter(field_name="pay_period")
    status = django_filters.ChoiceFilter(choices=PayrollRecord.STATUS_CHOICES)
    employee = django_filters.NumberFilter(field_name="employee__id")

    class Meta:
        model = PayrollRecord
        fields = ["pay_period", "status", "employee"]
