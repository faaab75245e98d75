from django.contrib import admin

from .models import PayrollOverride, PayrollRecord


@admin.register(PayrollRecord)
class PayrollRecordAdmin(admin.ModelAdmin):
    list_display = (
        "employee",
        "pay_period",
        "gross_salary",
        "net_salary",
        "status",
        "voided_at",
    )
    list_filter = ("status", "pay_period")
    search_fields = ("employee__first_name", "employee__last_name", "employee__email")
    raw_id_fields = ("employee",)
    readonly_fields = (
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
        "error_code",
        "error_message",
        "processed_at",
        "paid_at",
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("employee")


@admin.register(PayrollOverride)
class PayrollOverrideAdmin(admin.ModelAdmin):
    list_display = ("employee", "pay_period", "updated_at")
    list_filter = ("pay_period",)
    search_fields = ("employee__first_name", "employee__last_name", "employee__email")
    raw_id_fields = ("employee",)
