from django.contrib import admin

from .models import ComplianceLog, ComplianceRule


@admin.register(ComplianceRule)
class ComplianceRuleAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "threshold", "is_active", "updated_at")
    list_filter = ("type", "is_active")
    search_fields = ("name", "description")


@admin.register(ComplianceLog)
class ComplianceLogAdmin(admin.ModelAdmin):
    list_display = ("id", "rule", "employee", "violation_date", "status")
    list_filter = ("status", "rule__type")
    raw_id_fields = ("employee", "resolved_by")
    readonly_fields = ("rule", "employee", "violation_date", "details", "actual_value", "threshold")
