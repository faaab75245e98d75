from django.contrib import admin

from .models import AttendanceEntry


@admin.register(AttendanceEntry)
class AttendanceEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "employee", "kind", "check_in", "check_out")
    list_filter = ("kind",)
    date_hierarchy = "check_in"
    raw_id_fields = ("employee",)
