from django.contrib import admin

from .models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("id", "first_name", "last_name", "department", "role", "is_active")
    list_filter = ("is_active", "role", "department")
    search_fields = ("first_name", "last_name", "email")
