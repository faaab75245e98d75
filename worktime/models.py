from django.core.exceptions import ValidationError
from django.db import models

from users.models import Employee

from .querysets import AttendanceEntryQuerySet


class AttendanceEntry(models.Model):
    """Raw attendance fact: one clock-in/clock-out pair, or a recorded absence"""

    KIND_PRESENT = "present"
    KIND_ABSENT = "absent"
    KIND_LATE = "late"
    KIND_CHOICES = [
        (KIND_PRESENT, "Present"),
        (KIND_ABSENT, "Absent"),
        (KIND_LATE, "Late"),
    ]

    employee = models.ForeignKey(
        Employee, on_delete=models.CASCADE, related_name="attendance_entries"
    )
    check_in = models.DateTimeField(help_text="When the employee started work")
    check_out = models.DateTimeField(
        blank=True, null=True, help_text="When the employee finished work"
    )
    kind = models.CharField(max_length=10, choices=KIND_CHOICES, default=KIND_PRESENT)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AttendanceEntryQuerySet.as_manager()

    class Meta:
        ordering = ["check_in"]
        verbose_name = "Attendance Entry"
        verbose_name_plural = "Attendance Entries"
        indexes = [
            models.Index(fields=["employee", "check_in"], name="worktime_entry_emp_in_idx"),
        ]

    def clean(self):
        super().clean()
        if self.check_out and self.check_in and self.check_out < self.check_in:
            raise ValidationError({"check_out": "Check-out cannot precede check-in"})

    @property
    def is_open(self):
        return self.check_out is None

    def __str__(self):
        return f"{self.employee_id} {self.kind} {self.check_in:%Y-%m-%d %H:%M}"
