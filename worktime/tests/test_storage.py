"""
Tests for the attendance storage collaborator.
"""

from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import TestCase

from users.models import Employee
from worktime.models import AttendanceEntry
from worktime.services import AttendanceKind, aggregate
from worktime.services.storage import get_raw_attendance, get_raw_attendance_bulk

START = datetime(2024, 11, 4, tzinfo=dt_timezone.utc)
END = START + timedelta(days=7)


class GetRawAttendanceTest(TestCase):
    def setUp(self):
        self.employee = Employee.objects.create(
            first_name="Dana", last_name="Levi", email="dana@example.com"
        )
        self.other = Employee.objects.create(
            first_name="Ori", last_name="Ben", email="ori@example.com"
        )

    def _entry(self, employee, start, hours=None, kind=AttendanceEntry.KIND_PRESENT):
        return AttendanceEntry.objects.create(
            employee=employee,
            check_in=start,
            check_out=start + timedelta(hours=hours) if hours is not None else None,
            kind=kind,
        )

    def test_returns_overlapping_entries_only(self):
        inside = self._entry(self.employee, START + timedelta(hours=9), 8)
        crossing = self._entry(self.employee, START - timedelta(hours=2), 4)
        self._entry(self.employee, START - timedelta(days=2), 8)
        self._entry(self.employee, END + timedelta(hours=1), 8)
        self._entry(self.other, START + timedelta(hours=9), 8)

        events = get_raw_attendance(self.employee.pk, START, END)

        self.assertEqual([e.entry_id for e in events], [crossing.pk, inside.pk])

    def test_includes_open_and_absence_entries(self):
        open_entry = self._entry(self.employee, START + timedelta(days=1, hours=9))
        absence = self._entry(
            self.employee, START + timedelta(days=2), kind=AttendanceEntry.KIND_ABSENT
        )

        events = get_raw_attendance(self.employee.pk, START, END)

        self.assertEqual({e.entry_id for e in events}, {open_entry.pk, absence.pk})
        by_id = {e.entry_id: e for e in events}
        self.assertTrue(by_id[open_entry.pk].is_open)
        self.assertIs(by_id[absence.pk].kind, AttendanceKind.ABSENT)

    def test_feeds_aggregator(self):
        for day in range(5):
            self._entry(self.employee, START + timedelta(days=day, hours=9), 9)

        events = get_raw_attendance(self.employee.pk, START, END)
        metrics = aggregate(self.employee.pk, START, END, events).metrics

        self.assertEqual(metrics.total_worked_hours, 45)
        self.assertEqual(metrics.total_overtime_hours, 5)

    def test_bulk_groups_by_employee(self):
        self._entry(self.employee, START + timedelta(hours=9), 8)
        self._entry(self.other, START + timedelta(hours=9), 8)
        self._entry(self.other, START + timedelta(days=1, hours=9), 8)

        grouped = get_raw_attendance_bulk(START, END, [self.employee.pk, self.other.pk])

        self.assertEqual(len(grouped[self.employee.pk]), 1)
        self.assertEqual(len(grouped[self.other.pk]), 2)

    def test_bulk_keeps_employees_without_entries(self):
        grouped = get_raw_attendance_bulk(START, END, [self.employee.pk])
        self.assertEqual(grouped, {self.employee.pk: []})
