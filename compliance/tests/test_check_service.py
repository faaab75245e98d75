"""
Tests for the organization-wide compliance check.
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import patch

from django.test import TestCase

from compliance.models import ComplianceLog
from compliance.services.check_service import ComplianceCheckService, current_week_window
from core.bulk import ParallelExecutor, ProcessingStatus
from core.config import EngineConfig
from core.exceptions import InvalidWindow
from tests.fixtures import TestFixtures
from worktime.services import aggregate as real_aggregate

MONDAY = datetime(2024, 11, 4, tzinfo=dt_timezone.utc)
NEXT_MONDAY = MONDAY + timedelta(days=7)


class ComplianceCheckServiceTest(TestCase):
    def setUp(self):
        self.busy = TestFixtures.create_employee("Busy", "Bee")
        self.regular = TestFixtures.create_employee("Reg", "Ular")
        TestFixtures.create_week(self.busy, MONDAY, hours_per_day=9)
        TestFixtures.create_week(self.regular, MONDAY, hours_per_day=8)
        self.rule = TestFixtures.create_rule("max_hours_per_week", "40")
        self.service = ComplianceCheckService(
            config=EngineConfig(), executor=ParallelExecutor(max_workers=2)
        )

    def test_flags_only_the_employee_over_the_limit(self):
        result = self.service.run(MONDAY, NEXT_MONDAY)

        self.assertEqual(result.status, ProcessingStatus.COMPLETED)
        self.assertEqual(result.successful_count, 2)
        log = ComplianceLog.objects.get()
        self.assertEqual(log.employee, self.busy)
        self.assertEqual(log.details, "Worked 45.00 hours (limit: 40)")
        self.assertEqual(result.results[self.busy.pk].persisted, 1)
        self.assertEqual(result.results[self.regular.pk].violations, ())

    def test_rerun_does_not_duplicate_open_logs(self):
        self.service.run(MONDAY, NEXT_MONDAY)
        second = self.service.run(MONDAY, NEXT_MONDAY)

        self.assertEqual(ComplianceLog.objects.count(), 1)
        self.assertEqual(len(second.results[self.busy.pk].violations), 1)
        self.assertEqual(second.results[self.busy.pk].persisted, 0)

    def test_inactive_rule_produces_nothing(self):
        self.rule.is_active = False
        self.rule.save()

        self.service.run(MONDAY, NEXT_MONDAY)

        self.assertFalse(ComplianceLog.objects.exists())

    def test_inactive_employees_are_skipped(self):
        self.busy.is_active = False
        self.busy.save()

        result = self.service.run(MONDAY, NEXT_MONDAY)

        self.assertEqual(list(result.results), [self.regular.pk])

    def test_employee_subset(self):
        result = self.service.run(MONDAY, NEXT_MONDAY, employee_ids=[self.regular.pk])
        self.assertEqual(list(result.results), [self.regular.pk])

    def test_one_failing_employee_does_not_abort_batch(self):
        busy_id = self.busy.pk

        def flaky_aggregate(employee_id, *args, **kwargs):
            if employee_id == busy_id:
                raise ValueError("corrupt attendance")
            return real_aggregate(employee_id, *args, **kwargs)

        with patch("compliance.services.check_service.aggregate", side_effect=flaky_aggregate):
            result = self.service.run(MONDAY, NEXT_MONDAY)

        self.assertEqual(result.status, ProcessingStatus.PARTIAL)
        self.assertEqual(result.get_failed_employee_ids(), [busy_id])
        self.assertEqual(result.errors[busy_id].error_type, "ValueError")
        self.assertIn(self.regular.pk, result.results)

    def test_unsupported_rule_is_reported_per_employee(self):
        TestFixtures.create_rule("max_night_shifts", "2", name="legacy night rule")

        result = self.service.run(MONDAY, NEXT_MONDAY)

        self.assertEqual(result.status, ProcessingStatus.COMPLETED)
        outcome = result.results[self.busy.pk]
        self.assertEqual(len(outcome.rule_errors), 1)
        self.assertEqual(outcome.rule_errors[0].code, "UNSUPPORTED_RULE_TYPE")
        self.assertEqual(ComplianceLog.objects.count(), 1)

    def test_invalid_window(self):
        with self.assertRaises(InvalidWindow):
            self.service.run(NEXT_MONDAY, MONDAY)


class CurrentWeekWindowTest(TestCase):
    def test_window_starts_on_monday(self):
        start, end = current_week_window(datetime(2024, 11, 7, 15, 30, tzinfo=dt_timezone.utc))

        self.assertEqual(start.date().isoformat(), "2024-11-04")
        self.assertEqual(start.hour, 0)
        self.assertEqual(end - start, timedelta(days=7))
