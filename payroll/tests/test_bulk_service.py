"""
Tests for period-wide payroll generation.
"""

from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase

from core.bulk import ParallelExecutor, ProcessingStatus
from core.config import EngineConfig
from payroll.exceptions import InvalidPayPeriod
from payroll.models import PayrollOverride, PayrollRecord
from payroll.services import PayItem, PayProfile
from payroll.services import compute as real_compute
from payroll.services.bulk import BulkPayrollService
from payroll.services.overrides import save_override
from payroll.services.payroll_service import PayrollService
from tests.fixtures import TestFixtures

PROFILE = PayProfile(
    allowances=(PayItem.percentage("Housing", "0.10"),),
    tax_rules=(PayItem.percentage("Income Tax", "0.10"),),
)


class BulkPayrollServiceTest(TestCase):
    def setUp(self):
        self.alice = TestFixtures.create_employee("Alice", "Able")
        self.bob = TestFixtures.create_employee("Bob", "Baker", monthly_salary=Decimal("3000.00"))
        self.gone = TestFixtures.create_employee("Gone", "Away", is_active=False)
        self.service = BulkPayrollService(
            config=EngineConfig(),
            executor=ParallelExecutor(max_workers=2),
            profile=PROFILE,
        )

    def test_generates_for_active_employees(self):
        result = self.service.generate_period("2025-10")

        self.assertEqual(result.status, ProcessingStatus.COMPLETED)
        self.assertEqual(sorted(result.results), [self.alice.pk, self.bob.pk])
        self.assertEqual(result.results[self.alice.pk].net_salary, Decimal("4950.00"))
        self.assertEqual(result.results[self.bob.pk].net_salary, Decimal("2970.00"))
        self.assertFalse(PayrollRecord.objects.filter(employee=self.gone).exists())

    def test_second_run_reports_duplicates(self):
        self.service.generate_period("2025-10")

        second = self.service.generate_period("2025-10")

        self.assertEqual(second.status, ProcessingStatus.FAILED)
        self.assertEqual(second.get_failed_employee_ids(), [self.alice.pk, self.bob.pk])
        self.assertEqual(second.errors[self.alice.pk].error_code, "DUPLICATE_PAYROLL_PERIOD")
        self.assertEqual(PayrollRecord.objects.count(), 2)

    def test_regenerate_replaces_records(self):
        first = self.service.generate_period("2025-10")

        second = self.service.generate_period("2025-10", regenerate=True)

        self.assertEqual(second.successful_count, 2)
        self.assertEqual(PayrollRecord.objects.count(), 4)
        self.assertEqual(PayrollRecord.objects.active().count(), 2)
        old = PayrollRecord.objects.get(pk=first.results[self.alice.pk].pk)
        self.assertIsNotNone(old.voided_at)

    def test_regenerate_skips_paid_records(self):
        first = self.service.generate_period("2025-10")
        paid = first.results[self.alice.pk]
        status_service = PayrollService(config=EngineConfig())
        status_service.update_status(paid, "processed")
        status_service.update_status(paid, "paid")

        second = self.service.generate_period("2025-10", regenerate=True)

        self.assertEqual(second.status, ProcessingStatus.PARTIAL)
        self.assertEqual(list(second.results), [self.bob.pk])
        self.assertEqual(second.errors[self.alice.pk].error_code, "INVALID_STATUS_TRANSITION")
        paid.refresh_from_db()
        self.assertIsNone(paid.voided_at)
        self.assertEqual(paid.status, "paid")

    def test_employee_override_replaces_service_profile(self):
        save_override(
            self.bob.pk,
            "2025-10",
            {"bonuses": [{"name": "Retention", "kind": "fixed", "value": "500"}]},
        )

        result = self.service.generate_period("2025-10")

        self.assertEqual(result.results[self.alice.pk].net_salary, Decimal("4950.00"))
        bob = result.results[self.bob.pk]
        self.assertEqual(bob.bonuses_total, Decimal("500.00"))
        self.assertEqual(bob.taxes_total, Decimal("0.00"))
        self.assertEqual(bob.net_salary, Decimal("3500.00"))

    def test_malformed_override_fails_only_its_employee(self):
        PayrollOverride.objects.create(
            employee=self.bob,
            pay_period="2025-10",
            profile={"bonuses": [{"name": "Odd", "kind": "weird", "value": "1"}]},
        )

        result = self.service.generate_period("2025-10")

        self.assertEqual(list(result.results), [self.alice.pk])
        self.assertEqual(result.errors[self.bob.pk].error_code, "INVALID_PAY_ITEM")

    def test_employee_subset(self):
        result = self.service.generate_period("2025-10", employee_ids=[self.bob.pk])
        self.assertEqual(list(result.results), [self.bob.pk])

    def test_negative_net_becomes_error_record(self):
        service = BulkPayrollService(
            config=EngineConfig(),
            executor=ParallelExecutor(max_workers=2),
            profile=PayProfile(deductions=(PayItem.fixed("Loan", "4000"),)),
        )

        result = service.generate_period("2025-10")

        self.assertEqual(result.status, ProcessingStatus.COMPLETED)
        self.assertEqual(result.results[self.alice.pk].status, "draft")
        self.assertEqual(result.results[self.bob.pk].status, "error")
        self.assertEqual(result.results[self.bob.pk].net_salary, Decimal("0.00"))

    def test_one_failing_employee_does_not_abort_batch(self):
        bob_id = self.bob.pk

        def flaky_compute(employee_id, *args, **kwargs):
            if employee_id == bob_id:
                raise ValueError("corrupt salary")
            return real_compute(employee_id, *args, **kwargs)

        with patch("payroll.services.bulk.bulk_service.compute", side_effect=flaky_compute):
            result = self.service.generate_period("2025-10")

        self.assertEqual(result.status, ProcessingStatus.PARTIAL)
        self.assertEqual(list(result.results), [self.alice.pk])
        self.assertEqual(result.errors[bob_id].error_type, "ValueError")
        self.assertEqual(result.errors[bob_id].error_code, "INTERNAL_ERROR")
        self.assertEqual(PayrollRecord.objects.count(), 1)

    def test_invalid_period(self):
        with self.assertRaises(InvalidPayPeriod):
            self.service.generate_period("October")
        self.assertFalse(PayrollRecord.objects.exists())

    def test_no_employees(self):
        result = self.service.generate_period("2025-10", employee_ids=[self.gone.pk])
        self.assertEqual(result.total_count, 0)
        self.assertEqual(result.status, ProcessingStatus.COMPLETED)
