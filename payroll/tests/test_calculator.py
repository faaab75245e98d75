"""
Tests for the pure payroll calculator.
"""

from decimal import Decimal, InvalidOperation

from django.test import SimpleTestCase

from core.config import EngineConfig
from payroll.exceptions import InvalidPayItem, InvalidPayPeriod
from payroll.services import PayItem, PayProfile, PayrollStatus, compute, validate_pay_period
from payroll.services.money import apply_percentage, display, to_minor


class ValidatePayPeriodTest(SimpleTestCase):
    def test_valid_period(self):
        self.assertEqual(validate_pay_period("2025-10"), (2025, 10))

    def test_invalid_periods(self):
        for token in ["2025-13", "2025-00", "2025-1", "25-10", "2025/10", "", None, 202510]:
            with self.subTest(token=token):
                with self.assertRaises(InvalidPayPeriod):
                    validate_pay_period(token)


class MoneyTest(SimpleTestCase):
    def test_to_minor_rejects_non_finite(self):
        for amount in ["NaN", "sNaN", "Infinity"]:
            with self.subTest(amount=amount):
                with self.assertRaises(InvalidOperation):
                    to_minor(amount)

    def test_to_minor_rounds_half_up(self):
        self.assertEqual(to_minor("10.005"), 1001)
        self.assertEqual(to_minor(Decimal("10.004")), 1000)
        self.assertEqual(to_minor(5000), 500000)

    def test_apply_percentage_rounds_half_up(self):
        self.assertEqual(apply_percentage(100005, Decimal("0.10")), 10001)

    def test_display(self):
        self.assertEqual(display(495000), "4950.00")
        self.assertEqual(display(-50000), "-500.00")


class ComputeTest(SimpleTestCase):
    def test_allowance_and_tax_scenario(self):
        computation = compute(
            1,
            "2025-10",
            "5000.00",
            allowances=[{"name": "Housing", "kind": "percentage", "value": "0.10"}],
            tax_rules=[{"name": "Income Tax", "kind": "percentage", "value": "0.10"}],
        )

        data = computation.to_dict()
        self.assertEqual(data["gross_salary"], "5500.00")
        self.assertEqual(data["taxes_total"], "550.00")
        self.assertEqual(data["net_salary"], "4950.00")
        self.assertEqual(computation.status, PayrollStatus.DRAFT)
        self.assertEqual(
            data["allowances_breakdown"],
            [{"name": "Housing", "kind": "percentage", "value": "0.10", "amount": "500.00"}],
        )

    def test_taxes_and_deductions_use_gross(self):
        computation = compute(
            1,
            "2025-10",
            "1000",
            allowances=[PayItem.fixed("Transport", "100")],
            bonuses=[PayItem.percentage("Quarterly", "0.10")],
            tax_rules=[PayItem.percentage("Tax", "0.10")],
            deductions=[PayItem.percentage("Pension", "0.05"), PayItem.fixed("Union", "10")],
        )

        # gross = 1000 + 100 + 100 (bonus on base)
        self.assertEqual(computation.gross_salary, 120000)
        self.assertEqual(computation.taxes_total, 12000)
        self.assertEqual(computation.deductions_total, 6000 + 1000)
        self.assertEqual(computation.net_salary, 120000 - 12000 - 7000)

    def test_net_identity_holds(self):
        computation = compute(
            7,
            "2024-02",
            "3333.33",
            allowances=[PayItem.percentage("A", "0.07"), PayItem.fixed("B", "12.34")],
            bonuses=[PayItem.percentage("C", "0.033")],
            tax_rules=[PayItem.percentage("T1", "0.12"), PayItem.percentage("T2", "0.015")],
            deductions=[PayItem.fixed("D", "40")],
        )

        self.assertEqual(
            computation.net_salary,
            computation.base_salary
            + computation.allowances_total
            + computation.bonuses_total
            - computation.taxes_total
            - computation.deductions_total,
        )
        self.assertEqual(
            computation.taxes_total, sum(line.amount for line in computation.taxes_breakdown)
        )

    def test_no_items(self):
        computation = compute(1, "2025-10", Decimal("2500"))
        self.assertEqual(computation.gross_salary, 250000)
        self.assertEqual(computation.net_salary, 250000)
        self.assertEqual(computation.to_dict()["taxes_breakdown"], [])

    def test_negative_net_is_flagged_and_clamped(self):
        computation = compute(
            3,
            "2025-10",
            "1000",
            deductions=[PayItem.fixed("Loan repayment", "1500")],
        )

        self.assertEqual(computation.status, PayrollStatus.ERROR)
        self.assertTrue(computation.is_error)
        self.assertEqual(computation.unclamped_net_salary, -50000)
        self.assertEqual(computation.net_salary, 0)
        self.assertEqual(computation.error.code, "NEGATIVE_NET_SALARY")
        self.assertEqual(computation.error.details["employee_id"], 3)

    def test_invalid_period(self):
        with self.assertRaises(InvalidPayPeriod):
            compute(1, "2025-13", "1000")

    def test_invalid_items(self):
        bad_items = [
            {"name": "Housing", "kind": "percent", "value": "0.1"},
            {"name": "Housing", "kind": "fixed", "value": "abc"},
            {"name": "Housing", "kind": "fixed", "value": "-5"},
            {"name": "", "kind": "fixed", "value": "5"},
            "Housing",
        ]
        for item in bad_items:
            with self.subTest(item=item):
                with self.assertRaises(InvalidPayItem) as ctx:
                    compute(9, "2025-10", "1000", allowances=[item])
                self.assertEqual(ctx.exception.details["employee_id"], 9)
                self.assertEqual(ctx.exception.details["pay_period"], "2025-10")

    def test_negative_base_salary(self):
        with self.assertRaises(InvalidPayItem):
            compute(1, "2025-10", "-1")

    def test_non_finite_base_salary(self):
        for salary in ["NaN", "Infinity", "-Infinity", Decimal("NaN"), float("inf")]:
            with self.subTest(salary=salary):
                with self.assertRaises(InvalidPayItem) as ctx:
                    compute(4, "2025-10", salary)
                self.assertEqual(ctx.exception.details["employee_id"], 4)

    def test_minor_units_and_currency_from_config(self):
        config = EngineConfig(currency="JPY", minor_units=0)
        computation = compute(
            1, "2025-10", "1000", tax_rules=[PayItem.percentage("Tax", "0.105")], config=config
        )

        self.assertEqual(computation.taxes_total, 105)
        self.assertEqual(computation.to_dict()["net_salary"], "895")
        self.assertEqual(computation.currency, "JPY")

    def test_deterministic(self):
        args = (1, "2025-10", "4321.99")
        kwargs = {"allowances": [PayItem.percentage("A", "0.125")]}
        self.assertEqual(compute(*args, **kwargs), compute(*args, **kwargs))


class PayProfileTest(SimpleTestCase):
    def test_from_dict(self):
        profile = PayProfile.from_dict(
            {"tax_rules": [{"name": "Tax", "kind": "percentage", "value": "0.05"}]}
        )
        self.assertEqual(profile.tax_rules, (PayItem.percentage("Tax", "0.05"),))
        self.assertEqual(profile.allowances, ())

    def test_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            PayProfile.from_dict({"perks": []})
