"""
Tests for compliance rule strategies and the evaluator.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

from django.test import SimpleTestCase

from compliance.exceptions import UnsupportedRuleType
from compliance.services import ComplianceRuleData, evaluate, get_rule_registry
from compliance.services.rules import AbstractRuleStrategy, RuleRegistry, format_threshold
from worktime.services import PeriodMetrics

WEEK_START = datetime(2024, 11, 4)
WEEK_END = WEEK_START + timedelta(days=7)


def make_metrics(**overrides):
    values = {
        "employee_id": 7,
        "period_start": WEEK_START,
        "period_end": WEEK_END,
        "total_worked_hours": 38.0,
    }
    values.update(overrides)
    return PeriodMetrics(**values)


def rule(rule_type, threshold, rule_id=1, is_active=True):
    return ComplianceRuleData(
        id=rule_id,
        name=f"{rule_type}-{rule_id}",
        type=rule_type,
        threshold=Decimal(str(threshold)),
        is_active=is_active,
    )


class MaxHoursPerWeekTest(SimpleTestCase):
    def test_violation_produces_one_open_log(self):
        metrics = make_metrics(total_worked_hours=45.0)

        result = evaluate(metrics, [rule("max_hours_per_week", 40)])

        self.assertEqual(len(result.logs), 1)
        log = result.logs[0]
        self.assertEqual(log.status, "open")
        self.assertEqual(log.employee_id, 7)
        self.assertEqual(log.rule_id, 1)
        self.assertEqual(log.details, "Worked 45.00 hours (limit: 40)")
        self.assertEqual(log.actual_value, 45.0)
        self.assertEqual(result.errors, [])

    def test_exactly_at_threshold_is_not_a_violation(self):
        result = evaluate(make_metrics(total_worked_hours=40.0), [rule("max_hours_per_week", 40)])
        self.assertEqual(result.logs, [])

    def test_violation_date_is_last_day_of_window(self):
        result = evaluate(make_metrics(total_worked_hours=45.0), [rule("max_hours_per_week", 40)])
        self.assertEqual(result.logs[0].violation_date, date(2024, 11, 10))

    def test_explicit_violation_date(self):
        result = evaluate(
            make_metrics(total_worked_hours=45.0),
            [rule("max_hours_per_week", 40)],
            violation_date=date(2024, 11, 6),
        )
        self.assertEqual(result.logs[0].violation_date, date(2024, 11, 6))


class RuleCatalogTest(SimpleTestCase):
    def test_max_rules(self):
        metrics = make_metrics(
            total_overtime_hours=12.5,
            late_count=6,
            absence_count=4,
            longest_consecutive_days=8,
        )
        rules = [
            rule("max_overtime_hours", 10, rule_id=1),
            rule("max_late_arrivals", 5, rule_id=2),
            rule("max_absences", 3, rule_id=3),
            rule("max_consecutive_days", 6, rule_id=4),
        ]

        result = evaluate(metrics, rules)

        self.assertEqual(
            [log.details for log in result.logs],
            [
                "Overtime 12.50 hours (limit: 10)",
                "Late 6 times (limit: 5)",
                "Absent 4 times (limit: 3)",
                "Worked 8 consecutive days (limit: 6)",
            ],
        )

    def test_min_rules_use_strict_less_than(self):
        metrics = make_metrics(total_worked_hours=20.0, shortest_rest_hours=8.0)
        rules = [
            rule("min_hours_per_week", 30, rule_id=1),
            rule("min_rest_between_shifts", 11, rule_id=2),
            rule("min_rest_between_shifts", 8, rule_id=3),
        ]

        result = evaluate(metrics, rules)

        self.assertEqual([log.rule_id for log in result.logs], [1, 2])
        self.assertEqual(result.logs[0].details, "Worked 20.00 hours (minimum: 30)")
        self.assertEqual(
            result.logs[1].details, "Rested 8.00 hours between shifts (minimum: 11)"
        )

    def test_rest_rule_skipped_without_two_shifts(self):
        metrics = make_metrics(shortest_rest_hours=None)
        result = evaluate(metrics, [rule("min_rest_between_shifts", 11)])
        self.assertEqual(result.logs, [])
        self.assertEqual(result.errors, [])

    def test_multiple_rules_fire_independently(self):
        metrics = make_metrics(total_worked_hours=50.0, total_overtime_hours=10.0)
        rules = [
            rule("max_hours_per_week", 40, rule_id=1),
            rule("max_hours_per_week", 45, rule_id=2),
            rule("max_overtime_hours", 5, rule_id=3),
        ]

        result = evaluate(metrics, rules)

        self.assertEqual([log.rule_id for log in result.logs], [1, 2, 3])


class EvaluatorBehaviourTest(SimpleTestCase):
    def test_inactive_rules_are_ignored(self):
        metrics = make_metrics(total_worked_hours=60.0)
        result = evaluate(metrics, [rule("max_hours_per_week", 40, is_active=False)])
        self.assertEqual(result.logs, [])

    def test_unsupported_type_is_isolated(self):
        metrics = make_metrics(total_worked_hours=45.0)
        rules = [
            rule("max_night_shifts", 3, rule_id=1),
            rule("max_hours_per_week", 40, rule_id=2),
        ]

        result = evaluate(metrics, rules)

        self.assertEqual(len(result.logs), 1)
        self.assertEqual(result.logs[0].rule_id, 2)
        self.assertEqual(len(result.errors), 1)
        error = result.errors[0]
        self.assertIsInstance(error, UnsupportedRuleType)
        self.assertEqual(error.code, "UNSUPPORTED_RULE_TYPE")
        self.assertEqual(error.status_code, 422)
        self.assertEqual(error.details["rule_id"], 1)
        self.assertEqual(error.details["employee_id"], 7)

    def test_evaluation_is_repeatable(self):
        metrics = make_metrics(total_worked_hours=45.0, late_count=9)
        rules = [rule("max_hours_per_week", 40, 1), rule("max_late_arrivals", 5, 2)]

        self.assertEqual(evaluate(metrics, rules).logs, evaluate(metrics, rules).logs)

    def test_custom_registry(self):
        class MaxWorkedDays(AbstractRuleStrategy):
            rule_type = "max_worked_days"
            label = "Maximum worked days"

            def extract(self, metrics):
                return metrics.worked_days

            def describe(self, value, threshold):
                return f"Worked {value} days"

        registry = RuleRegistry()
        registry.register(MaxWorkedDays)

        result = evaluate(
            make_metrics(worked_days=6), [rule("max_worked_days", 5)], registry=registry
        )

        self.assertEqual(result.logs[0].details, "Worked 6 days")


class RegistryTest(SimpleTestCase):
    def test_default_catalog(self):
        self.assertEqual(
            get_rule_registry().available_types(),
            [
                "max_absences",
                "max_consecutive_days",
                "max_hours_per_week",
                "max_late_arrivals",
                "max_overtime_hours",
                "min_hours_per_week",
                "min_rest_between_shifts",
            ],
        )

    def test_unknown_type_raises(self):
        with self.assertRaises(UnsupportedRuleType):
            get_rule_registry().get("nope", rule_id=3)

    def test_register_rejects_non_strategy(self):
        with self.assertRaises(ValueError):
            RuleRegistry().register(object)

    def test_format_threshold(self):
        self.assertEqual(format_threshold(Decimal("40.00")), "40")
        self.assertEqual(format_threshold(Decimal("7.50")), "7.5")
        self.assertEqual(format_threshold(11), "11")
