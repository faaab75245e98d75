"""
Rule evaluator.

Evaluates active compliance rules against one employee's ``PeriodMetrics``.
Pure: it reads the metrics and the rule snapshots and returns violations; it
never persists, never deduplicates across rules and never resolves logs.
"""

import logging
from datetime import timedelta
from typing import Iterable, Optional

from core.exceptions import APIError

from .contracts import ComplianceLogEntry, EvaluationResult
from .rules import RuleRegistry, get_rule_registry

logger = logging.getLogger(__name__)


def default_violation_date(metrics):
    """Last calendar day inside ``[period_start, period_end)``"""
    return (metrics.period_end - timedelta(microseconds=1)).date()


def evaluate(
    metrics,
    rules: Iterable,
    *,
    violation_date=None,
    registry: Optional[RuleRegistry] = None,
) -> EvaluationResult:
    """
    Evaluate rules against metrics.

    Args:
        metrics: PeriodMetrics of a single employee
        rules: Rule snapshots (anything with id, name, type, threshold, is_active)
        violation_date: Date stamped on violations (default: last day of the window)
        registry: Strategy registry (default: the global one)

    Returns:
        EvaluationResult: one open log per violated rule, plus per-rule errors
    """
    registry = registry or get_rule_registry()
    violation_date = violation_date or default_violation_date(metrics)
    result = EvaluationResult()

    for rule in rules:
        if not rule.is_active:
            continue

        try:
            strategy = registry.get(rule.type, rule_id=rule.id)
            value = strategy.extract(metrics)
            violated = strategy.is_violated(value, rule.threshold)
        except APIError as e:
            if e.details.get("employee_id") is None:
                e.details["employee_id"] = metrics.employee_id
            result.errors.append(e)
            logger.warning(
                f"Compliance rule {rule.id} skipped: {e.message}",
                extra={
                    "rule_id": rule.id,
                    "rule_type": rule.type,
                    "employee_id": metrics.employee_id,
                    "error_code": e.code,
                    "action": "compliance_rule_skipped",
                },
            )
            continue

        if not violated:
            continue

        result.logs.append(
            ComplianceLogEntry(
                rule_id=rule.id,
                employee_id=metrics.employee_id,
                violation_date=violation_date,
                details=strategy.describe(value, rule.threshold),
                rule_type=rule.type,
                actual_value=value,
                threshold=rule.threshold,
            )
        )

    return result
