"""
Organization-wide compliance check.

Reads everything up front (active rules, employees, attendance), fans out one
pure aggregate + evaluate computation per employee, then persists the
violations in the caller thread. One employee's bad data is reported next to
the others' results and never aborts the run.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from django.utils import timezone

from core.bulk import BulkOperationResult, ParallelExecutor, get_default_executor
from core.config import EngineConfig, get_engine_config
from core.exceptions import APIError, InvalidWindow
from users.models import Employee
from worktime.services import AggregationWarning, aggregate
from worktime.services.storage import get_raw_attendance_bulk

from .contracts import ComplianceLogEntry
from .evaluator import evaluate
from .persistence import persist_logs
from .storage import get_active_compliance_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeCheckOutcome:
    employee_id: int
    violations: Tuple[ComplianceLogEntry, ...] = ()
    rule_errors: Tuple[APIError, ...] = ()
    warnings: Tuple[AggregationWarning, ...] = ()
    persisted: int = 0

    def to_dict(self):
        return {
            "employee_id": self.employee_id,
            "violations": len(self.violations),
            "persisted": self.persisted,
            "rule_errors": [e.to_dict() for e in self.rule_errors],
            "warnings": [w.code for w in self.warnings],
        }


def current_week_window(now=None) -> Tuple[datetime, datetime]:
    """Current ISO week (Monday 00:00 to next Monday 00:00) in local time"""
    now = timezone.localtime(now or timezone.now())
    monday = now.date() - timedelta(days=now.weekday())
    start = timezone.make_aware(datetime.combine(monday, time.min), now.tzinfo)
    return start, start + timedelta(days=7)


class ComplianceCheckService:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        executor: Optional[ParallelExecutor] = None,
        rules: Optional[Sequence] = None,
    ):
        self.config = config or get_engine_config()
        self.executor = executor or get_default_executor()
        self._rules = list(rules) if rules is not None else None

    def run(
        self,
        period_start,
        period_end,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> BulkOperationResult[EmployeeCheckOutcome]:
        """
        Check every active employee (or the given ones) over a window.

        Raises:
            InvalidWindow: if period_end <= period_start
        """
        if period_end <= period_start:
            raise InvalidWindow(period_start, period_end)

        result: BulkOperationResult[EmployeeCheckOutcome] = BulkOperationResult()
        rules = self._rules if self._rules is not None else get_active_compliance_rules()

        ids = list(
            Employee.objects.active()
            .for_ids(employee_ids)
            .order_by("pk")
            .values_list("pk", flat=True)
        )

        logger.info(
            f"Starting compliance check for {len(ids)} employees against {len(rules)} rules",
            extra={
                "employee_count": len(ids),
                "rule_count": len(rules),
                "period_start": period_start.isoformat(),
                "period_end": period_end.isoformat(),
                "action": "compliance_check_start",
            },
        )

        if not ids:
            return result.finish()

        attendance = get_raw_attendance_bulk(period_start, period_end, ids)
        config = self.config

        def check(payload):
            employee_id, events = payload
            aggregation = aggregate(employee_id, period_start, period_end, events, config)
            evaluation = evaluate(aggregation.metrics, rules)
            return EmployeeCheckOutcome(
                employee_id=employee_id,
                violations=tuple(evaluation.logs),
                rule_errors=tuple(evaluation.errors),
                warnings=aggregation.warnings,
            )

        payloads = {employee_id: (employee_id, attendance.get(employee_id, [])) for employee_id in ids}
        outcomes = self.executor.map(check, payloads)

        entries: List[ComplianceLogEntry] = []
        for employee_id in ids:
            outcome = outcomes[employee_id]
            if isinstance(outcome, Exception):
                result.add_error(employee_id, outcome)
                continue
            entries.extend(outcome.violations)

        created = persist_logs(entries)
        created_per_employee = {}
        for log in created:
            created_per_employee[log.employee_id] = created_per_employee.get(log.employee_id, 0) + 1

        for employee_id in ids:
            outcome = outcomes[employee_id]
            if isinstance(outcome, Exception):
                continue
            result.add_result(
                employee_id,
                replace(outcome, persisted=created_per_employee.get(employee_id, 0)),
            )

        result.finish()
        logger.info(
            f"Compliance check finished: {len(entries)} violations, {len(created)} new logs",
            extra={
                **result.summary(),
                "violations": len(entries),
                "logs_created": len(created),
                "action": "compliance_check_complete",
            },
        )
        return result
