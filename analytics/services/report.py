"""
Organization-wide burnout report.

Scores every active employee over the last N days. The report is a read-time
view: nothing is persisted, so two requests a minute apart may differ.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Iterable, Optional

from django.utils import timezone

from core.bulk import BulkOperationResult, ParallelExecutor, get_default_executor
from core.config import EngineConfig, get_engine_config
from core.exceptions import InvalidWindow
from users.models import Employee
from worktime.services import aggregate
from worktime.services.storage import get_raw_attendance_bulk

from .burnout import BurnoutEmployee, RiskLevel, score

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30


class BurnoutReportService:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        executor: Optional[ParallelExecutor] = None,
    ):
        self.config = config or get_engine_config()
        self.executor = executor or get_default_executor()

    def build(
        self,
        period_days: int = DEFAULT_PERIOD_DAYS,
        now=None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Dict[str, Any]:
        """
        Score active employees over ``[now - period_days, now)``.

        Returns:
            Dict with ``summary`` (counts per level, average score),
            ``employees`` sorted by score descending and per-employee
            ``errors``

        Raises:
            InvalidWindow: if period_days is not positive
        """
        period_end = now or timezone.now()
        period_start = period_end - timedelta(days=period_days)
        if period_days <= 0:
            raise InvalidWindow(period_start, period_end)

        employees = {
            employee.pk: employee
            for employee in Employee.objects.active().for_ids(employee_ids).order_by("pk")
        }
        result: BulkOperationResult[BurnoutEmployee] = BulkOperationResult()

        if employees:
            attendance = get_raw_attendance_bulk(period_start, period_end, list(employees))
            config = self.config

            def assess(payload):
                employee_id, events = payload
                metrics = aggregate(employee_id, period_start, period_end, events, config).metrics
                return score(metrics, config)

            payloads = {
                employee_id: (employee_id, attendance.get(employee_id, []))
                for employee_id in employees
            }
            for employee_id, outcome in self.executor.map(assess, payloads).items():
                if isinstance(outcome, Exception):
                    result.add_error(employee_id, outcome)
                else:
                    result.add_result(employee_id, outcome)

        result.finish()

        scored = sorted(
            result.results.values(), key=lambda e: (-e.risk_score, e.employee_id)
        )
        rows = []
        for assessment in scored:
            employee = employees[assessment.employee_id]
            rows.append(
                {
                    **assessment.to_dict(),
                    "employee_name": employee.get_full_name(),
                    "department": employee.department or "Unassigned",
                }
            )

        summary = self._summarize(scored, total=len(employees))
        logger.info(
            f"Burnout report built for {len(employees)} employees",
            extra={
                **result.summary(),
                "period_days": period_days,
                "critical": summary["critical"],
                "action": "burnout_report_built",
            },
        )

        return {
            "period": period_days,
            "period_start": period_start.isoformat(),
            "period_end": period_end.isoformat(),
            "summary": summary,
            "employees": rows,
            "errors": [error.to_dict() for error in result.errors.values()],
        }

    @staticmethod
    def _summarize(scored, total: int) -> Dict[str, Any]:
        counts = {level: 0 for level in RiskLevel}
        for assessment in scored:
            counts[assessment.risk_level] += 1

        average = sum(a.risk_score for a in scored) / len(scored) if scored else 0.0
        return {
            "total_employees": total,
            "critical": counts[RiskLevel.CRITICAL],
            "high": counts[RiskLevel.HIGH],
            "medium": counts[RiskLevel.MEDIUM],
            "low": counts[RiskLevel.LOW],
            "avg_risk_score": round(average, 2),
        }
