"""
Bulk payroll generation for a whole pay period.

The run has three stages:

1. Load: active employees, their salaries, existing records, pay profile
   overrides and the period's attendance, each with a single query.
2. Compute: one pure aggregate + compute per employee, fanned out through
   the ParallelExecutor. Workers never touch the database.
3. Persist: records are written one employee at a time in the calling
   thread, so a duplicate or a failed write only affects that employee.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from core.bulk import BulkOperationResult, ParallelExecutor, get_default_executor
from core.config import EngineConfig, get_engine_config
from core.exceptions import APIError
from payroll.exceptions import DuplicatePayrollPeriod
from payroll.models import PayrollRecord
from users.models import Employee
from worktime.services import aggregate
from worktime.services.storage import get_raw_attendance_bulk

from ..calculator import compute, validate_pay_period
from ..contracts import PayProfile, PayrollComputation, PayrollStatus
from ..overrides import get_override_data
from ..payroll_service import get_default_pay_profile, pay_period_window, summarize_attendance
from ..store import DjangoPayrollStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _EmployeeComputation:
    computation: PayrollComputation
    attendance_summary: Dict[str, Any]


class BulkPayrollService:
    """
    Generates payroll records for every active employee in a pay period.

    Example:
        result = BulkPayrollService().generate_period("2025-10")
        result.summary()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        executor: Optional[ParallelExecutor] = None,
        store: Optional[DjangoPayrollStore] = None,
        profile: Optional[PayProfile] = None,
    ):
        self.config = config or get_engine_config()
        self.executor = executor or get_default_executor()
        self.store = store or DjangoPayrollStore()
        self.profile = profile

    def generate_period(
        self,
        pay_period: str,
        employee_ids: Optional[Iterable[int]] = None,
        regenerate: bool = False,
    ) -> BulkOperationResult[PayrollRecord]:
        """
        Generate (or regenerate) records for a pay period.

        Employees that already hold an active record are reported as
        ``DuplicatePayrollPeriod`` errors unless ``regenerate`` is set.
        An employee's override for the period takes precedence over the
        service profile.

        Raises:
            InvalidPayPeriod: malformed pay period (nothing is processed)
        """
        validate_pay_period(pay_period)
        profile = self.profile or get_default_pay_profile()
        result: BulkOperationResult[PayrollRecord] = BulkOperationResult()

        salaries = dict(
            Employee.objects.active()
            .for_ids(employee_ids)
            .order_by("pk")
            .values_list("pk", "monthly_salary")
        )

        logger.info(
            f"Starting payroll generation for {len(salaries)} employees ({pay_period})",
            extra={
                "employee_count": len(salaries),
                "pay_period": pay_period,
                "regenerate": regenerate,
                "action": "bulk_payroll_start",
            },
        )

        if not salaries:
            return result.finish()

        if not regenerate:
            for employee_id in sorted(self.store.active_employee_ids(pay_period, salaries)):
                result.add_error(employee_id, DuplicatePayrollPeriod(employee_id, pay_period))
                del salaries[employee_id]

        start, end = pay_period_window(pay_period)
        attendance = get_raw_attendance_bulk(start, end, list(salaries))
        overrides = get_override_data(pay_period, salaries)
        config = self.config

        def calculate(payload):
            employee_id, base_salary, events, override = payload
            items = PayProfile.from_dict(override) if override is not None else profile
            metrics = aggregate(employee_id, start, end, events, config).metrics
            computation = compute(
                employee_id,
                pay_period,
                base_salary,
                allowances=items.allowances,
                deductions=items.deductions,
                bonuses=items.bonuses,
                tax_rules=items.tax_rules,
                config=config,
            )
            return _EmployeeComputation(computation, summarize_attendance(metrics))

        payloads = {
            employee_id: (
                employee_id,
                salary,
                attendance.get(employee_id, []),
                overrides.get(employee_id),
            )
            for employee_id, salary in salaries.items()
        }
        outcomes = self.executor.map(calculate, payloads, self._on_progress)

        error_records = 0
        for employee_id in sorted(outcomes):
            outcome = outcomes[employee_id]
            if isinstance(outcome, Exception):
                result.add_error(employee_id, outcome)
                continue

            try:
                record = self.store.persist(
                    outcome.computation,
                    regenerate=regenerate,
                    attendance_summary=outcome.attendance_summary,
                )
            except APIError as e:
                result.add_error(employee_id, e)
                continue

            if record.status == PayrollStatus.ERROR.value:
                error_records += 1
            result.add_result(employee_id, record)

        result.finish()
        logger.info(
            f"Payroll generation finished: {result.successful_count} records, "
            f"{result.failed_count} failed",
            extra={
                **result.summary(),
                "pay_period": pay_period,
                "error_records": error_records,
                "action": "bulk_payroll_complete",
            },
        )
        return result

    def _on_progress(self, completed: int, total: int, outcome: str):
        if outcome != "success" or completed == total:
            logger.debug(
                f"Payroll computation progress {completed}/{total}",
                extra={
                    "completed": completed,
                    "total": total,
                    "outcome": outcome,
                    "action": "bulk_payroll_progress",
                },
            )
