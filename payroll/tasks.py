import logging

from celery import shared_task

from core.idempotency import idempotent_task

from .services.bulk import BulkPayrollService
from .services.contracts import PayrollStatus

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="payroll.tasks.generate_period_payroll")
@idempotent_task(ttl_hours=12)
def generate_period_payroll(self, pay_period, employee_ids=None, regenerate=False):
    """
    Generate payroll records for a pay period in the background.

    A redelivered task with the same arguments returns the first run's
    summary; without the cache marker the duplicate guard still reports
    already generated employees as failures instead of writing twice.
    """
    result = BulkPayrollService().generate_period(
        pay_period, employee_ids=employee_ids, regenerate=regenerate
    )
    summary = {
        **result.summary(),
        "pay_period": pay_period,
        "record_ids": sorted(record.pk for record in result.results.values()),
        "error_records": sum(
            1 for record in result.results.values() if record.status == PayrollStatus.ERROR.value
        ),
        "failed_employee_ids": result.get_failed_employee_ids(),
        "errors": {
            str(employee_id): error.error_code or error.error_type
            for employee_id, error in result.errors.items()
        },
    }

    logger.info(
        "Period payroll generation task finished",
        extra={
            "pay_period": pay_period,
            "total": summary["total"],
            "failed": summary["failed"],
            "action": "payroll_task_complete",
        },
    )
    return summary
