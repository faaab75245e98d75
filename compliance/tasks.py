import logging

from celery import shared_task

from django.utils.dateparse import parse_datetime

from core.idempotency import idempotent_task

from .services.check_service import ComplianceCheckService, current_week_window

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="compliance.tasks.run_weekly_compliance_check")
@idempotent_task(ttl_hours=12)
def run_weekly_compliance_check(self, period_start=None, period_end=None, employee_ids=None):
    """
    Run the compliance check for a window given as ISO strings.

    With no window, checks the current ISO week. A redelivered task with the
    same arguments returns the first run's summary.
    """
    if period_start and period_end:
        start, end = parse_datetime(period_start), parse_datetime(period_end)
        if start is None or end is None:
            raise ValueError(f"Invalid window: {period_start} / {period_end}")
    else:
        start, end = current_week_window()

    result = ComplianceCheckService().run(start, end, employee_ids)
    summary = {
        **result.summary(),
        "period_start": start.isoformat(),
        "period_end": end.isoformat(),
        "violations": sum(len(o.violations) for o in result.results.values()),
        "logs_created": sum(o.persisted for o in result.results.values()),
        "failed_employee_ids": result.get_failed_employee_ids(),
    }

    logger.info(
        "Scheduled compliance check finished",
        extra={**summary, "action": "compliance_task_complete"},
    )
    return summary
