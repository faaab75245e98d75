"""
Payroll generation service.

Wraps the pure calculator with what the calculator must not do itself:
reading the employee and the pay profile, enforcing one active record per
(employee, pay period), persisting, and moving records through their status
lifecycle.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from core.config import EngineConfig, get_engine_config
from core.exceptions import InvalidStatusTransition
from core.logging_utils import safe_log_employee
from payroll.exceptions import DuplicatePayrollPeriod
from payroll.models import PayrollRecord
from worktime.services import aggregate
from worktime.services.storage import get_raw_attendance

from .calculator import compute, validate_pay_period
from .contracts import PayProfile, PayrollStatus
from .overrides import get_override_profile
from .store import DjangoPayrollStore

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def get_default_pay_profile() -> PayProfile:
    return PayProfile.from_dict(getattr(settings, "PAYROLL_DEFAULT_PROFILE", None))


def pay_period_window(pay_period: str):
    """Local-time [first day 00:00, first day of next month 00:00) of a pay period"""
    year, month = validate_pay_period(pay_period)
    tz = timezone.get_current_timezone()
    next_year, next_month = (year + 1, 1) if month == 12 else (year, month + 1)
    start = timezone.make_aware(datetime(year, month, 1), tz)
    end = timezone.make_aware(datetime(next_year, next_month, 1), tz)
    return start, end


def summarize_attendance(metrics) -> Dict[str, Any]:
    return {
        "worked_days": metrics.worked_days,
        "total_worked_hours": round(metrics.total_worked_hours, 2),
        "total_overtime_hours": round(metrics.total_overtime_hours, 2),
        "absence_count": metrics.absence_count,
        "late_count": metrics.late_count,
    }


class PayrollService:
    """
    Generation, status transitions and period reporting for payroll records.
    """

    STATUS_TRANSITIONS = {
        PayrollStatus.DRAFT: {PayrollStatus.PROCESSED},
        PayrollStatus.PROCESSED: {PayrollStatus.PAID},
    }

    def __init__(self, store: Optional[DjangoPayrollStore] = None, config: Optional[EngineConfig] = None):
        self.store = store or DjangoPayrollStore()
        self.config = config or get_engine_config()

    def generate(
        self,
        employee_id: int,
        pay_period: str,
        base_salary,
        allowances=None,
        deductions=None,
        bonuses=None,
        tax_rules=None,
        *,
        regenerate: bool = False,
        attendance_summary: Optional[Dict[str, Any]] = None,
    ) -> PayrollRecord:
        """
        Compute and persist one payroll record.

        Raises:
            DuplicatePayrollPeriod: an active record exists and ``regenerate`` is false
            InvalidPayPeriod / InvalidPayItem: malformed input
        """
        validate_pay_period(pay_period)

        if not regenerate:
            existing = self.store.find_active(employee_id, pay_period)
            if existing is not None:
                raise DuplicatePayrollPeriod(employee_id, pay_period, existing.pk)

        computation = compute(
            employee_id,
            pay_period,
            base_salary,
            allowances=allowances,
            deductions=deductions,
            bonuses=bonuses,
            tax_rules=tax_rules,
            config=self.config,
        )
        return self.store.persist(
            computation, regenerate=regenerate, attendance_summary=attendance_summary
        )

    def generate_for_employee(
        self,
        employee,
        pay_period: str,
        profile: Optional[PayProfile] = None,
        *,
        regenerate: bool = False,
    ) -> PayrollRecord:
        """
        Generate from the employee's monthly salary and a pay profile.

        Without an explicit ``profile`` the employee's override for the period
        is used, then the default profile from settings.
        """
        profile = (
            profile
            or get_override_profile(employee.pk, pay_period)
            or get_default_pay_profile()
        )
        start, end = pay_period_window(pay_period)
        events = get_raw_attendance(employee.pk, start, end)
        metrics = aggregate(employee.pk, start, end, events, self.config).metrics

        logger.info(
            "Generating payroll for employee",
            extra={
                **safe_log_employee(employee, "payroll_generate"),
                "pay_period": pay_period,
                "regenerate": regenerate,
            },
        )

        return self.generate(
            employee.pk,
            pay_period,
            employee.monthly_salary,
            allowances=profile.allowances,
            deductions=profile.deductions,
            bonuses=profile.bonuses,
            tax_rules=profile.tax_rules,
            regenerate=regenerate,
            attendance_summary=summarize_attendance(metrics),
        )

    def update_status(self, record: PayrollRecord, new_status) -> PayrollRecord:
        """
        Move a record along ``draft -> processed -> paid``.

        Raises:
            InvalidStatusTransition: voided records, error records and
                anything off the lifecycle path
        """
        requested = PayrollStatus(new_status)

        with transaction.atomic():
            locked = PayrollRecord.objects.select_for_update().get(pk=record.pk)
            current = PayrollStatus(locked.status)

            allowed = self.STATUS_TRANSITIONS.get(current, set())
            if locked.is_voided or requested not in allowed:
                raise InvalidStatusTransition(
                    "PayrollRecord", locked.pk, current.value, requested.value
                )

            locked.status = requested.value
            update_fields = ["status", "updated_at"]
            if requested is PayrollStatus.PROCESSED:
                locked.processed_at = timezone.now()
                update_fields.append("processed_at")
            elif requested is PayrollStatus.PAID:
                locked.paid_at = timezone.now()
                update_fields.append("paid_at")
            locked.save(update_fields=update_fields)

        logger.info(
            f"Payroll record moved from {current.value} to {requested.value}",
            extra={
                "record_id": locked.pk,
                "employee_id": locked.employee_id,
                "pay_period": locked.pay_period,
                "from_status": current.value,
                "to_status": requested.value,
                "action": "payroll_status_changed",
            },
        )
        return locked

    def period_summary(self, pay_period: str) -> Dict[str, Any]:
        """
        Totals for a pay period over its active (non-voided) records.

        Money totals skip ``error`` records, which are listed in the status
        breakdown instead.
        """
        validate_pay_period(pay_period)
        records = PayrollRecord.objects.active().for_period(pay_period)

        totals = records.exclude(status=PayrollStatus.ERROR.value).aggregate(
            base_salary=Sum("base_salary"),
            allowances=Sum("allowances_total"),
            bonuses=Sum("bonuses_total"),
            gross_salary=Sum("gross_salary"),
            taxes=Sum("taxes_total"),
            deductions=Sum("deductions_total"),
            net_salary=Sum("net_salary"),
        )

        status_breakdown = {s.value: 0 for s in PayrollStatus}
        for row in records.values("status").annotate(count=Count("id")):
            status_breakdown[row["status"]] = row["count"]

        return {
            "pay_period": pay_period,
            "currency": self.config.currency,
            "employee_count": records.values("employee_id").distinct().count(),
            "totals": {
                key: str(Decimal(value or 0).quantize(TWO_PLACES))
                for key, value in totals.items()
            },
            "status_breakdown": status_breakdown,
        }
