"""
Storage collaborator for payroll records.

The calculator cannot stop two concurrent generations for the same
(employee, pay period) on its own. The store re-checks under
``select_for_update`` inside a transaction, and the partial unique constraint
on ``PayrollRecord`` closes whatever window remains: an ``IntegrityError``
from it is reported as ``DuplicatePayrollPeriod``.
"""

import logging
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import InvalidStatusTransition
from payroll.exceptions import DuplicatePayrollPeriod
from payroll.models import PayrollRecord

from .contracts import PayrollComputation, PayrollStatus
from .money import from_minor

logger = logging.getLogger(__name__)


def record_fields(computation: PayrollComputation) -> Dict[str, Any]:
    """Model field values for a computation (decimal display form)"""
    units = computation.minor_units
    data = computation.to_dict()
    return {
        "employee_id": computation.employee_id,
        "pay_period": computation.pay_period,
        "currency": computation.currency,
        "base_salary": from_minor(computation.base_salary, units),
        "allowances_breakdown": data["allowances_breakdown"],
        "bonuses_breakdown": data["bonuses_breakdown"],
        "taxes_breakdown": data["taxes_breakdown"],
        "deductions_breakdown": data["deductions_breakdown"],
        "allowances_total": from_minor(computation.allowances_total, units),
        "bonuses_total": from_minor(computation.bonuses_total, units),
        "gross_salary": from_minor(computation.gross_salary, units),
        "taxes_total": from_minor(computation.taxes_total, units),
        "deductions_total": from_minor(computation.deductions_total, units),
        "net_salary": from_minor(computation.net_salary, units),
        "status": computation.status.value,
        "error_code": computation.error.code if computation.error else "",
        "error_message": computation.error.message if computation.error else "",
    }


class DjangoPayrollStore:
    def find_active(self, employee_id: int, pay_period: str) -> Optional[PayrollRecord]:
        """The blocking record for (employee, period), if any"""
        return (
            PayrollRecord.objects.blocking()
            .filter(employee_id=employee_id, pay_period=pay_period)
            .first()
        )

    def active_employee_ids(self, pay_period: str, employee_ids=None) -> set:
        queryset = PayrollRecord.objects.blocking().for_period(pay_period)
        if employee_ids is not None:
            queryset = queryset.filter(employee_id__in=list(employee_ids))
        return set(queryset.values_list("employee_id", flat=True))

    def persist(
        self,
        computation: PayrollComputation,
        *,
        regenerate: bool = False,
        attendance_summary: Optional[Dict[str, Any]] = None,
    ) -> PayrollRecord:
        """
        Save a computation.

        Raises:
            DuplicatePayrollPeriod: a blocking record exists and ``regenerate``
                is false, or a concurrent writer won the race
            InvalidStatusTransition: ``regenerate`` would void a paid record
        """
        employee_id = computation.employee_id
        pay_period = computation.pay_period

        with transaction.atomic():
            existing = list(
                PayrollRecord.objects.select_for_update()
                .blocking()
                .filter(employee_id=employee_id, pay_period=pay_period)
            )

            if existing:
                if not regenerate:
                    raise DuplicatePayrollPeriod(employee_id, pay_period, existing[0].pk)
                paid = [held for held in existing if held.status == PayrollStatus.PAID.value]
                if paid:
                    raise InvalidStatusTransition(
                        "PayrollRecord", paid[0].pk, paid[0].status, "voided"
                    )
                self._void(existing)

            try:
                with transaction.atomic():
                    record = PayrollRecord.objects.create(
                        **record_fields(computation),
                        attendance_summary=attendance_summary or {},
                    )
            except IntegrityError:
                logger.warning(
                    "Concurrent payroll generation detected",
                    extra={
                        "employee_id": employee_id,
                        "pay_period": pay_period,
                        "action": "payroll_duplicate_race",
                    },
                )
                raise DuplicatePayrollPeriod(employee_id, pay_period) from None

        logger.info(
            "Payroll record persisted",
            extra={
                "employee_id": employee_id,
                "pay_period": pay_period,
                "record_id": record.pk,
                "status": record.status,
                "regenerated": bool(existing),
                "action": "payroll_record_persisted",
            },
        )
        return record

    def _void(self, records):
        now = timezone.now()
        for record in records:
            record.voided_at = now
            record.save(update_fields=["voided_at", "updated_at"])
            logger.info(
                "Payroll record voided for regeneration",
                extra={
                    "employee_id": record.employee_id,
                    "pay_period": record.pay_period,
                    "record_id": record.pk,
                    "action": "payroll_record_voided",
                },
            )
