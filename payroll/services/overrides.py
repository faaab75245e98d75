"""
Per-employee pay profile overrides.

An override replaces the configured default profile for one employee and
one pay period. It does not merge with the default: an override without tax
rules means no tax for that period.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from payroll.models import PayrollOverride

from .calculator import validate_pay_period
from .contracts import PayProfile

logger = logging.getLogger(__name__)


def get_override_profile(employee_id: int, pay_period: str) -> Optional[PayProfile]:
    override = PayrollOverride.objects.filter(
        employee_id=employee_id, pay_period=pay_period
    ).first()
    return override.get_profile() if override else None


def get_override_data(pay_period: str, employee_ids: Iterable[int]) -> Dict[int, Dict[str, Any]]:
    """Stored override profiles for many employees with one query, keyed by employee id"""
    employee_ids = list(employee_ids)
    if not employee_ids:
        return {}
    return dict(
        PayrollOverride.objects.filter(pay_period=pay_period, employee_id__in=employee_ids)
        .values_list("employee_id", "profile")
    )


def save_override(employee_id: int, pay_period: str, profile: Mapping[str, Any]) -> PayrollOverride:
    """
    Create or replace the override for (employee, pay period).

    Raises:
        InvalidPayPeriod: malformed pay period
        InvalidPayItem: malformed item in the profile
        ValueError: unknown profile keys
    """
    validate_pay_period(pay_period)
    normalized = PayProfile.from_dict(profile).to_dict()

    override, created = PayrollOverride.objects.update_or_create(
        employee_id=employee_id,
        pay_period=pay_period,
        defaults={"profile": normalized},
    )
    logger.info(
        "Payroll override saved",
        extra={
            "employee_id": employee_id,
            "pay_period": pay_period,
            "created": created,
            "action": "payroll_override_saved",
        },
    )
    return override


def delete_override(employee_id: int, pay_period: str) -> int:
    deleted, _ = PayrollOverride.objects.filter(
        employee_id=employee_id, pay_period=pay_period
    ).delete()
    if deleted:
        logger.info(
            "Payroll override deleted",
            extra={
                "employee_id": employee_id,
                "pay_period": pay_period,
                "action": "payroll_override_deleted",
            },
        )
    return deleted
