"""
Payroll calculator.

Computes one employee's pay for one period from its inputs alone. The order
of the steps is fixed and part of the audit trail:

    1. allowances (fixed, or percentage of base)
    2. bonuses (fixed, or percentage of base)
    3. gross = base + allowances + bonuses
    4. tax rules in order (fixed, or percentage of gross)
    5. deductions (fixed, or percentage of gross)
    6. net = gross - taxes - deductions

Every percentage line is rounded half up to the minor unit on its own, so the
breakdown lines always add up to the totals shown next to them.
"""

import logging
import re
from dataclasses import replace
from decimal import InvalidOperation
from typing import Iterable, Optional, Tuple

from core.config import EngineConfig

from ..exceptions import InvalidPayItem, InvalidPayPeriod, NegativeNetSalary
from .contracts import BreakdownLine, PayItem, PayItemKind, PayrollComputation, PayrollStatus
from .money import apply_percentage, display, to_minor

logger = logging.getLogger(__name__)

PAY_PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_pay_period(pay_period) -> Tuple[int, int]:
    """Return (year, month) for a ``YYYY-MM`` token or raise InvalidPayPeriod"""
    if not isinstance(pay_period, str) or not PAY_PERIOD_RE.match(pay_period):
        raise InvalidPayPeriod(pay_period)
    year, month = pay_period.split("-")
    return int(year), int(month)


def _resolve(items, percentage_base: int, minor_units: int, employee_id, pay_period):
    lines = []
    for raw in items or ():
        try:
            item = PayItem.coerce(raw)
        except InvalidPayItem as e:
            e.details.update(employee_id=employee_id, pay_period=pay_period)
            raise

        if item.kind is PayItemKind.PERCENTAGE:
            amount = apply_percentage(percentage_base, item.value)
        else:
            amount = to_minor(item.value, minor_units)
        lines.append(BreakdownLine(item.name, item.kind, item.value, amount))
    return tuple(lines)


def compute(
    employee_id: int,
    pay_period: str,
    base_salary,
    allowances: Optional[Iterable] = None,
    deductions: Optional[Iterable] = None,
    bonuses: Optional[Iterable] = None,
    tax_rules: Optional[Iterable] = None,
    config: Optional[EngineConfig] = None,
) -> PayrollComputation:
    """
    Compute a payroll record.

    Args:
        employee_id: Employee the record belongs to
        pay_period: ``YYYY-MM``
        base_salary: Major-unit amount (Decimal, str or int)
        allowances, deductions, bonuses, tax_rules: PayItem values or
            ``{"name", "kind", "value"}`` mappings, applied in order
        config: Engine configuration (minor units, currency)

    Returns:
        PayrollComputation: status ``draft``, or ``error`` with
        ``NegativeNetSalary`` attached and net clamped to zero

    Raises:
        InvalidPayPeriod: malformed pay period
        InvalidPayItem: malformed item or negative base salary
    """
    config = config or EngineConfig()
    units = config.minor_units
    validate_pay_period(pay_period)

    try:
        base = to_minor(base_salary, units)
    except InvalidOperation:
        raise InvalidPayItem(
            "base_salary", f"{base_salary!r} is not a number", employee_id, pay_period
        ) from None
    if base < 0:
        raise InvalidPayItem("base_salary", "cannot be negative", employee_id, pay_period)

    allowance_lines = _resolve(allowances, base, units, employee_id, pay_period)
    bonus_lines = _resolve(bonuses, base, units, employee_id, pay_period)
    gross = base + sum(line.amount for line in allowance_lines + bonus_lines)
    tax_lines = _resolve(tax_rules, gross, units, employee_id, pay_period)
    deduction_lines = _resolve(deductions, gross, units, employee_id, pay_period)

    computation = PayrollComputation(
        employee_id=employee_id,
        pay_period=pay_period,
        base_salary=base,
        allowances_breakdown=allowance_lines,
        bonuses_breakdown=bonus_lines,
        taxes_breakdown=tax_lines,
        deductions_breakdown=deduction_lines,
        minor_units=units,
        currency=config.currency,
    )

    net = computation.unclamped_net_salary
    if net < 0:
        error = NegativeNetSalary(employee_id, pay_period, display(net, units))
        logger.warning(
            "Negative net salary, record flagged as error",
            extra={
                "employee_id": employee_id,
                "pay_period": pay_period,
                "gross_salary": display(gross, units),
                "net_salary": display(net, units),
                "action": "payroll_negative_net",
            },
        )
        return replace(computation, status=PayrollStatus.ERROR, error=error)

    return computation
