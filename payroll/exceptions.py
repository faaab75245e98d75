from rest_framework import status

from core.exceptions import APIError


class InvalidPayPeriod(APIError):
    """Raised when a pay period token is not ``YYYY-MM``."""

    default_code = "INVALID_PAY_PERIOD"

    def __init__(self, pay_period):
        super().__init__(
            f"Invalid pay period '{pay_period}', expected YYYY-MM",
            details={"pay_period": pay_period},
        )


class InvalidPayItem(APIError):
    """Raised for a malformed allowance, bonus, deduction or tax rule."""

    default_code = "INVALID_PAY_ITEM"

    def __init__(self, name, reason, employee_id=None, pay_period=None):
        super().__init__(
            f"Invalid pay item '{name}': {reason}",
            details={
                "item": name,
                "reason": reason,
                "employee_id": employee_id,
                "pay_period": pay_period,
            },
        )


class NegativeNetSalary(APIError):
    """
    Net salary came out below zero.

    Non-fatal: the computation is kept with status ``error`` and net clamped
    to zero so the anomaly is surfaced instead of paid.
    """

    default_code = "NEGATIVE_NET_SALARY"
    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, employee_id, pay_period, net_salary):
        super().__init__(
            f"Net salary for employee {employee_id} in {pay_period} is negative ({net_salary})",
            details={
                "employee_id": employee_id,
                "pay_period": pay_period,
                "net_salary": str(net_salary),
            },
        )


class DuplicatePayrollPeriod(APIError):
    """A non-error payroll record already exists for (employee, pay period)."""

    default_code = "DUPLICATE_PAYROLL_PERIOD"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, employee_id, pay_period, existing_id=None):
        super().__init__(
            f"Payroll for employee {employee_id} in {pay_period} already exists; "
            f"request regeneration to replace it",
            details={
                "employee_id": employee_id,
                "pay_period": pay_period,
                "existing_record_id": existing_id,
            },
        )
