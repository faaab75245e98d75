# Payroll services package
#
# Only the pure calculator is exported here. PayrollService, the store and
# the bulk service import models; import them from their modules.

from .calculator import compute, validate_pay_period
from .contracts import (
    BreakdownLine,
    PayItem,
    PayItemKind,
    PayProfile,
    PayrollComputation,
    PayrollStatus,
)

__all__ = [
    "BreakdownLine",
    "PayItem",
    "PayItemKind",
    "PayProfile",
    "PayrollComputation",
    "PayrollStatus",
    "compute",
    "validate_pay_period",
]
