"""
Data contracts for payroll computation.

All amounts inside a ``PayrollComputation`` are integers in minor units.
``to_dict`` is the only place they become decimal display strings.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..exceptions import InvalidPayItem
from .money import display, parse_decimal


class PayItemKind(Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"

    def __str__(self):
        return self.value


class PayrollStatus(Enum):
    """Lifecycle of a payroll record: draft -> processed -> paid, or error"""

    DRAFT = "draft"
    PROCESSED = "processed"
    PAID = "paid"
    ERROR = "error"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class PayItem:
    """
    One allowance, bonus, deduction or tax rule.

    ``value`` is a major-unit amount for fixed items and a fraction for
    percentage items (``Decimal('0.10')`` is 10%).
    """

    name: str
    kind: PayItemKind
    value: Decimal

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise InvalidPayItem(self.name, "name is required")
        if not isinstance(self.kind, PayItemKind):
            raise InvalidPayItem(self.name, f"unknown kind {self.kind!r}")
        if not isinstance(self.value, Decimal) or not self.value.is_finite():
            raise InvalidPayItem(self.name, f"value {self.value!r} is not a finite decimal")
        if self.value < 0:
            raise InvalidPayItem(self.name, "value cannot be negative")

    @classmethod
    def fixed(cls, name, amount) -> "PayItem":
        return cls.from_dict({"name": name, "kind": "fixed", "value": amount})

    @classmethod
    def percentage(cls, name, fraction) -> "PayItem":
        return cls.from_dict({"name": name, "kind": "percentage", "value": fraction})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PayItem":
        name = data.get("name", "")
        try:
            kind = PayItemKind(str(data.get("kind", "")).lower())
        except ValueError:
            raise InvalidPayItem(name, f"unknown kind {data.get('kind')!r}") from None
        try:
            value = parse_decimal(data.get("value"))
        except InvalidOperation:
            raise InvalidPayItem(name, f"value {data.get('value')!r} is not a number") from None
        return cls(name=name, kind=kind, value=value)

    @classmethod
    def coerce(cls, item: Union["PayItem", Mapping[str, Any]]) -> "PayItem":
        if isinstance(item, cls):
            return item
        if isinstance(item, Mapping):
            return cls.from_dict(item)
        raise InvalidPayItem(repr(item), "expected a pay item or a mapping")

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "kind": self.kind.value, "value": str(self.value)}


@dataclass(frozen=True)
class BreakdownLine:
    name: str
    kind: PayItemKind
    value: Decimal
    amount: int

    def to_dict(self, minor_units: int = 2) -> Dict[str, str]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "value": str(self.value),
            "amount": display(self.amount, minor_units),
        }


@dataclass(frozen=True)
class PayrollComputation:
    """
    In-memory payroll record.

    ``net_salary`` is derived from the breakdown totals and never stored on
    its own; it is clamped to zero only when the computation is in error.
    """

    employee_id: int
    pay_period: str
    base_salary: int
    allowances_breakdown: Tuple[BreakdownLine, ...] = ()
    bonuses_breakdown: Tuple[BreakdownLine, ...] = ()
    taxes_breakdown: Tuple[BreakdownLine, ...] = ()
    deductions_breakdown: Tuple[BreakdownLine, ...] = ()
    status: PayrollStatus = PayrollStatus.DRAFT
    error: Optional[Exception] = field(default=None, compare=False)
    minor_units: int = 2
    currency: str = "USD"

    @property
    def allowances_total(self) -> int:
        return sum(line.amount for line in self.allowances_breakdown)

    @property
    def bonuses_total(self) -> int:
        return sum(line.amount for line in self.bonuses_breakdown)

    @property
    def gross_salary(self) -> int:
        return self.base_salary + self.allowances_total + self.bonuses_total

    @property
    def taxes_total(self) -> int:
        return sum(line.amount for line in self.taxes_breakdown)

    @property
    def deductions_total(self) -> int:
        return sum(line.amount for line in self.deductions_breakdown)

    @property
    def unclamped_net_salary(self) -> int:
        return self.gross_salary - self.taxes_total - self.deductions_total

    @property
    def net_salary(self) -> int:
        return max(self.unclamped_net_salary, 0)

    @property
    def is_error(self) -> bool:
        return self.status is PayrollStatus.ERROR

    def to_dict(self) -> Dict[str, Any]:
        units = self.minor_units
        return {
            "employee_id": self.employee_id,
            "pay_period": self.pay_period,
            "currency": self.currency,
            "base_salary": display(self.base_salary, units),
            "allowances_breakdown": [line.to_dict(units) for line in self.allowances_breakdown],
            "bonuses_breakdown": [line.to_dict(units) for line in self.bonuses_breakdown],
            "taxes_breakdown": [line.to_dict(units) for line in self.taxes_breakdown],
            "deductions_breakdown": [line.to_dict(units) for line in self.deductions_breakdown],
            "allowances_total": display(self.allowances_total, units),
            "bonuses_total": display(self.bonuses_total, units),
            "gross_salary": display(self.gross_salary, units),
            "taxes_total": display(self.taxes_total, units),
            "deductions_total": display(self.deductions_total, units),
            "net_salary": display(self.net_salary, units),
            "status": self.status.value,
            "error": self.error.to_dict() if self.error is not None else None,
        }


@dataclass(frozen=True)
class PayProfile:
    """Items applied to an employee's base salary when none are given explicitly"""

    allowances: Tuple[PayItem, ...] = ()
    bonuses: Tuple[PayItem, ...] = ()
    deductions: Tuple[PayItem, ...] = ()
    tax_rules: Tuple[PayItem, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PayProfile":
        data = data or {}
        unknown = set(data) - {"allowances", "bonuses", "deductions", "tax_rules"}
        if unknown:
            raise ValueError(f"Unknown pay profile keys: {sorted(unknown)}")
        return cls(
            **{
                key: tuple(PayItem.coerce(item) for item in data.get(key) or ())
                for key in ("allowances", "bonuses", "deductions", "tax_rules")
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowances": [item.to_dict() for item in self.allowances],
            "bonuses": [item.to_dict() for item in self.bonuses],
            "deductions": [item.to_dict() for item in self.deductions],
            "tax_rules": [item.to_dict() for item in self.tax_rules],
        }
