"""
Data contracts exchanged by the rule evaluator and its storage collaborators.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

Number = Union[int, float, Decimal]

LOG_STATUS_OPEN = "open"
LOG_STATUS_RESOLVED = "resolved"


@dataclass(frozen=True)
class ComplianceRuleData:
    """Snapshot of a compliance rule as the evaluator sees it"""

    id: Optional[int]
    name: str
    type: str
    threshold: Number
    is_active: bool = True

    @classmethod
    def from_model(cls, rule) -> "ComplianceRuleData":
        return cls(
            id=rule.pk,
            name=rule.name,
            type=rule.type,
            threshold=rule.threshold,
            is_active=rule.is_active,
        )


@dataclass(frozen=True)
class ComplianceLogEntry:
    """
    A violation computed by the evaluator, not yet persisted.

    Storage assigns the id; the evaluator only ever produces ``open`` entries.
    """

    rule_id: Optional[int]
    employee_id: int
    violation_date: date
    details: str
    rule_type: str
    actual_value: float
    threshold: Number
    status: str = LOG_STATUS_OPEN

    @property
    def dedup_key(self):
        return (self.employee_id, self.rule_id, self.violation_date)


@dataclass
class EvaluationResult:
    """Violations found plus the rules that could not be evaluated"""

    logs: List[ComplianceLogEntry] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)

    @property
    def has_violations(self) -> bool:
        return bool(self.logs)
