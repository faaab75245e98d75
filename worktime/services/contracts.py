"""
Data contracts for time-window aggregation.

These are plain values with no Django imports: the aggregator, the rule
evaluator, the payroll calculator and the burnout scorer all exchange them,
and none of them may mutate a ``PeriodMetrics`` once it has been built.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class AttendanceKind(Enum):
    """Kind of a raw attendance fact"""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"

    def __str__(self):
        return self.value

    @property
    def counts_as_worked(self) -> bool:
        """Late arrivals still worked; absences contribute no hours"""
        return self is not AttendanceKind.ABSENT


@dataclass(frozen=True)
class AttendanceEvent:
    entry_id: Optional[int]
    employee_id: int
    start: datetime
    end: Optional[datetime] = None
    kind: AttendanceKind = AttendanceKind.PRESENT

    @property
    def is_open(self) -> bool:
        return self.end is None


@dataclass(frozen=True)
class PeriodMetrics:
    """
    Per-employee totals over ``[period_start, period_end)``.

    Recomputed from scratch on every aggregation; never updated in place.
    """

    employee_id: int
    period_start: datetime
    period_end: datetime
    total_worked_hours: float = 0.0
    total_overtime_hours: float = 0.0
    absence_count: int = 0
    late_count: int = 0
    worked_days: int = 0
    longest_consecutive_days: int = 0
    shortest_rest_hours: Optional[float] = None

    def __post_init__(self):
        if self.period_end <= self.period_start:
            raise ValueError("period_end must be after period_start")
        if self.total_worked_hours < 0 or self.total_overtime_hours < 0:
            raise ValueError("Hour totals cannot be negative")
        if self.absence_count < 0 or self.late_count < 0:
            raise ValueError("Tallies cannot be negative")

    @property
    def period_days(self) -> float:
        return (self.period_end - self.period_start).total_seconds() / 86400

    @property
    def period_weeks(self) -> float:
        """Length of the window in weeks, never less than one"""
        return max(self.period_days / 7, 1.0)

    @property
    def avg_weekly_overtime_hours(self) -> float:
        return self.total_overtime_hours / self.period_weeks

    @property
    def avg_weekly_worked_hours(self) -> float:
        return self.total_worked_hours / self.period_weeks


@dataclass(frozen=True)
class AggregationWarning:
    """An entry the aggregator skipped, and why"""

    entry_id: Optional[int]
    code: str
    message: str

    OPEN_ENTRY = "open_entry"
    NEGATIVE_DURATION = "negative_duration"
    OUTSIDE_WINDOW = "outside_window"


@dataclass(frozen=True)
class AggregationResult:
    metrics: PeriodMetrics
    warnings: Tuple[AggregationWarning, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
