"""
Time-window aggregation of raw attendance.

Usage:
    from worktime.services import aggregate

    result = aggregate(employee_id, start, end, events, config)
    result.metrics.total_worked_hours
"""

from .aggregator import aggregate
from .contracts import (
    AggregationResult,
    AggregationWarning,
    AttendanceEvent,
    AttendanceKind,
    PeriodMetrics,
)

__all__ = [
    "aggregate",
    "AggregationResult",
    "AggregationWarning",
    "AttendanceEvent",
    "AttendanceKind",
    "PeriodMetrics",
]
