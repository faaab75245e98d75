"""
TimeWindow aggregator.

Collapses the raw attendance of one employee into a ``PeriodMetrics`` snapshot
for the half-open window ``[period_start, period_end)``. The function is pure:
no database access, no configuration lookup, and the same arguments always
produce the same result regardless of the order the entries arrive in.
"""

import logging
from collections import defaultdict
from datetime import timedelta
from typing import Iterable, List, Optional, Tuple

from core.config import EngineConfig, OvertimeBasis
from core.exceptions import InvalidWindow

from .contracts import (
    AggregationResult,
    AggregationWarning,
    AttendanceEvent,
    AttendanceKind,
    PeriodMetrics,
)

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def _sort_key(event: AttendanceEvent):
    return (event.start, event.entry_id if event.entry_id is not None else -1)


def _bucket_key(moment, basis: OvertimeBasis):
    if basis is OvertimeBasis.DAILY:
        return moment.date()
    iso_year, iso_week, _ = moment.isocalendar()
    return (iso_year, iso_week)


def _overlaps(event: AttendanceEvent, period_start, period_end) -> bool:
    if event.end is None or event.end <= event.start:
        # Point-like facts (open clock-ins, absences without a duration)
        return period_start <= event.start < period_end
    return event.start < period_end and event.end > period_start


def _longest_run(dates) -> int:
    longest = current = 0
    previous = None
    for day in sorted(dates):
        if previous is not None and day - previous == timedelta(days=1):
            current += 1
        else:
            current = 1
        longest = max(longest, current)
        previous = day
    return longest


def _merge_overlapping(intervals: List[Tuple]) -> List[Tuple]:
    """Union of overlapping intervals; back-to-back shifts stay separate"""
    merged: List[Tuple] = []
    for start, end in sorted(intervals):
        if merged and start < merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def _shortest_rest_seconds(intervals: List[Tuple]) -> Optional[int]:
    if len(intervals) < 2:
        return None

    shortest = None
    latest_end = intervals[0][1]
    for start, end in intervals[1:]:
        gap = max(0, int((start - latest_end).total_seconds()))
        shortest = gap if shortest is None else min(shortest, gap)
        latest_end = max(latest_end, end)
    return shortest


def aggregate(
    employee_id: int,
    period_start,
    period_end,
    raw_entries: Iterable[AttendanceEvent],
    config: Optional[EngineConfig] = None,
) -> AggregationResult:
    """
    Aggregate raw attendance into period totals.

    Args:
        employee_id: Employee the entries belong to
        period_start: Inclusive window start
        period_end: Exclusive window end
        raw_entries: Attendance events overlapping the window
        config: Engine configuration (standard hours, overtime basis and cap)

    Returns:
        AggregationResult: metrics plus warnings for every skipped entry

    Raises:
        InvalidWindow: if period_end <= period_start
    """
    if period_end <= period_start:
        raise InvalidWindow(period_start, period_end, employee_id=employee_id)

    config = config or EngineConfig()
    warnings: List[AggregationWarning] = []
    intervals: List[Tuple] = []
    absence_count = 0
    late_count = 0

    for event in sorted(raw_entries, key=_sort_key):
        if event.end is not None and event.end < event.start:
            warnings.append(
                AggregationWarning(
                    event.entry_id,
                    AggregationWarning.NEGATIVE_DURATION,
                    f"Entry ends at {event.end.isoformat()} before it starts at "
                    f"{event.start.isoformat()}",
                )
            )
            continue

        if not _overlaps(event, period_start, period_end):
            warnings.append(
                AggregationWarning(
                    event.entry_id,
                    AggregationWarning.OUTSIDE_WINDOW,
                    f"Entry starting {event.start.isoformat()} does not overlap the window",
                )
            )
            continue

        if event.kind is AttendanceKind.ABSENT:
            absence_count += 1
        elif event.kind is AttendanceKind.LATE:
            late_count += 1

        if not event.kind.counts_as_worked:
            continue

        if event.is_open:
            warnings.append(
                AggregationWarning(
                    event.entry_id,
                    AggregationWarning.OPEN_ENTRY,
                    f"Entry started {event.start.isoformat()} has no check-out yet",
                )
            )
            continue

        start = max(event.start, period_start)
        end = min(event.end, period_end)
        if end > start:
            intervals.append((start, end))

    intervals = _merge_overlapping(intervals)
    basis = config.overtime_basis
    threshold_seconds = int(round(config.standard_threshold_hours * SECONDS_PER_HOUR))

    worked_seconds = 0
    bucket_seconds = defaultdict(int)
    worked_dates = set()
    for start, end in intervals:
        seconds = int((end - start).total_seconds())
        worked_seconds += seconds
        bucket_seconds[_bucket_key(start, basis)] += seconds
        worked_dates.add(start.date())

    overtime_seconds = sum(
        max(0, seconds - threshold_seconds) for seconds in bucket_seconds.values()
    )
    if config.overtime_cap_hours is not None:
        overtime_seconds = min(
            overtime_seconds, int(round(config.overtime_cap_hours * SECONDS_PER_HOUR))
        )

    rest_seconds = _shortest_rest_seconds(intervals)

    metrics = PeriodMetrics(
        employee_id=employee_id,
        period_start=period_start,
        period_end=period_end,
        total_worked_hours=worked_seconds / SECONDS_PER_HOUR,
        total_overtime_hours=overtime_seconds / SECONDS_PER_HOUR,
        absence_count=absence_count,
        late_count=late_count,
        worked_days=len(worked_dates),
        longest_consecutive_days=_longest_run(worked_dates),
        shortest_rest_hours=(
            rest_seconds / SECONDS_PER_HOUR if rest_seconds is not None else None
        ),
    )

    if warnings:
        logger.debug(
            f"Aggregation skipped {len(warnings)} entries",
            extra={
                "employee_id": employee_id,
                "warning_codes": sorted({w.code for w in warnings}),
                "action": "aggregation_entries_skipped",
            },
        )

    return AggregationResult(metrics=metrics, warnings=tuple(warnings))
