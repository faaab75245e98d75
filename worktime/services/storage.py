"""
Storage collaborator for the aggregator.

Reads attendance rows through the ORM and hands them over as plain
``AttendanceEvent`` values, converted to local time so that day and ISO-week
buckets follow the configured ``TIME_ZONE``.
"""

from typing import Dict, Iterable, List, Optional

from django.utils import timezone

from worktime.models import AttendanceEntry

from .contracts import AttendanceEvent, AttendanceKind


def _local(moment):
    if moment is None:
        return None
    if timezone.is_aware(moment):
        return timezone.localtime(moment)
    return moment


def to_event(entry: AttendanceEntry) -> AttendanceEvent:
    return AttendanceEvent(
        entry_id=entry.pk,
        employee_id=entry.employee_id,
        start=_local(entry.check_in),
        end=_local(entry.check_out),
        kind=AttendanceKind(entry.kind),
    )


def get_raw_attendance(employee_id: int, start, end) -> List[AttendanceEvent]:
    """Attendance events of one employee overlapping ``[start, end)``, open ones included"""
    queryset = (
        AttendanceEntry.objects.for_employee(employee_id)
        .overlapping(start, end)
        .order_by("check_in", "pk")
    )
    return [to_event(entry) for entry in queryset]


def get_raw_attendance_bulk(
    start, end, employee_ids: Optional[Iterable[int]] = None
) -> Dict[int, List[AttendanceEvent]]:
    """
    Same as ``get_raw_attendance`` for many employees in one query.

    Used by batch runs so the database is read once before fan-out.
    """
    queryset = AttendanceEntry.objects.overlapping(start, end).order_by(
        "employee_id", "check_in", "pk"
    )
    if employee_ids is not None:
        employee_ids = list(employee_ids)
        queryset = queryset.filter(employee_id__in=employee_ids)

    grouped: Dict[int, List[AttendanceEvent]] = {
        employee_id: [] for employee_id in (employee_ids or [])
    }
    for entry in queryset:
        grouped.setdefault(entry.employee_id, []).append(to_event(entry))
    return grouped
