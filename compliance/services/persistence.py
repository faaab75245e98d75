"""
Persistence collaborator for compliance logs.

The evaluator hands over plain ``ComplianceLogEntry`` values; this module
decides what reaches the database. Re-running a check for the same window
must not pile up copies of a violation that is still under review, so by
default an entry is skipped when an open log already exists for the same
(employee, rule, violation_date).
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from compliance.models import ComplianceLog
from core.exceptions import InvalidStatusTransition

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


def _as_decimal(value):
    if value is None:
        return None
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _existing_open_keys(entries) -> set:
    query = Q()
    for entry in entries:
        query |= Q(
            employee_id=entry.employee_id,
            rule_id=entry.rule_id,
            violation_date=entry.violation_date,
        )
    rows = ComplianceLog.objects.open().filter(query).values_list(
        "employee_id", "rule_id", "violation_date"
    )
    return set(rows)


def persist_logs(entries: Iterable, *, suppress_open_duplicates: bool = True) -> List[ComplianceLog]:
    """
    Insert violation logs.

    Args:
        entries: ComplianceLogEntry values from the evaluator
        suppress_open_duplicates: Skip entries that already have an open log

    Returns:
        List[ComplianceLog]: the rows actually created
    """
    entries = list(entries)
    if not entries:
        return []

    with transaction.atomic():
        existing = _existing_open_keys(entries) if suppress_open_duplicates else set()

        to_create = []
        seen = set()
        for entry in entries:
            key = entry.dedup_key
            if suppress_open_duplicates and (key in existing or key in seen):
                continue
            seen.add(key)
            to_create.append(
                ComplianceLog(
                    rule_id=entry.rule_id,
                    employee_id=entry.employee_id,
                    violation_date=entry.violation_date,
                    details=entry.details,
                    actual_value=_as_decimal(entry.actual_value),
                    threshold=_as_decimal(entry.threshold),
                    status=ComplianceLog.STATUS_OPEN,
                )
            )

        created = ComplianceLog.objects.bulk_create(to_create)

    skipped = len(entries) - len(created)
    logger.info(
        f"Persisted {len(created)} compliance logs ({skipped} already open)",
        extra={
            "created": len(created),
            "skipped": skipped,
            "action": "compliance_logs_persisted",
        },
    )
    return created


def resolve_log(log: ComplianceLog, user, note: str = "") -> ComplianceLog:
    """
    Reviewer-side ``open -> resolved`` transition.

    Raises:
        InvalidStatusTransition: if the log is already resolved
    """
    with transaction.atomic():
        locked = ComplianceLog.objects.select_for_update().get(pk=log.pk)
        if locked.status != ComplianceLog.STATUS_OPEN:
            raise InvalidStatusTransition(
                "ComplianceLog", locked.pk, locked.status, ComplianceLog.STATUS_RESOLVED
            )

        locked.status = ComplianceLog.STATUS_RESOLVED
        locked.resolved_at = timezone.now()
        locked.resolved_by = user
        locked.resolution_note = note or ""
        locked.save(
            update_fields=[
                "status",
                "resolved_at",
                "resolved_by",
                "resolution_note",
                "updated_at",
            ]
        )

    logger.info(
        "Compliance log resolved",
        extra={
            "log_id": locked.pk,
            "rule_id": locked.rule_id,
            "employee_id": locked.employee_id,
            "resolved_by": getattr(user, "pk", None),
            "action": "compliance_log_resolved",
        },
    )
    return locked
