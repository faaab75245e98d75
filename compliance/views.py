"""
Compliance API: rule management, violation review and on-demand checks.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from django.shortcuts import get_object_or_404

from core.pagination import StandardResultsSetPagination
from users.permissions import IsComplianceReviewer

from .exceptions import RuleInUse
from .filters import ComplianceLogFilter
from .models import ComplianceLog, ComplianceRule
from .serializers import (
    ComplianceLogSerializer,
    ComplianceRuleSerializer,
    ComplianceRunSerializer,
    ResolveLogSerializer,
)
from .services.check_service import ComplianceCheckService, current_week_window
from .services.persistence import resolve_log

logger = logging.getLogger(__name__)


def _require_reviewer(request):
    permission = IsComplianceReviewer()
    if not permission.has_permission(request, None):
        raise PermissionDenied(permission.message)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def rule_list(request):
    """
    GET: all compliance rules.
    POST: create a rule (reviewers only). Names are unique and the type must
    be a registered rule type.
    """
    if request.method == "GET":
        rules = ComplianceRule.objects.all()
        return Response(ComplianceRuleSerializer(rules, many=True).data)

    _require_reviewer(request)
    serializer = ComplianceRuleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    rule = serializer.save()

    logger.info(
        "Compliance rule created",
        extra={
            "rule_id": rule.pk,
            "rule_type": rule.type,
            "user_id": request.user.pk,
            "action": "compliance_rule_created",
        },
    )
    return Response(ComplianceRuleSerializer(rule).data, status=status.HTTP_201_CREATED)


@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def rule_detail(request, pk):
    """
    GET: one rule.
    PATCH: edit name, description, type or threshold (reviewers only).
    DELETE: remove a rule that never produced a log (reviewers only).
    Rules with logs are kept for the audit trail and can only be deactivated.
    """
    rule = get_object_or_404(ComplianceRule, pk=pk)
    if request.method == "GET":
        return Response(ComplianceRuleSerializer(rule).data)

    _require_reviewer(request)

    if request.method == "DELETE":
        log_count = rule.logs.count()
        if log_count:
            raise RuleInUse(rule.pk, log_count)
        rule.delete()
        logger.info(
            "Compliance rule deleted",
            extra={"rule_id": pk, "user_id": request.user.pk, "action": "compliance_rule_deleted"},
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ComplianceRuleSerializer(rule, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    rule = serializer.save()

    logger.info(
        "Compliance rule updated",
        extra={
            "rule_id": rule.pk,
            "fields": sorted(serializer.validated_data),
            "user_id": request.user.pk,
            "action": "compliance_rule_updated",
        },
    )
    return Response(ComplianceRuleSerializer(rule).data)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated, IsComplianceReviewer])
def rule_toggle(request, pk):
    """Flip ``is_active``. Logs produced while the rule was active stay untouched."""
    rule = get_object_or_404(ComplianceRule, pk=pk)
    rule.is_active = not rule.is_active
    rule.save(update_fields=["is_active", "updated_at"])

    logger.info(
        f"Compliance rule {'activated' if rule.is_active else 'deactivated'}",
        extra={
            "rule_id": rule.pk,
            "is_active": rule.is_active,
            "user_id": request.user.pk,
            "action": "compliance_rule_toggled",
        },
    )
    return Response(ComplianceRuleSerializer(rule).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsComplianceReviewer])
def log_list(request):
    """Violation logs, newest first; filter by status, employee, rule, dates."""
    queryset = ComplianceLog.objects.select_related("rule", "employee", "resolved_by")
    filterset = ComplianceLogFilter(request.GET, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(filterset.qs, request)
    return paginator.get_paginated_response(ComplianceLogSerializer(page, many=True).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsComplianceReviewer])
def log_resolve(request, pk):
    log = get_object_or_404(ComplianceLog, pk=pk)
    serializer = ResolveLogSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    log = resolve_log(log, request.user, serializer.validated_data["note"])
    return Response(ComplianceLogSerializer(log).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsComplianceReviewer])
def run_check(request):
    """
    Run the compliance check over a window.

    **Request Body:**
    ```json
    {
        "period_start": "2024-11-04T00:00:00Z",  // Optional, default: current ISO week
        "period_end": "2024-11-11T00:00:00Z",
        "employee_ids": [1, 2, 3],               // Optional, default: all active
        "run_async": false                       // Optional, queue a Celery task instead
    }
    ```
    """
    serializer = ComplianceRunSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if "period_start" in data:
        period_start, period_end = data["period_start"], data["period_end"]
    else:
        period_start, period_end = current_week_window()
    employee_ids = data.get("employee_ids")

    if data["run_async"]:
        from .tasks import run_weekly_compliance_check

        task = run_weekly_compliance_check.delay(
            period_start.isoformat(), period_end.isoformat(), employee_ids
        )
        return Response(
            {"status": "queued", "task_id": task.id}, status=status.HTTP_202_ACCEPTED
        )

    result = ComplianceCheckService().run(period_start, period_end, employee_ids)

    return Response(
        {
            "status": result.status.value,
            "period_start": period_start.isoformat(),
            "period_end": period_end.isoformat(),
            "summary": result.summary(),
            "results": [outcome.to_dict() for outcome in result.results.values()],
            "errors": [error.to_dict() for error in result.errors.values()],
        }
    )
