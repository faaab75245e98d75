"""
Payroll API: period generation, record review, status lifecycle and payslips.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from django.shortcuts import get_object_or_404

from core.pagination import StandardResultsSetPagination
from users.models import Employee
from users.permissions import IsAccountantOrAdmin, get_employee_profile

from .filters import PayrollRecordFilter
from .models import PayrollOverride, PayrollRecord
from .serializers import (
    PayrollGenerateSerializer,
    PayrollOverrideSerializer,
    PayrollOverrideWriteSerializer,
    PayrollRecordSerializer,
    PayrollStatusSerializer,
)
from .services.bulk import BulkPayrollService
from .services import calculator
from .services.overrides import delete_override, save_override
from .services.payroll_service import PayrollService

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsAccountantOrAdmin])
def generate_payroll(request):
    """
    Generate payroll records for a pay period.

    **Request Body:**
    ```json
    {
        "pay_period": "2025-10",
        "employee_ids": [1, 2, 3],   // Optional, default: all active
        "regenerate": false,         // Optional, void and replace existing records
        "run_async": false           // Optional, queue a Celery task instead
    }
    ```

    Employees that already have a record for the period are listed under
    ``errors`` with code ``DUPLICATE_PAYROLL_PERIOD`` unless ``regenerate``
    is set.
    """
    serializer = PayrollGenerateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    pay_period = data["pay_period"]
    employee_ids = data.get("employee_ids")

    logger.info(
        "Payroll generation requested",
        extra={
            "pay_period": pay_period,
            "employee_count": len(employee_ids) if employee_ids else None,
            "regenerate": data["regenerate"],
            "run_async": data["run_async"],
            "user_id": request.user.pk,
            "action": "payroll_generate_requested",
        },
    )

    if data["run_async"]:
        from .tasks import generate_period_payroll

        task = generate_period_payroll.delay(pay_period, employee_ids, data["regenerate"])
        return Response(
            {"status": "queued", "task_id": task.id}, status=status.HTTP_202_ACCEPTED
        )

    result = BulkPayrollService().generate_period(
        pay_period, employee_ids=employee_ids, regenerate=data["regenerate"]
    )

    records = [result.results[employee_id] for employee_id in sorted(result.results)]
    return Response(
        {
            "status": result.status.value,
            "pay_period": pay_period,
            "summary": result.summary(),
            "records": PayrollRecordSerializer(records, many=True).data,
            "errors": [error.to_dict() for error in result.errors.values()],
        },
        status=status.HTTP_201_CREATED if records else status.HTTP_200_OK,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsAccountantOrAdmin])
def payroll_list(request):
    """Active (non-voided) records; filter by pay_period, status, employee."""
    queryset = PayrollRecord.objects.active().select_related("employee")
    filterset = PayrollRecordFilter(request.GET, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(filterset.qs, request)
    return paginator.get_paginated_response(PayrollRecordSerializer(page, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def payroll_detail(request, pk):
    """
    One record, voided ones included. Payroll operators see every record,
    other employees only their own.
    """
    record = get_object_or_404(PayrollRecord.objects.select_related("employee"), pk=pk)

    if not IsAccountantOrAdmin().has_permission(request, None):
        employee = get_employee_profile(request.user)
        if employee is None or record.employee_id != employee.pk:
            raise NotFound("Payroll record not found")

    return Response(PayrollRecordSerializer(record).data)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated, IsAccountantOrAdmin])
def payroll_status(request, pk):
    """Move a record to ``processed`` or ``paid``."""
    record = get_object_or_404(PayrollRecord, pk=pk)
    serializer = PayrollStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    record = PayrollService().update_status(record, serializer.validated_data["status"])
    return Response(PayrollRecordSerializer(record).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsAccountantOrAdmin])
def payroll_summary(request, pay_period):
    return Response(PayrollService().period_summary(pay_period))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_payslips(request):
    """The calling employee's active records, newest period first."""
    employee = get_employee_profile(request.user)
    if employee is None:
        raise NotFound("No employee profile linked to this user")

    queryset = PayrollRecord.objects.active().filter(employee=employee)
    pay_period = request.GET.get("pay_period")
    if pay_period:
        queryset = queryset.filter(pay_period=pay_period)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset.select_related("employee"), request)
    return paginator.get_paginated_response(PayrollRecordSerializer(page, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsAccountantOrAdmin])
def override_list(request):
    """Pay profile overrides, optionally for one pay_period."""
    queryset = PayrollOverride.objects.select_related("employee")
    pay_period = request.GET.get("pay_period")
    if pay_period:
        queryset = queryset.filter(pay_period=pay_period)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(PayrollOverrideSerializer(page, many=True).data)


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated, IsAccountantOrAdmin])
def override_detail(request, employee_id, pay_period):
    """
    GET: the override for (employee, pay period).
    PUT: create or replace it.
    DELETE: remove it; generation falls back to the default profile.

    **PUT body:**
    ```json
    {
        "profile": {
            "allowances": [{"name": "Housing", "kind": "percentage", "value": "0.10"}],
            "tax_rules": [{"name": "Income Tax", "kind": "percentage", "value": "0.10"}]
        }
    }
    ```
    """
    calculator.validate_pay_period(pay_period)
    employee = get_object_or_404(Employee, pk=employee_id)

    if request.method == "GET":
        override = get_object_or_404(
            PayrollOverride.objects.select_related("employee"),
            employee=employee,
            pay_period=pay_period,
        )
        return Response(PayrollOverrideSerializer(override).data)

    if request.method == "DELETE":
        if not delete_override(employee.pk, pay_period):
            raise NotFound("No override for this employee and pay period")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = PayrollOverrideWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    override = save_override(employee.pk, pay_period, serializer.validated_data["profile"])
    return Response(PayrollOverrideSerializer(override).data)
