"""
Workforce analytics API.
"""

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from users.models import Employee
from users.permissions import IsComplianceReviewer

from .serializers import BurnoutReportQuerySerializer
from .services.report import BurnoutReportService


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsComplianceReviewer])
def burnout_report(request):
    """
    Burnout risk for active employees over the last ``period`` days.

    **Query Parameters:**
    - period: number of days to look back (default 30, max 366)
    - department: restrict to one department
    """
    serializer = BurnoutReportQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    params = serializer.validated_data

    employee_ids = None
    if "department" in params:
        employee_ids = list(
            Employee.objects.active()
            .filter(department=params["department"])
            .values_list("pk", flat=True)
        )

    report = BurnoutReportService().build(params["period"], employee_ids=employee_ids)
    return Response(report)
