# workforce/urls.py
from rest_framework.decorators import (
    api_view,
    authentication_classes,
    permission_classes,
)
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

from .health import health_check


@api_view(["GET"])
@permission_classes([AllowAny])
@authentication_classes([])
def api_root(request):
    """API root endpoint showing available endpoints"""
    return Response(
        {
            "message": "Workforce Engine API",
            "version": "1.0",
            "endpoints": {
                "v1_compliance": request.build_absolute_uri("/api/v1/compliance/"),
                "v1_payroll": request.build_absolute_uri("/api/v1/payroll/"),
                "v1_analytics": request.build_absolute_uri("/api/v1/analytics/"),
            },
        }
    )


urlpatterns = [
    path("", RedirectView.as_view(url="/api/", permanent=False)),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health-check"),
    path("api/", api_root, name="api-root"),
    path("api/v1/compliance/", include("compliance.urls")),
    path("api/v1/payroll/", include("payroll.urls")),
    path("api/v1/analytics/", include("analytics.urls")),
]
