"""
Health check views for DevOps monitoring
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check for the database and the cache backend
    """
    status = {
        "status": "healthy",
        "timestamp": timezone.now().isoformat(),
        "services": {},
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        status["services"]["database"] = {"status": "healthy"}
    except DatabaseError:
        logger.exception("Database health check failed")
        status["services"]["database"] = {
            "status": "unhealthy",
            "error": "Database connection failed",
        }
        status["status"] = "unhealthy"

    # Redis in production, locmem in tests
    try:
        cache.set("health_check", "ok", 10)
        if cache.get("health_check") != "ok":
            raise ConnectionError("cache round-trip returned stale value")
        status["services"]["cache"] = {"status": "healthy"}
    except Exception:
        logger.exception("Cache health check failed")
        status["services"]["cache"] = {
            "status": "unhealthy",
            "error": "Cache service unavailable",
        }
        status["status"] = "unhealthy"

    http_status = 200 if status["status"] == "healthy" else 503
    return JsonResponse(status, status=http_status)
