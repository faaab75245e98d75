# core/exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ValidationError
from django.http import Http404
from django.utils import timezone
import logging
import uuid

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent error format
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    # Generate unique error ID for tracking
    error_id = str(uuid.uuid4())[:8]
    timestamp = timezone.now().isoformat()

    request = context.get("request")
    user = getattr(request, "user", None)
    path = getattr(request, "path", "unknown")
    method = getattr(request, "method", "unknown")

    if response is not None:
        # Standard DRF exceptions
        response.data = {
            "error": True,
            "code": get_error_code(exc),
            "message": get_error_message(response.data),
            "details": format_error_details(response.data),
            "error_id": error_id,
            "timestamp": timestamp,
        }

        logger.error(
            f"API Error [{error_id}]: {exc.__class__.__name__} - "
            f"{method} {path} - User: {user} - Status: {response.status_code}"
        )
        return response

    if isinstance(exc, APIError):
        # Domain errors carry their own code, status and context
        logger.warning(
            f"Domain Error [{error_id}]: {exc.code} - {method} {path} - {exc.message}",
            extra={
                "error_id": error_id,
                "code": exc.code,
                "details": exc.details,
                "action": "domain_error",
            },
        )
        return Response(
            {
                "error": True,
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
                "error_id": error_id,
                "timestamp": timestamp,
            },
            status=exc.status_code,
        )

    if isinstance(exc, Http404):
        response = Response(
            {
                "error": True,
                "code": "RESOURCE_NOT_FOUND",
                "message": "The requested resource was not found.",
                "details": None,
                "error_id": error_id,
                "timestamp": timestamp,
            },
            status=status.HTTP_404_NOT_FOUND,
        )
    elif isinstance(exc, ValidationError):
        response = Response(
            {
                "error": True,
                "code": "VALIDATION_ERROR",
                "message": "Validation failed.",
                "details": (
                    exc.message_dict if hasattr(exc, "message_dict") else exc.messages
                ),
                "error_id": error_id,
                "timestamp": timestamp,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    else:
        response = Response(
            {
                "error": True,
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An internal server error occurred.",
                "details": None,
                "error_id": error_id,
                "timestamp": timestamp,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    logger.error(
        f"Unhandled Exception [{error_id}]: {exc.__class__.__name__} - "
        f"{method} {path} - User: {user}",
        exc_info=True,
    )

    return response


def get_error_code(exc):
    """
    Generate appropriate error code based on exception type
    """
    error_codes = {
        "ValidationError": "VALIDATION_ERROR",
        "PermissionDenied": "PERMISSION_DENIED",
        "NotAuthenticated": "AUTHENTICATION_REQUIRED",
        "AuthenticationFailed": "AUTHENTICATION_FAILED",
        "NotFound": "RESOURCE_NOT_FOUND",
        "Http404": "RESOURCE_NOT_FOUND",
        "MethodNotAllowed": "METHOD_NOT_ALLOWED",
        "ParseError": "PARSE_ERROR",
        "UnsupportedMediaType": "UNSUPPORTED_MEDIA_TYPE",
        "Throttled": "RATE_LIMIT_EXCEEDED",
    }

    return error_codes.get(exc.__class__.__name__, "UNKNOWN_ERROR")


def get_error_message(data):
    """
    Extract human-readable error message from DRF error data
    """
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        if "non_field_errors" in data:
            return (
                str(data["non_field_errors"][0])
                if data["non_field_errors"]
                else "Validation error"
            )
        for key, value in data.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
            if isinstance(value, str):
                return value
        return "Validation error"
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)


def format_error_details(data):
    """
    Format error details for consistent structure
    """
    if isinstance(data, dict):
        details = {k: v for k, v in data.items() if k != "detail"}
        return details if details else None
    if isinstance(data, list):
        return data
    return None


class APIError(Exception):
    """
    Base class for business logic errors.

    Every engine error carries a machine-readable ``code``, the HTTP status the
    API layer should answer with, and a ``details`` dict with the context a
    caller needs to act on it (employee, period, rule).
    """

    default_code = "API_ERROR"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, code=None, status_code=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.details = details or {}

    def to_dict(self):
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidWindow(APIError):
    """Raised when a time window is empty or inverted (end <= start)."""

    default_code = "INVALID_WINDOW"

    def __init__(self, period_start, period_end, employee_id=None):
        super().__init__(
            f"Invalid time window: end {period_end} must be after start {period_start}",
            details={
                "employee_id": employee_id,
                "period_start": str(period_start),
                "period_end": str(period_end),
            },
        )


class InvalidStatusTransition(APIError):
    """Raised when a record is asked to move to a status it cannot reach."""

    default_code = "INVALID_STATUS_TRANSITION"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, entity, entity_id, current, requested):
        super().__init__(
            f"{entity} {entity_id} cannot move from '{current}' to '{requested}'",
            details={
                "entity": entity,
                "id": entity_id,
                "current_status": current,
                "requested_status": requested,
            },
        )
