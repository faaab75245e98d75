# users/permissions.py
from rest_framework.permissions import BasePermission

PAYROLL_ROLES = ("accountant", "hr", "admin")
COMPLIANCE_REVIEWER_ROLES = ("manager", "hr", "admin")


def get_employee_profile(user):
    """Return the Employee linked to a Django user, or None"""
    if not user or not user.is_authenticated:
        return None
    return getattr(user, "employee_profile", None)


def _has_role(user, roles):
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    profile = get_employee_profile(user)
    return profile is not None and profile.role in roles


class IsAccountantOrAdmin(BasePermission):
    """
    Permission for payroll operators (accountant, HR, admin)
    """

    message = "Accountant or Admin access required"

    def has_permission(self, request, view):
        return _has_role(request.user, PAYROLL_ROLES)


class IsComplianceReviewer(BasePermission):
    """
    Permission for reviewers who manage rules and resolve violations
    """

    message = "Compliance reviewer access required"

    def has_permission(self, request, view):
        return _has_role(request.user, COMPLIANCE_REVIEWER_ROLES)
