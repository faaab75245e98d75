"""
Utilities for safe logging with automatic PII data masking
"""

import hashlib
from typing import Any, Dict, Union


def mask_name(full_name: str) -> str:
    """
    Masks full name for safe logging

    Args:
        full_name: Full name to mask

    Returns:
        Initials (e.g., M.P.)
    """
    if not full_name or not full_name.strip():
        return "[no_name]"

    parts = full_name.strip().split()
    if len(parts) == 1:
        return f"{parts[0][0]}."
    return f"{parts[0][0]}.{parts[1][0]}."


def hash_employee_id(employee_id: Union[int, str], salt: str = "workforce") -> str:
    """
    Creates a stable, non-reversible reference to an employee for log lines
    that leave the service (e.g. shipped to a third-party aggregator).
    """
    if employee_id is None or employee_id == "":
        return "[no_id]"

    digest = hashlib.sha256(f"{salt}:{employee_id}".encode()).hexdigest()
    return f"emp_{digest[:8]}"


def safe_log_employee(employee, action: str = "action") -> Dict[str, Any]:
    """
    Creates safe object for logging employee data

    Args:
        employee: Employee model instance (or None)
        action: Action description

    Returns:
        Dictionary with safe data for logging
    """
    if not employee:
        return {"action": action, "employee": "none"}

    safe_data = {
        "action": action,
        "employee_id": employee.pk,
        "employee_hash": hash_employee_id(employee.pk),
        "department": getattr(employee, "department", "") or "unassigned",
    }

    full_name = f"{getattr(employee, 'first_name', '') or ''} {getattr(employee, 'last_name', '') or ''}".strip()
    if full_name:
        safe_data["name_initials"] = mask_name(full_name)

    return safe_data
