"""
Per-employee fan-out for organization-wide batch runs.

Main entry points:
    ParallelExecutor - runs one pure computation per employee
    BulkOperationResult - successes and per-employee failures side by side
"""

from .parallel_executor import ParallelExecutor, get_default_executor
from .types import BulkOperationResult, EmployeeOperationError, ProcessingStatus

__all__ = [
    "BulkOperationResult",
    "EmployeeOperationError",
    "ParallelExecutor",
    "ProcessingStatus",
    "get_default_executor",
]
