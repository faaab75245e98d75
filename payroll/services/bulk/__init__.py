"""
Bulk payroll generation for a whole pay period.

Main entry point:
    BulkPayrollService - load once, compute in parallel, persist per employee
"""

from .bulk_service import BulkPayrollService

__all__ = ["BulkPayrollService"]
