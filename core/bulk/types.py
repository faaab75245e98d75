"""
Type definitions for bulk (per-employee fan-out) operations.

Batch runs over a whole organization report successes and failures side by
side; one employee's bad data never aborts the rest of the batch.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from core.exceptions import APIError

T = TypeVar("T")


class ProcessingStatus(Enum):
    """Status of bulk processing operation."""

    PENDING = "pending"
    LOADING_DATA = "loading_data"
    CALCULATING = "calculating"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class EmployeeOperationError:
    """Details about a failed computation for a specific employee."""

    employee_id: int
    error_type: str
    error_message: str
    error_code: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_exception(cls, employee_id: int, exc: BaseException) -> "EmployeeOperationError":
        if isinstance(exc, APIError):
            return cls(
                employee_id=employee_id,
                error_type=type(exc).__name__,
                error_message=exc.message,
                error_code=exc.code,
                details=dict(exc.details),
            )
        return cls(
            employee_id=employee_id,
            error_type=type(exc).__name__,
            error_message=str(exc),
            error_code="INTERNAL_ERROR",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "error_type": self.error_type,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "details": self.details,
        }


@dataclass
class BulkOperationResult(Generic[T]):
    """
    Result of a bulk operation.

    ``results`` and ``errors`` are keyed by employee id and never overlap.
    """

    results: Dict[int, T] = field(default_factory=dict)
    errors: Dict[int, EmployeeOperationError] = field(default_factory=dict)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    @property
    def total_count(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def successful_count(self) -> int:
        return len(self.results)

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    @property
    def status(self) -> ProcessingStatus:
        if not self.errors:
            return ProcessingStatus.COMPLETED
        if not self.results:
            return ProcessingStatus.FAILED
        return ProcessingStatus.PARTIAL

    def add_result(self, employee_id: int, result: T) -> None:
        self.errors.pop(employee_id, None)
        self.results[employee_id] = result

    def add_error(self, employee_id: int, exc: BaseException) -> None:
        self.results.pop(employee_id, None)
        self.errors[employee_id] = EmployeeOperationError.from_exception(
            employee_id, exc
        )

    def finish(self) -> "BulkOperationResult[T]":
        self.end_time = datetime.now()
        return self

    def get_failed_employee_ids(self) -> List[int]:
        return sorted(self.errors)

    def summary(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "total": self.total_count,
            "successful": self.successful_count,
            "failed": self.failed_count,
            "duration_seconds": round(self.duration_seconds, 3),
        }

    def __repr__(self):
        return (
            f"BulkOperationResult(total={self.total_count}, "
            f"successful={self.successful_count}, failed={self.failed_count})"
        )
