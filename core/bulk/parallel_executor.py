"""
Parallel executor for per-employee bulk computations.

Fans one independent computation out per employee. The computations handed to
it are pure functions over already-loaded data, so there is no ordering
dependency between employees and no shared state to guard.

Key features:
- Automatic worker count based on CPU cores
- Threads by default, processes on request (callables must be picklable)
- Per-employee error capture: a failing task never aborts the batch
- Optional wall-clock limit for the whole batch
"""

import logging
import os
from concurrent.futures import (
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    TimeoutError,
    as_completed,
)
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ParallelExecutor:
    """
    Executes ``func(payload)`` for every ``employee_id -> payload`` pair.

    Returns a mapping of employee id to either the function's result or the
    exception it raised.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        use_processes: bool = False,
        batch_timeout: Optional[float] = None,
    ):
        """
        Initialize parallel executor.

        Args:
            max_workers: Maximum number of workers (None = auto-detect)
            use_processes: Use processes (True) or threads (False)
            batch_timeout: Wall-clock limit for the whole batch in seconds
                (None = no limit); unfinished employees are reported as timeouts
        """
        self.use_processes = use_processes
        self.max_workers = max_workers or self._get_optimal_worker_count()
        self.batch_timeout = batch_timeout

        logger.debug(
            f"ParallelExecutor initialized with {self.max_workers} workers "
            f"({'processes' if use_processes else 'threads'})",
            extra={
                "max_workers": self.max_workers,
                "use_processes": use_processes,
                "batch_timeout": batch_timeout,
                "action": "parallel_executor_init",
            },
        )

    def _get_optimal_worker_count(self) -> int:
        cpu_count = os.cpu_count() or 4
        if self.use_processes:
            return max(1, cpu_count - 1)  # Leave one core for the web worker
        return min(32, cpu_count * 2)

    def map(
        self,
        func: Callable[[Any], T],
        payloads: Mapping[int, Any],
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> Dict[int, Union[T, Exception]]:
        """
        Run ``func`` once per employee payload.

        Args:
            func: Computation taking a single payload
            payloads: Payload by employee_id
            progress_callback: Optional callback(completed, total, status)

        Returns:
            Dict mapping employee_id to result or the raised exception
        """
        if not payloads:
            return {}

        start_time = datetime.now()
        results: Dict[int, Union[T, Exception]] = {}
        total_tasks = len(payloads)
        completed_tasks = 0

        logger.info(
            f"Starting parallel computation for {total_tasks} employees",
            extra={
                "total_tasks": total_tasks,
                "operation": getattr(func, "__name__", repr(func)),
                "max_workers": self.max_workers,
                "action": "parallel_computation_start",
            },
        )

        executor_class = (
            ProcessPoolExecutor if self.use_processes else ThreadPoolExecutor
        )
        workers = min(self.max_workers, total_tasks)

        with executor_class(max_workers=workers) as executor:
            future_to_employee = {
                executor.submit(func, payload): employee_id
                for employee_id, payload in payloads.items()
            }

            try:
                for future in as_completed(
                    future_to_employee, timeout=self.batch_timeout
                ):
                    employee_id = future_to_employee[future]
                    outcome = "success"

                    try:
                        results[employee_id] = future.result()
                    except Exception as e:
                        outcome = "error"
                        results[employee_id] = e
                        logger.warning(
                            f"Computation error for employee {employee_id}: {e}",
                            extra={
                                "employee_id": employee_id,
                                "error": str(e),
                                "error_type": type(e).__name__,
                                "action": "computation_error",
                            },
                        )

                    completed_tasks += 1
                    if progress_callback:
                        progress_callback(completed_tasks, total_tasks, outcome)

            except TimeoutError:
                for future, employee_id in future_to_employee.items():
                    if employee_id in results:
                        continue
                    future.cancel()
                    results[employee_id] = TimeoutError(
                        f"Batch did not finish within {self.batch_timeout}s"
                    )
                    completed_tasks += 1
                    if progress_callback:
                        progress_callback(completed_tasks, total_tasks, "timeout")

                logger.error(
                    f"Parallel computation timed out after {self.batch_timeout}s",
                    extra={
                        "batch_timeout": self.batch_timeout,
                        "completed": completed_tasks,
                        "total_tasks": total_tasks,
                        "action": "computation_timeout",
                    },
                )

        duration = (datetime.now() - start_time).total_seconds()
        error_count = sum(1 for r in results.values() if isinstance(r, Exception))

        logger.info(
            f"Parallel computation completed: {total_tasks - error_count} success, "
            f"{error_count} errors in {duration:.2f}s",
            extra={
                "total_tasks": total_tasks,
                "success_count": total_tasks - error_count,
                "error_count": error_count,
                "duration_seconds": duration,
                "action": "parallel_computation_complete",
            },
        )

        return results


def get_default_executor() -> ParallelExecutor:
    """Executor sized from the ``BULK_MAX_WORKERS`` / ``BULK_BATCH_TIMEOUT`` settings"""
    from django.conf import settings

    return ParallelExecutor(
        max_workers=getattr(settings, "BULK_MAX_WORKERS", None),
        batch_timeout=getattr(settings, "BULK_BATCH_TIMEOUT", None),
    )
