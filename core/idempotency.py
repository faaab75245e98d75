"""
Idempotency guard for batch Celery tasks.

Batch tasks (weekly compliance run, period payroll generation) can be
delivered twice by the broker or retried after a partial run. The guard keeps
a short-lived completion marker in the Django cache keyed by task name and
arguments, so a redelivered task returns the first run's summary instead of
running the batch again. Storage-level guards (the payroll unique constraint,
open-log suppression) remain the source of truth; this only saves the work.
"""

import hashlib
import json
import logging
from functools import wraps

from django.core.cache import cache
from django.utils import timezone

logger = logging.getLogger(__name__)

KEY_PREFIX = "idempotent"


def make_idempotency_key(task_name, args=None, kwargs=None, date_based=False):
    """
    Build a deterministic cache key for a task invocation.

    Args:
        task_name: Name of the Celery task
        args: Positional arguments
        kwargs: Keyword arguments (order-insensitive)
        date_based: Scope the key to today's date

    Returns:
        String key such as ``idempotent:payroll.generate:1a2b...``
    """
    payload = json.dumps(
        {"args": list(args or []), "kwargs": kwargs or {}},
        sort_keys=True,
        default=str,
    )
    digest = hashlib.sha256(payload.encode()).hexdigest()[:16]

    parts = [KEY_PREFIX, task_name, digest]
    if date_based:
        parts.append(timezone.now().date().isoformat())
    return ":".join(parts)


def idempotent_task(ttl_hours=24, date_based=False):
    """
    Decorator for bound Celery tasks.

    Usage:
        @shared_task(bind=True)
        @idempotent_task(ttl_hours=12)
        def generate_period_payroll(self, pay_period):
            ...

    Failures are not cached, so a retry after an exception runs again.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            task_name = getattr(self, "name", None) or func.__name__
            key = make_idempotency_key(task_name, args, kwargs, date_based)

            cached = cache.get(key)
            if cached is not None:
                logger.info(
                    f"Task {task_name} already completed, returning cached summary",
                    extra={
                        "task_name": task_name,
                        "idempotency_key": key,
                        "completed_at": cached.get("completed_at"),
                        "action": "task_duplicate_skipped",
                    },
                )
                return cached.get("result")

            result = func(self, *args, **kwargs)

            cache.set(
                key,
                {"result": result, "completed_at": timezone.now().isoformat()},
                timeout=int(ttl_hours * 3600),
            )
            return result

        return wrapper

    return decorator


def clear_idempotency_key(task_name, args=None, kwargs=None, date_based=False):
    """Drop a completion marker so the task can run again. Returns True if one existed."""
    key = make_idempotency_key(task_name, args, kwargs, date_based)
    return bool(cache.delete(key))
