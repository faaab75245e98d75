"""
Tests for Celery task idempotency utilities
"""

from unittest.mock import Mock

from django.core.cache import cache
from django.test import SimpleTestCase
from django.utils import timezone

from core.idempotency import clear_idempotency_key, idempotent_task, make_idempotency_key


class IdempotencyKeyTest(SimpleTestCase):
    def test_key_contains_prefix_and_task_name(self):
        key = make_idempotency_key("payroll.generate", args=("2025-10",))
        self.assertTrue(key.startswith("idempotent:payroll.generate:"))

    def test_date_based_key(self):
        key = make_idempotency_key("compliance.check", date_based=True)
        self.assertTrue(key.endswith(timezone.now().date().isoformat()))

    def test_same_args_same_key(self):
        self.assertEqual(
            make_idempotency_key("t", args=(1, 2), kwargs={"a": 1}),
            make_idempotency_key("t", args=[1, 2], kwargs={"a": 1}),
        )

    def test_different_args_different_key(self):
        self.assertNotEqual(
            make_idempotency_key("t", args=("2025-10",)),
            make_idempotency_key("t", args=("2025-11",)),
        )

    def test_kwargs_order_independent(self):
        self.assertEqual(
            make_idempotency_key("t", kwargs={"a": 1, "b": 2}),
            make_idempotency_key("t", kwargs={"b": 2, "a": 1}),
        )


class IdempotentTaskDecoratorTest(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.calls = []
        self.task_self = Mock()
        self.task_self.name = "tests.batch"

        @idempotent_task(ttl_hours=1)
        def batch(task, pay_period, regenerate=False):
            self.calls.append(pay_period)
            return {"pay_period": pay_period, "run": len(self.calls)}

        self.batch = batch

    def tearDown(self):
        cache.clear()

    def test_first_execution_runs(self):
        result = self.batch(self.task_self, "2025-10")

        self.assertEqual(result, {"pay_period": "2025-10", "run": 1})
        self.assertEqual(self.calls, ["2025-10"])

    def test_duplicate_execution_returns_cached_result(self):
        first = self.batch(self.task_self, "2025-10")
        second = self.batch(self.task_self, "2025-10")

        self.assertEqual(first, second)
        self.assertEqual(len(self.calls), 1)

    def test_different_arguments_run_again(self):
        self.batch(self.task_self, "2025-10")
        self.batch(self.task_self, "2025-10", regenerate=True)
        self.batch(self.task_self, "2025-11")

        self.assertEqual(len(self.calls), 3)

    def test_failures_are_not_cached(self):
        attempts = []

        @idempotent_task()
        def flaky(task):
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("broker hiccup")
            return "done"

        with self.assertRaises(RuntimeError):
            flaky(self.task_self)
        self.assertEqual(flaky(self.task_self), "done")
        self.assertEqual(len(attempts), 2)

    def test_clear_key_allows_rerun(self):
        self.batch(self.task_self, "2025-10")

        self.assertTrue(clear_idempotency_key("tests.batch", args=("2025-10",)))
        self.batch(self.task_self, "2025-10")

        self.assertEqual(len(self.calls), 2)
        self.assertFalse(clear_idempotency_key("tests.never_ran"))
