"""
Tests for PII-safe logging helpers.
"""

from django.test import SimpleTestCase, TestCase

from core.logging_utils import hash_employee_id, mask_name, safe_log_employee
from tests.fixtures import TestFixtures


class MaskNameTest(SimpleTestCase):
    def test_initials(self):
        self.assertEqual(mask_name("Maria Petrova"), "M.P.")
        self.assertEqual(mask_name("Cher"), "C.")
        self.assertEqual(mask_name("  "), "[no_name]")


class HashEmployeeIdTest(SimpleTestCase):
    def test_stable_and_opaque(self):
        self.assertEqual(hash_employee_id(42), hash_employee_id("42"))
        self.assertNotEqual(hash_employee_id(42), hash_employee_id(43))
        self.assertTrue(hash_employee_id(42).startswith("emp_"))
        self.assertEqual(hash_employee_id(None), "[no_id]")


class SafeLogEmployeeTest(TestCase):
    def test_no_full_name_or_email(self):
        employee = TestFixtures.create_employee("Maria", "Petrova", department="Finance")

        data = safe_log_employee(employee, "payroll_generate")

        self.assertEqual(data["action"], "payroll_generate")
        self.assertEqual(data["employee_id"], employee.pk)
        self.assertEqual(data["name_initials"], "M.P.")
        self.assertEqual(data["department"], "Finance")
        self.assertNotIn("Maria", str(data))
        self.assertNotIn(employee.email, str(data))

    def test_missing_employee(self):
        self.assertEqual(safe_log_employee(None, "x"), {"action": "x", "employee": "none"})
