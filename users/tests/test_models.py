"""
Tests for the Employee model.
"""

from decimal import Decimal

from django.test import TestCase

from tests.fixtures import TestFixtures
from users.models import Employee


class EmployeeQuerySetTest(TestCase):
    def setUp(self):
        self.active = TestFixtures.create_employee("Active", "One")
        self.other = TestFixtures.create_employee("Active", "Two")
        self.inactive = TestFixtures.create_employee("Former", "Three", is_active=False)

    def test_active(self):
        self.assertEqual(set(Employee.objects.active()), {self.active, self.other})

    def test_for_ids(self):
        self.assertEqual(Employee.objects.for_ids(None).count(), 3)
        self.assertEqual(list(Employee.objects.for_ids([self.other.pk])), [self.other])
        self.assertFalse(Employee.objects.for_ids([]).exists())

    def test_for_ids_accepts_generators(self):
        ids = (pk for pk in [self.active.pk, self.inactive.pk])
        self.assertEqual(Employee.objects.active().for_ids(ids).get(), self.active)


class EmployeeModelTest(TestCase):
    def test_defaults_and_name(self):
        employee = Employee.objects.create(
            first_name="Maria", last_name="Petrova", email="maria@example.com"
        )

        self.assertEqual(employee.role, "employee")
        self.assertEqual(employee.monthly_salary, Decimal("0.00"))
        self.assertTrue(employee.is_active)
        self.assertEqual(employee.get_full_name(), "Maria Petrova")
