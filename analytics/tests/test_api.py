"""
API tests for the burnout analytics endpoint.
"""

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from tests.base import BaseAPITestCase
from tests.fixtures import TestFixtures


class BurnoutEndpointTest(BaseAPITestCase):
    role = "hr"

    def setUp(self):
        super().setUp()
        self.worker = TestFixtures.create_employee("Work", "Er", department="Ops")
        TestFixtures.create_entry(self.worker, timezone.now() - timedelta(days=2), 12)
        self.url = reverse("analytics:burnout")

    def test_default_period(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["period"], 30)
        self.assertEqual(response.data["summary"]["total_employees"], 2)
        self.assertEqual(response.data["employees"][0]["employee_id"], self.worker.pk)

    def test_department_filter(self):
        response = self.client.get(self.url, {"period": 7, "department": "Ops"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["period"], 7)
        self.assertEqual(
            [row["employee_id"] for row in response.data["employees"]], [self.worker.pk]
        )

    def test_invalid_period(self):
        response = self.client.get(self.url, {"period": 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class BurnoutEndpointPermissionsTest(BaseAPITestCase):
    role = "employee"

    def test_employee_is_forbidden(self):
        response = self.client.get(reverse("analytics:burnout"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
