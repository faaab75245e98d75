from datetime import timedelta
from decimal import Decimal

from compliance.models import ComplianceRule
from users.models import Employee
from worktime.models import AttendanceEntry


class TestFixtures:
    """Test data factory"""

    @staticmethod
    def create_employee(first_name="Test", last_name="User", email=None, **kwargs):
        if email is None:
            email = f"{first_name.lower()}.{last_name.lower()}@example.com"

        defaults = {"monthly_salary": Decimal("5000.00"), "is_active": True}
        defaults.update(kwargs)

        return Employee.objects.create(
            first_name=first_name, last_name=last_name, email=email, **defaults
        )

    @staticmethod
    def create_entry(employee, check_in, hours=8, kind=AttendanceEntry.KIND_PRESENT):
        """Attendance entry; ``hours=None`` leaves it open"""
        check_out = check_in + timedelta(hours=hours) if hours is not None else None
        return AttendanceEntry.objects.create(
            employee=employee, check_in=check_in, check_out=check_out, kind=kind
        )

    @staticmethod
    def create_week(employee, monday, hours_per_day=8, days=5):
        """One shift per day starting 09:00, Monday onwards"""
        return [
            TestFixtures.create_entry(
                employee, monday + timedelta(days=day, hours=9), hours_per_day
            )
            for day in range(days)
        ]

    @staticmethod
    def create_rule(rule_type="max_hours_per_week", threshold="40", name=None, **kwargs):
        return ComplianceRule.objects.create(
            name=name or f"{rule_type} {threshold}",
            type=rule_type,
            threshold=Decimal(threshold),
            **kwargs,
        )
