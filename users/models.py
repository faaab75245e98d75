# users/models.py
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models


class EmployeeQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_ids(self, employee_ids=None):
        """Restrict to the given ids; ``None`` means the whole organization"""
        if employee_ids is None:
            return self
        return self.filter(pk__in=list(employee_ids))


class Employee(models.Model):
    """Employee record the durable engine outputs (logs, payroll) point at"""

    objects = EmployeeQuerySet.as_manager()

    # Link to Django user (null for employees without a login)
    user = models.OneToOneField(
        User,
        on_delete=models.SET_NULL,
        related_name="employee_profile",
        null=True,
        blank=True,
    )

    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    email = models.EmailField(unique=True)
    department = models.CharField(max_length=100, blank=True, default="")

    ROLE_CHOICES = [
        ("employee", "Employee"),
        ("manager", "Manager"),
        ("accountant", "Accountant"),
        ("hr", "HR"),
        ("admin", "Administrator"),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="employee")

    monthly_salary = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Base salary for one monthly pay period",
    )

    is_active = models.BooleanField(
        default=True, help_text="Whether the employee is currently active"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["last_name", "first_name"]
        verbose_name = "Employee"
        verbose_name_plural = "Employees"
        indexes = [
            models.Index(fields=["is_active"], name="users_employee_active_idx"),
            models.Index(fields=["department"], name="users_employee_dept_idx"),
        ]

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.get_full_name()
