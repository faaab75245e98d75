from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models

from users.models import Employee

from .services.rules import get_rule_registry


class ComplianceRule(models.Model):
    """
    Configurable compliance policy.

    Rules are mutable policy; deactivating or editing one never touches the
    logs it produced while it was active.
    """

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=50, choices=get_rule_registry().choices())
    threshold = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active", "type"], name="compliance_rule_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.type} {self.threshold})"


class ComplianceLogQuerySet(models.QuerySet):
    def open(self):
        return self.filter(status=ComplianceLog.STATUS_OPEN)

    def resolved(self):
        return self.filter(status=ComplianceLog.STATUS_RESOLVED)


class ComplianceLog(models.Model):
    """An immutable violation fact; only its review status changes"""

    STATUS_OPEN = "open"
    STATUS_RESOLVED = "resolved"
    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_RESOLVED, "Resolved"),
    ]

    rule = models.ForeignKey(
        ComplianceRule, on_delete=models.PROTECT, related_name="logs"
    )
    employee = models.ForeignKey(
        Employee, on_delete=models.CASCADE, related_name="compliance_logs"
    )
    violation_date = models.DateField()
    details = models.TextField()
    actual_value = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True
    )
    threshold = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Rule threshold at the time of the violation",
    )
    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=STATUS_OPEN
    )

    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="resolved_compliance_logs",
    )
    resolution_note = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ComplianceLogQuerySet.as_manager()

    class Meta:
        ordering = ["-violation_date", "-created_at"]
        indexes = [
            models.Index(
                fields=["employee", "rule", "violation_date"],
                name="compliance_log_dedup_idx",
            ),
            models.Index(fields=["status"], name="compliance_log_status_idx"),
        ]

    def __str__(self):
        return f"{self.rule_id}/{self.employee_id} {self.violation_date} [{self.status}]"
