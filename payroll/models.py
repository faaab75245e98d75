from decimal import Decimal

from django.db import models
from django.db.models import Q

from users.models import Employee

from .services.contracts import PayProfile, PayrollStatus


class PayrollRecordQuerySet(models.QuerySet):
    def active(self):
        """Records that still count: not voided by a regeneration"""
        return self.filter(voided_at__isnull=True)

    def blocking(self):
        """Records that block a new generation for the same period"""
        return self.active().exclude(status=PayrollStatus.ERROR.value)

    def for_period(self, pay_period):
        return self.filter(pay_period=pay_period)


class PayrollRecord(models.Model):
    """
    Persisted payroll computation.

    ``net_salary`` is stored for querying and reporting but is always written
    from the same computation as the breakdowns next to it.
    """

    STATUS_CHOICES = [(s.value, s.value.title()) for s in PayrollStatus]

    employee = models.ForeignKey(
        Employee, on_delete=models.PROTECT, related_name="payroll_records"
    )
    pay_period = models.CharField(max_length=7, help_text="YYYY-MM")
    currency = models.CharField(max_length=3, default="USD")

    base_salary = models.DecimalField(max_digits=12, decimal_places=2)
    allowances_breakdown = models.JSONField(default=list, blank=True)
    bonuses_breakdown = models.JSONField(default=list, blank=True)
    taxes_breakdown = models.JSONField(default=list, blank=True)
    deductions_breakdown = models.JSONField(default=list, blank=True)

    allowances_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    bonuses_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    gross_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    taxes_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    deductions_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    attendance_summary = models.JSONField(
        default=dict,
        blank=True,
        help_text="Worked days and hours for the period at generation time",
    )

    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=PayrollStatus.DRAFT.value
    )
    error_code = models.CharField(max_length=50, blank=True)
    error_message = models.TextField(blank=True)

    voided_at = models.DateTimeField(
        null=True, blank=True, help_text="Set when a regeneration replaced this record"
    )
    processed_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PayrollRecordQuerySet.as_manager()

    class Meta:
        ordering = ["-pay_period", "employee_id", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "pay_period"],
                condition=Q(voided_at__isnull=True) & ~Q(status="error"),
                name="unique_active_payroll_per_period",
            )
        ]
        indexes = [
            models.Index(fields=["pay_period", "status"], name="payroll_period_status_idx"),
        ]

    @property
    def is_voided(self):
        return self.voided_at is not None

    def __str__(self):
        return f"{self.employee_id} {self.pay_period} [{self.status}]"


class PayrollOverride(models.Model):
    """
    Pay profile for one employee and one pay period.

    Generation uses it in place of the configured default profile. ``profile``
    holds the ``PayProfile.to_dict()`` form.
    """

    employee = models.ForeignKey(
        Employee, on_delete=models.CASCADE, related_name="payroll_overrides"
    )
    pay_period = models.CharField(max_length=7, help_text="YYYY-MM")
    profile = models.JSONField(default=dict)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-pay_period", "employee_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "pay_period"], name="unique_payroll_override_per_period"
            )
        ]

    def get_profile(self) -> PayProfile:
        return PayProfile.from_dict(self.profile)

    def __str__(self):
        return f"Override {self.employee_id} {self.pay_period}"
