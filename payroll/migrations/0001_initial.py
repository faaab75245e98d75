from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PayrollRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pay_period", models.CharField(help_text="YYYY-MM", max_length=7)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("base_salary", models.DecimalField(decimal_places=2, max_digits=12)),
                ("allowances_breakdown", models.JSONField(blank=True, default=list)),
                ("bonuses_breakdown", models.JSONField(blank=True, default=list)),
                ("taxes_breakdown", models.JSONField(blank=True, default=list)),
                ("deductions_breakdown", models.JSONField(blank=True, default=list)),
                ("allowances_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("bonuses_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("gross_salary", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("taxes_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("deductions_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("net_salary", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "attendance_summary",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Worked days and hours for the period at generation time",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("processed", "Processed"),
                            ("paid", "Paid"),
                            ("error", "Error"),
                        ],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("error_code", models.CharField(blank=True, max_length=50)),
                ("error_message", models.TextField(blank=True)),
                (
                    "voided_at",
                    models.DateTimeField(
                        blank=True, help_text="Set when a regeneration replaced this record", null=True
                    ),
                ),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payroll_records",
                        to="users.employee",
                    ),
                ),
            ],
            options={
                "ordering": ["-pay_period", "employee_id", "-created_at"],
                "indexes": [
                    models.Index(fields=["pay_period", "status"], name="payroll_period_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("voided_at__isnull", True), models.Q(("status", "error"), _negated=True)),
                        fields=("employee", "pay_period"),
                        name="unique_active_payroll_per_period",
                    ),
                ],
            },
        ),
    ]
