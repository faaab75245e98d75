from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ComplianceRule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("max_absences", "Maximum absences"),
                            ("max_consecutive_days", "Maximum consecutive working days"),
                            ("max_hours_per_week", "Maximum hours per week"),
                            ("max_late_arrivals", "Maximum late arrivals"),
                            ("max_overtime_hours", "Maximum overtime hours"),
                            ("min_hours_per_week", "Minimum hours per week"),
                            ("min_rest_between_shifts", "Minimum rest between shifts"),
                        ],
                        max_length=50,
                    ),
                ),
                (
                    "threshold",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["is_active", "type"], name="compliance_rule_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplianceLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("violation_date", models.DateField()),
                ("details", models.TextField()),
                ("actual_value", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                (
                    "threshold",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Rule threshold at the time of the violation",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("open", "Open"), ("resolved", "Resolved")],
                        default="open",
                        max_length=10,
                    ),
                ),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolution_note", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="compliance_logs",
                        to="users.employee",
                    ),
                ),
                (
                    "resolved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="resolved_compliance_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "rule",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="logs",
                        to="compliance.compliancerule",
                    ),
                ),
            ],
            options={
                "ordering": ["-violation_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["employee", "rule", "violation_date"], name="compliance_log_dedup_idx"),
                    models.Index(fields=["status"], name="compliance_log_status_idx"),
                ],
            },
        ),
    ]
