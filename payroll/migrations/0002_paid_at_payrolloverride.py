import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
        ("payroll", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="payrollrecord",
            name="paid_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.CreateModel(
            name="PayrollOverride",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pay_period", models.CharField(help_text="YYYY-MM", max_length=7)),
                ("profile", models.JSONField(default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payroll_overrides",
                        to="users.employee",
                    ),
                ),
            ],
            options={
                "ordering": ["-pay_period", "employee_id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("employee", "pay_period"), name="unique_payroll_override_per_period"
                    ),
                ],
            },
        ),
    ]
