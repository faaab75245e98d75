import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AttendanceEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("check_in", models.DateTimeField(help_text="When the employee started work")),
                ("check_out", models.DateTimeField(blank=True, help_text="When the employee finished work", null=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("present", "Present"), ("absent", "Absent"), ("late", "Late")],
                        default="present",
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="attendance_entries",
                        to="users.employee",
                    ),
                ),
            ],
            options={
                "verbose_name": "Attendance Entry",
                "verbose_name_plural": "Attendance Entries",
                "ordering": ["check_in"],
                "indexes": [
                    models.Index(fields=["employee", "check_in"], name="worktime_entry_emp_in_idx"),
                ],
            },
        ),
    ]
