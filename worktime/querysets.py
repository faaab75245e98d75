from django.db import models
from django.db.models import Q


class AttendanceEntryQuerySet(models.QuerySet):
    def for_employee(self, employee_id):
        return self.filter(employee_id=employee_id)

    def overlapping(self, start, end):
        """
        Entries overlapping the half-open window [start, end).

        Open entries (no check-out yet) overlap when they started before the
        window closes; absences are matched on their check-in alone.
        """
        return self.filter(check_in__lt=end).filter(
            Q(check_out__isnull=True) | Q(check_out__gt=start) | Q(check_in__gte=start)
        )
