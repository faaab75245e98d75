from django.urls import path

from . import views

app_name = "payroll"

urlpatterns = [
    path("", views.payroll_list, name="record-list"),
    path("generate/", views.generate_payroll, name="generate"),
    path("<int:pk>/", views.payroll_detail, name="record-detail"),
    path("<int:pk>/status/", views.payroll_status, name="record-status"),
    path("summary/<str:pay_period>/", views.payroll_summary, name="summary"),
    path("payslips/", views.my_payslips, name="payslips"),
    path("overrides/", views.override_list, name="override-list"),
    path(
        "overrides/<int:employee_id>/<str:pay_period>/",
        views.override_detail,
        name="override-detail",
    ),
]
