from django.urls import path

from . import views

app_name = "compliance"

urlpatterns = [
    path("rules/", views.rule_list, name="rule-list"),
    path("rules/<int:pk>/", views.rule_detail, name="rule-detail"),
    path("rules/<int:pk>/toggle/", views.rule_toggle, name="rule-toggle"),
    path("logs/", views.log_list, name="log-list"),
    path("logs/<int:pk>/resolve/", views.log_resolve, name="log-resolve"),
    path("run/", views.run_check, name="run"),
]
