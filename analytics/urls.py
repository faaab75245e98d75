from django.urls import path

from . import views

app_name = "analytics"

urlpatterns = [
    path("burnout/", views.burnout_report, name="burnout"),
]
