# apps/api/v1/urls.py
from django.urls import path, include

from apps.api.common.views import health_check

urlpatterns = [
    path("health/", health_check, name="health"),

    # =========================
    # Domain APIs
    # =========================
    path("attempts/", include("apps.domains.attempts.urls")),
]
