from django.contrib import admin
from django.urls import include, path

from ticketing.handlers import HealthView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health", HealthView.as_view(), name="health"),
    path("api/", include("ticketing.urls")),
]
