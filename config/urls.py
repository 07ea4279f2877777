"""URL routing for the Escuta feedback API.

Admin site plus the versioned REST API and its OpenAPI documentation,
which `api.urls` mounts at the root.
"""
from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("api.urls")),
]
