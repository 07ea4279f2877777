from django.apps import AppConfig


class CatalogueConfig(AppConfig):
    """App configuration for professors, disciplines and infrastructure."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "catalogue"
