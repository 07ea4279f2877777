from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """App configuration for user profiles, credentials and access control."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"

    def ready(self) -> None:  # pragma: no cover
        from . import signals  # noqa: F401
        return super().ready()
