from django.apps import AppConfig


class FeedbackConfig(AppConfig):
    """App configuration for feedback, moderation and statistics."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "feedback"
