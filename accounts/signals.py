"""Signals for automatic profile management.

On user creation, create a default `UserProfile`. Superusers created from
the command line become platform administrators; everyone else starts as
a student until registration or an admin says otherwise.
"""
from django.contrib.auth.models import User
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Role, UserProfile


def placeholder_registration(user_id: int) -> str:
    # Non-numeric, so it can never collide with a real registration number
    return f"U{user_id:07d}"


@receiver(post_save, sender=User)
def create_user_profile(sender, instance: User, created: bool, **kwargs):  # noqa: D401
    """Create a profile for new users."""
    if created:
        role = Role.ADMIN if instance.is_superuser else Role.STUDENT
        UserProfile.objects.create(
            user=instance,
            role=role,
            full_name=instance.get_full_name(),
            registration=placeholder_registration(instance.id),
        )


@receiver(pre_save, sender=UserProfile)
def ensure_registration(sender, instance: UserProfile, **kwargs):  # noqa: D401
    """Ensure every profile carries a registration number."""
    if not getattr(instance, "registration", "") and getattr(instance, "user_id", None):
        instance.registration = placeholder_registration(instance.user_id)
