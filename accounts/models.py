"""Accounts models: user profile and roles.

Defines a `UserProfile` associated one-to-one with Django's `User`,
capturing the platform role, the university registration number and the
courses a user attends. The profile is created automatically on user
creation (see `signals.py`).
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    """Platform roles used by the access control engine."""

    STUDENT = "student", "Student"
    PROFESSOR = "professor", "Professor"
    ADMIN = "admin", "Administrator"


class UserProfile(models.Model):
    """Profile linked to a Django auth user.

    - `role`: drives role-gated actions (catalogue management, moderation)
    - `registration`: unique university registration number; mirrored in
      `User.username` for accounts created through the API
    - `courses`: list of course codes
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)
    full_name = models.CharField(max_length=50, blank=True)
    registration = models.CharField(max_length=20, unique=True)
    courses = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["role"], name="accounts_profile_role_idx")]

    def __str__(self) -> str:  # pragma: no cover (string repr convenience)
        return f"Profile<{self.registration}:{self.role}>"
