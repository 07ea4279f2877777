"""Catalogue of feedback targets (professors, disciplines, infrastructure).

These records are managed by administrators and referenced by feedback
through the `(target_type, target_id)` pair defined in `feedback.models`.
"""
from __future__ import annotations

from django.core.validators import MinLengthValidator
from django.db import models


class Professor(models.Model):
    """A professor; disciplines are linked from `Discipline.professors`."""

    name = models.CharField(max_length=100, validators=[MinLengthValidator(3)])
    courses = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def summary(self) -> dict:
        return {"id": self.pk, "name": self.name, "courses": self.courses}


class Discipline(models.Model):
    name = models.CharField(max_length=150, unique=True, validators=[MinLengthValidator(3)])
    department = models.CharField(max_length=100)
    courses = models.JSONField(default=list, blank=True)
    professors = models.ManyToManyField(Professor, related_name="disciplines", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [models.Index(fields=["department"], name="catalogue_disc_dept_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    def summary(self) -> dict:
        return {"id": self.pk, "name": self.name, "department": self.department, "courses": self.courses}


class InfrastructureType(models.TextChoices):
    LABORATORY = "laboratory", "Laboratory"
    CLASSROOM = "classroom", "Classroom"
    LIBRARY = "library", "Library"
    AUDITORIUM = "auditorium", "Auditorium"
    CAFETERIA = "cafeteria", "Cafeteria"
    SPORTS_FACILITY = "sports_facility", "Sports facility"


class Infrastructure(models.Model):
    """A campus facility. Inactive items stay rateable but are hidden from listings."""

    name = models.CharField(max_length=100, validators=[MinLengthValidator(3)])
    type = models.CharField(max_length=32, choices=InfrastructureType.choices)
    location = models.CharField(max_length=200)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["type"], name="catalogue_infra_type_idx"),
            models.Index(fields=["location"], name="catalogue_infra_loc_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.get_type_display()})"

    def summary(self) -> dict:
        return {"id": self.pk, "name": self.name, "type": self.type, "location": self.location}
