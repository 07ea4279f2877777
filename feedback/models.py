"""Feedback records and the polymorphic target reference.

A feedback row points at its target through `(target_type, target_id)`.
`TARGET_MODELS` is the single mapping from the type tag to the catalogue
model, and `REQUIRED_RATINGS` lists the rating columns each tag stores.
"""
from __future__ import annotations

from django.apps import apps
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models


class TargetType(models.TextChoices):
    PROFESSOR = "professor", "Professor"
    DISCIPLINE = "discipline", "Discipline"
    INFRASTRUCTURE = "infrastructure", "Infrastructure"


class FeedbackStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


TARGET_MODELS = {
    TargetType.PROFESSOR: "catalogue.Professor",
    TargetType.DISCIPLINE: "catalogue.Discipline",
    TargetType.INFRASTRUCTURE: "catalogue.Infrastructure",
}

RATING_FIELDS = ("teaching_quality", "clarity", "infrastructure_condition")

REQUIRED_RATINGS = {
    TargetType.PROFESSOR: ("teaching_quality", "clarity"),
    TargetType.DISCIPLINE: ("teaching_quality", "clarity"),
    TargetType.INFRASTRUCTURE: ("infrastructure_condition",),
}

SEMESTER_REGEX = r"^[0-9]{4}\.[12]\Z"


def get_target_model(target_type: str) -> type[models.Model]:
    """Resolve a target type tag to its catalogue model (ValueError if unknown)."""
    return apps.get_model(TARGET_MODELS[TargetType(target_type)])


def required_ratings(target_type: str) -> tuple[str, ...]:
    return REQUIRED_RATINGS[TargetType(target_type)]


def _rating_field() -> models.PositiveSmallIntegerField:
    return models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )


class Feedback(models.Model):
    target_type = models.CharField(max_length=16, choices=TargetType.choices)
    target_id = models.PositiveBigIntegerField()
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="feedback")
    is_anonymous = models.BooleanField(default=False)

    # Only the columns listed in REQUIRED_RATINGS for the target type are set
    teaching_quality = _rating_field()
    clarity = _rating_field()
    infrastructure_condition = _rating_field()

    comment = models.CharField(max_length=500)
    semester = models.CharField(max_length=6, validators=[RegexValidator(SEMESTER_REGEX)])
    academic_year = models.PositiveSmallIntegerField()

    status = models.CharField(max_length=16, choices=FeedbackStatus.choices, default=FeedbackStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["author", "target_type", "target_id", "semester", "academic_year"],
                name="feedback_unique_per_term",
            ),
        ]
        indexes = [
            models.Index(fields=["target_type", "target_id"], name="feedback_target_idx"),
            models.Index(fields=["academic_year", "semester"], name="feedback_term_idx"),
            models.Index(fields=["status", "target_type"], name="feedback_status_type_idx"),
            models.Index(fields=["-created_at"], name="feedback_created_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.target_type}:{self.target_id} by {self.author_id} ({self.status})"

    @property
    def is_public(self) -> bool:
        return self.status == FeedbackStatus.APPROVED

    @property
    def ratings(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in RATING_FIELDS if getattr(self, name) is not None}

    def get_target(self):
        """Return the referenced catalogue record, or None if it was removed."""
        model = get_target_model(self.target_type)
        return model.objects.filter(pk=self.target_id).first()


def load_targets(rows) -> dict[tuple[str, int], models.Model]:
    """Bulk-load the targets of `rows`, keyed by `(target_type, target_id)`.

    One query per target type present, instead of one per row.
    """
    ids: dict[str, set[int]] = {}
    for row in rows:
        ids.setdefault(row.target_type, set()).add(row.target_id)
    targets = {}
    for target_type, pks in ids.items():
        for pk, target in get_target_model(target_type).objects.in_bulk(sorted(pks)).items():
            targets[(target_type, pk)] = target
    return targets
