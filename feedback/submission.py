"""Feedback validation and submission.

`validate_and_build_feedback` checks a raw payload and returns an unsaved
`Feedback`; it collects every field problem before raising so a client can
fix all of them in one round-trip. `submit_feedback` persists the result.

Expected payload::

    {
        "target_type": "professor",
        "target_id": 12,
        "ratings": {"teaching_quality": 4, "clarity": 5},
        "comment": "Clear and well organised lectures.",
        "metadata": {"semester": "2025.1", "academic_year": 2025},
        "is_anonymous": false
    }

Rating keys that do not apply to the target type are ignored, so they can
never reach the averages.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounts.access import Action, ensure_allowed
from .exceptions import DuplicateSubmission, FieldError, InvalidFeedback
from .models import SEMESTER_REGEX, Feedback, FeedbackStatus, TargetType, get_target_model, required_ratings

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 500
MIN_RATING, MAX_RATING = 1, 5

_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)
_SEMESTER = re.compile(SEMESTER_REGEX)


def _as_int(value: Any) -> int | None:
    """Accept ints and integer strings; reject bools, floats and anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    return None


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def academic_year_bounds() -> tuple[int, int]:
    return settings.FEEDBACK_FIRST_ACADEMIC_YEAR, timezone.now().year + 1


def _check_target(payload: Mapping, errors: list[FieldError]) -> tuple[str | None, int | None]:
    target_type = payload.get("target_type")
    if _missing(target_type):
        errors.append(FieldError("target_type", "This field is required.", "required"))
        target_type = None
    elif target_type not in TargetType.values:
        choices = ", ".join(TargetType.values)
        errors.append(FieldError("target_type", f"Must be one of: {choices}.", "invalid_target_type"))
        target_type = None

    raw_id = payload.get("target_id")
    target_id = _as_int(raw_id)
    if _missing(raw_id):
        errors.append(FieldError("target_id", "This field is required.", "required"))
    elif target_id is None or target_id < 1:
        errors.append(FieldError("target_id", "Must be a positive integer.", "invalid"))
        target_id = None
    elif target_type is not None and not get_target_model(target_type).objects.filter(pk=target_id).exists():
        errors.append(FieldError("target_id", f"No {target_type} with id {target_id}.", "target_not_found"))
    return target_type, target_id


def _check_ratings(payload: Mapping, target_type: str | None, errors: list[FieldError]) -> dict[str, int]:
    raw = payload.get("ratings")
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        errors.append(FieldError("ratings", "Expected an object of rating values.", "invalid"))
        return {}
    if target_type is None:
        # Which ratings are required depends on a valid target type
        return {}
    ratings: dict[str, int] = {}
    for name in required_ratings(target_type):
        field = f"ratings.{name}"
        value = raw.get(name)
        if _missing(value):
            errors.append(FieldError(field, "This field is required.", "required"))
            continue
        number = _as_int(value)
        if number is None or not MIN_RATING <= number <= MAX_RATING:
            errors.append(FieldError(field, f"Must be an integer between {MIN_RATING} and {MAX_RATING}.", "invalid_rating"))
            continue
        ratings[name] = number
    return ratings


def _check_comment(payload: Mapping, errors: list[FieldError]) -> str:
    comment = payload.get("comment")
    if not isinstance(comment, str) or not comment.strip():
        errors.append(FieldError("comment", "This field is required.", "required"))
        return ""
    comment = comment.strip()
    if len(comment) > MAX_COMMENT_LENGTH:
        errors.append(FieldError("comment", f"Must be at most {MAX_COMMENT_LENGTH} characters.", "max_length"))
    return comment


def _check_metadata(payload: Mapping, errors: list[FieldError]) -> tuple[str | None, int | None]:
    metadata = payload.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, Mapping):
        errors.append(FieldError("metadata", "Expected an object with semester and academic_year.", "invalid"))
        return None, None

    semester = metadata.get("semester")
    if _missing(semester):
        errors.append(FieldError("metadata.semester", "This field is required.", "required"))
        semester = None
    elif not isinstance(semester, str) or not _SEMESTER.match(semester):
        errors.append(FieldError("metadata.semester", "Must use the YYYY.S format with S in {1, 2} (e.g. 2025.1).", "invalid_semester"))
        semester = None

    raw_year = metadata.get("academic_year")
    year = _as_int(raw_year)
    first, last = academic_year_bounds()
    if _missing(raw_year):
        errors.append(FieldError("metadata.academic_year", "This field is required.", "required"))
    elif year is None or not first <= year <= last:
        errors.append(FieldError("metadata.academic_year", f"Must be an integer between {first} and {last}.", "invalid_academic_year"))
        year = None
    return semester, year


def validate_and_build_feedback(payload: Any, author) -> Feedback:
    """Validate `payload` for `author` and return an unsaved pending `Feedback`.

    Raises `InvalidFeedback` with every field error, or `DuplicateSubmission`
    when the author already rated this target in the same term.
    """
    if not isinstance(payload, Mapping):
        raise InvalidFeedback([FieldError("non_field_errors", "Expected a JSON object.", "invalid")])

    errors: list[FieldError] = []
    target_type, target_id = _check_target(payload, errors)
    ratings = _check_ratings(payload, target_type, errors)
    comment = _check_comment(payload, errors)
    semester, academic_year = _check_metadata(payload, errors)
    is_anonymous = payload.get("is_anonymous", False)
    if is_anonymous is None:
        is_anonymous = False
    if not isinstance(is_anonymous, bool):
        errors.append(FieldError("is_anonymous", "Must be a boolean.", "invalid"))
    if errors:
        raise InvalidFeedback(errors)

    # Check-then-write; the unique constraint catches concurrent duplicates on save
    duplicate = Feedback.objects.filter(
        author=author,
        target_type=target_type,
        target_id=target_id,
        semester=semester,
        academic_year=academic_year,
    ).exists()
    if duplicate:
        raise DuplicateSubmission()

    return Feedback(
        target_type=target_type,
        target_id=target_id,
        author=author,
        is_anonymous=is_anonymous,
        comment=comment,
        semester=semester,
        academic_year=academic_year,
        status=FeedbackStatus.PENDING,
        **ratings,
    )


def submit_feedback(payload: Any, author) -> Feedback:
    """Authorise, validate and store a new feedback record for `author`."""
    ensure_allowed(author, Action.CREATE, Feedback)
    feedback = validate_and_build_feedback(payload, author)
    try:
        with transaction.atomic():
            feedback.save()
    except IntegrityError as exc:
        raise DuplicateSubmission() from exc
    logger.info(
        "Feedback %s submitted for %s %s (semester %s)",
        feedback.pk,
        feedback.target_type,
        feedback.target_id,
        feedback.semester,
    )
    return feedback
