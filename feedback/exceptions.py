"""Feedback domain errors, translated to HTTP responses by `api.exceptions`."""
from __future__ import annotations

from typing import Iterable, NamedTuple


class FieldError(NamedTuple):
    field: str
    message: str
    code: str


class FeedbackError(Exception):
    code = "feedback_error"


class InvalidFeedback(FeedbackError):
    """One or more payload fields are invalid; `errors` lists every violation in order."""

    code = "invalid"

    def __init__(self, errors: Iterable[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors))


class DuplicateSubmission(FeedbackError):
    code = "duplicate_submission"

    def __init__(self, message: str = "Feedback for this item was already submitted this semester."):
        super().__init__(message)


class AggregationFailed(FeedbackError):
    code = "aggregation_failed"
