"""Moderation of feedback after submission.

Status moves between pending, approved and rejected at an administrator's
discretion; there is no one-way lock and no transition history. Content
is never edited; a record can only be deleted by its author or an admin.
"""
from __future__ import annotations

import logging

from accounts.access import Action, ensure_allowed
from .exceptions import FieldError, InvalidFeedback
from .models import Feedback, FeedbackStatus

logger = logging.getLogger(__name__)


def set_status(feedback: Feedback, new_status: str, actor) -> Feedback:
    """Move `feedback` to `new_status` (admin only) and stamp `updated_at`."""
    ensure_allowed(actor, Action.MODERATE, feedback)
    if new_status not in FeedbackStatus.values:
        choices = ", ".join(FeedbackStatus.values)
        raise InvalidFeedback([FieldError("status", f"Must be one of: {choices}.", "invalid_status")])
    previous = feedback.status
    feedback.status = new_status
    feedback.save(update_fields=["status", "updated_at"])
    logger.info("Feedback %s moved from %s to %s by user %s", feedback.pk, previous, new_status, actor.pk)
    return feedback


def delete_feedback(feedback: Feedback, actor) -> None:
    ensure_allowed(actor, Action.DELETE, feedback)
    pk = feedback.pk
    feedback.delete()
    logger.info("Feedback %s deleted by user %s", pk, actor.pk)
