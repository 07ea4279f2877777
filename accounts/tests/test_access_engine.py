from __future__ import annotations

import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.access import (
    STATISTICS,
    AccessDenied,
    Action,
    Reason,
    authorize,
    ensure_allowed,
)
from accounts.models import Role
from catalogue.models import Professor
from feedback.models import Feedback, FeedbackStatus


pytestmark = [pytest.mark.django_db, pytest.mark.security]


def test_unauthenticated_actor_is_denied_everything(professor):
    anon = AnonymousUser()
    for action in Action:
        decision = authorize(anon, action, professor)
        assert not decision
        assert decision.reason is Reason.UNAUTHENTICATED
    assert authorize(None, Action.READ, STATISTICS).reason is Reason.UNAUTHENTICATED


def test_inactive_user_counts_as_unauthenticated(make_user):
    user = make_user(is_active=False)
    assert authorize(user, Action.READ, STATISTICS).reason is Reason.UNAUTHENTICATED


def test_catalogue_reads_open_writes_admin_only(student, admin_user, professor):
    assert authorize(student, Action.READ, professor).reason is Reason.AUTHENTICATED
    for action in (Action.CREATE, Action.UPDATE, Action.DELETE):
        assert authorize(student, action, Professor).reason is Reason.FORBIDDEN
        assert authorize(admin_user, action, Professor).reason is Reason.ADMIN_OVERRIDE


def test_owner_may_read_and_delete_own_feedback(student, professor, make_feedback):
    fb = make_feedback(student, professor, status=FeedbackStatus.PENDING, teaching_quality=4, clarity=4)
    assert authorize(student, Action.READ, fb).reason is Reason.OWNER
    assert authorize(student, Action.DELETE, fb).reason is Reason.OWNER


def test_ownership_survives_anonymity(student, professor, make_feedback):
    fb = make_feedback(student, professor, is_anonymous=True, teaching_quality=4, clarity=4)
    assert authorize(student, Action.DELETE, fb).reason is Reason.OWNER


def test_other_users_cannot_delete_or_read_unapproved(student, other_student, professor, make_feedback):
    pending = make_feedback(student, professor, status=FeedbackStatus.PENDING, teaching_quality=4, clarity=4)
    assert authorize(other_student, Action.READ, pending).reason is Reason.FORBIDDEN
    assert authorize(other_student, Action.DELETE, pending).reason is Reason.FORBIDDEN


def test_approved_feedback_is_readable_by_any_authenticated_user(student, other_student, professor, make_feedback):
    fb = make_feedback(student, professor, teaching_quality=4, clarity=4)
    assert authorize(other_student, Action.READ, fb).reason is Reason.AUTHENTICATED
    assert authorize(other_student, Action.DELETE, fb).reason is Reason.FORBIDDEN


def test_admin_override_on_foreign_feedback(student, admin_user, professor, make_feedback):
    fb = make_feedback(student, professor, status=FeedbackStatus.REJECTED, teaching_quality=1, clarity=1)
    assert authorize(admin_user, Action.DELETE, fb).reason is Reason.ADMIN_OVERRIDE


def test_moderation_is_role_gated_even_for_the_author(student, admin_user, professor, make_feedback):
    fb = make_feedback(student, professor, status=FeedbackStatus.PENDING, teaching_quality=4, clarity=4)
    assert authorize(student, Action.MODERATE, fb).reason is Reason.FORBIDDEN
    assert authorize(admin_user, Action.MODERATE, fb).reason is Reason.ADMIN_OVERRIDE


def test_any_authenticated_user_may_submit_and_read_statistics(make_user):
    for role in (Role.STUDENT, Role.PROFESSOR, Role.ADMIN):
        user = make_user(role)
        assert authorize(user, Action.CREATE, Feedback)
        assert authorize(user, Action.READ, STATISTICS)


def test_user_records_owner_or_admin(student, other_student, admin_user):
    assert authorize(student, Action.UPDATE, student).reason is Reason.OWNER
    assert authorize(other_student, Action.READ, student).reason is Reason.FORBIDDEN
    assert authorize(admin_user, Action.UPDATE, student).reason is Reason.ADMIN_OVERRIDE
    # Administration is never granted by ownership
    assert authorize(student, Action.ADMINISTER, student).reason is Reason.FORBIDDEN


def test_ensure_allowed_raises_with_decision(student, professor):
    with pytest.raises(AccessDenied) as excinfo:
        ensure_allowed(student, Action.DELETE, professor)
    assert excinfo.value.decision.reason is Reason.FORBIDDEN
    assert ensure_allowed(student, "read", professor).allowed
