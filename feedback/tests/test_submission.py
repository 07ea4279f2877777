from __future__ import annotations

from unittest import mock

import pytest
from django.contrib.auth.models import AnonymousUser
from django.db import IntegrityError, transaction
from django.db.models.query import QuerySet
from django.test import TestCase, override_settings

from accounts.access import AccessDenied
from catalogue.models import Infrastructure, Professor
from feedback.exceptions import DuplicateSubmission, InvalidFeedback
from feedback.models import Feedback, FeedbackStatus
from feedback.submission import submit_feedback, validate_and_build_feedback


def _payload(target, **overrides):
    data = {
        "target_type": "professor",
        "target_id": target.pk,
        "ratings": {"teaching_quality": 4, "clarity": 5},
        "comment": "Clear and well organised lectures.",
        "metadata": {"semester": "2025.1", "academic_year": 2025},
    }
    data.update(overrides)
    return data


def _codes(exc: InvalidFeedback) -> dict[str, str]:
    return {e.field: e.code for e in exc.errors}


@override_settings(FEEDBACK_FIRST_ACADEMIC_YEAR=2015)
class ValidateAndBuildTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        from django.contrib.auth import get_user_model

        cls.author = get_user_model().objects.create_user(username="20250001", email="a@example.com", password="pw")
        cls.professor = Professor.objects.create(name="Helena Prado")
        cls.lab = Infrastructure.objects.create(name="Lab 3", type="laboratory", location="Block B")

    def test_valid_payload_builds_unsaved_pending_feedback(self):
        fb = validate_and_build_feedback(_payload(self.professor), self.author)
        self.assertIsNone(fb.pk)
        self.assertEqual(fb.status, FeedbackStatus.PENDING)
        self.assertEqual(fb.ratings, {"teaching_quality": 4, "clarity": 5})
        self.assertFalse(fb.is_anonymous)
        self.assertEqual(fb.author, self.author)

    def test_collects_every_error_at_once(self):
        payload = {
            "target_type": "professor",
            "target_id": self.professor.pk,
            "ratings": {"teaching_quality": 7},
            "comment": "x" * 501,
            "metadata": {"semester": "2025.3", "academic_year": 1999},
        }
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(payload, self.author)
        self.assertEqual(
            _codes(ctx.exception),
            {
                "ratings.teaching_quality": "invalid_rating",
                "ratings.clarity": "required",
                "comment": "max_length",
                "metadata.semester": "invalid_semester",
                "metadata.academic_year": "invalid_academic_year",
            },
        )

    def test_third_semester_is_rejected(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(_payload(self.professor, metadata={"semester": "2025.3", "academic_year": 2025}), self.author)
        self.assertEqual(_codes(ctx.exception), {"metadata.semester": "invalid_semester"})

    def test_semester_digits_must_be_ascii(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(_payload(self.professor, metadata={"semester": "٢٠٢٥.1", "academic_year": 2025}), self.author)
        self.assertEqual(_codes(ctx.exception), {"metadata.semester": "invalid_semester"})

    def test_unknown_target_type(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(_payload(self.professor, target_type="cafeteria"), self.author)
        self.assertEqual(_codes(ctx.exception)["target_type"], "invalid_target_type")

    def test_missing_target_is_reported(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(_payload(self.professor, target_id=self.professor.pk + 1000), self.author)
        self.assertEqual(_codes(ctx.exception), {"target_id": "target_not_found"})

    def test_target_must_exist_for_its_own_type(self):
        # The lab id exists, but no discipline does
        payload = _payload(self.professor, target_type="discipline", target_id=self.lab.pk)
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(payload, self.author)
        self.assertEqual(_codes(ctx.exception), {"target_id": "target_not_found"})

    def test_irrelevant_ratings_are_ignored(self):
        fb = validate_and_build_feedback(
            _payload(self.professor, ratings={"teaching_quality": 4, "clarity": 5, "infrastructure_condition": 1}),
            self.author,
        )
        self.assertIsNone(fb.infrastructure_condition)

    def test_infrastructure_requires_only_condition(self):
        payload = _payload(self.lab, target_type="infrastructure", ratings={"infrastructure_condition": "3", "clarity": 5})
        fb = validate_and_build_feedback(payload, self.author)
        self.assertEqual(fb.ratings, {"infrastructure_condition": 3})

    def test_rejects_non_integer_ratings(self):
        for bad in (4.5, True, "four", 0, 6):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidFeedback) as ctx:
                    validate_and_build_feedback(_payload(self.professor, ratings={"teaching_quality": bad, "clarity": 3}), self.author)
                self.assertEqual(_codes(ctx.exception), {"ratings.teaching_quality": "invalid_rating"})

    def test_academic_year_upper_bound_is_next_year(self):
        from django.utils import timezone

        next_year = timezone.now().year + 1
        fb = validate_and_build_feedback(
            _payload(self.professor, metadata={"semester": f"{next_year}.1", "academic_year": next_year}),
            self.author,
        )
        self.assertEqual(fb.academic_year, next_year)
        with self.assertRaises(InvalidFeedback):
            validate_and_build_feedback(
                _payload(self.professor, metadata={"semester": "2025.1", "academic_year": next_year + 1}),
                self.author,
            )

    def test_comment_is_required_and_stripped(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(_payload(self.professor, comment="   "), self.author)
        self.assertEqual(_codes(ctx.exception), {"comment": "required"})
        fb = validate_and_build_feedback(_payload(self.professor, comment="  fine  "), self.author)
        self.assertEqual(fb.comment, "fine")

    def test_is_anonymous_must_be_boolean(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(_payload(self.professor, is_anonymous="yes"), self.author)
        self.assertEqual(_codes(ctx.exception), {"is_anonymous": "invalid"})

    def test_non_mapping_payload(self):
        with self.assertRaises(InvalidFeedback) as ctx:
            validate_and_build_feedback(["not", "an", "object"], self.author)
        self.assertEqual(_codes(ctx.exception), {"non_field_errors": "invalid"})

    def test_duplicate_in_same_term_is_rejected(self):
        submit_feedback(_payload(self.professor), self.author)
        with self.assertRaises(DuplicateSubmission):
            validate_and_build_feedback(_payload(self.professor), self.author)
        # Another semester is a new term
        validate_and_build_feedback(_payload(self.professor, metadata={"semester": "2025.2", "academic_year": 2025}), self.author)


@pytest.mark.django_db
def test_submit_feedback_persists_pending_record(student, professor):
    fb = submit_feedback(_payload(professor, is_anonymous=True), student)
    stored = Feedback.objects.get(pk=fb.pk)
    assert stored.status == FeedbackStatus.PENDING
    assert stored.is_anonymous is True
    assert stored.author == student


@pytest.mark.django_db
def test_submit_feedback_requires_authenticated_actor(professor):
    with pytest.raises(AccessDenied):
        submit_feedback(_payload(professor), AnonymousUser())


@pytest.mark.django_db
def test_store_enforces_uniqueness_per_term(student, professor, make_feedback):
    make_feedback(student, professor, teaching_quality=4, clarity=4)
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            make_feedback(student, professor, teaching_quality=1, clarity=1)


@pytest.mark.django_db
def test_concurrent_duplicate_is_reported_as_duplicate(student, professor, make_feedback):
    make_feedback(student, professor, status=FeedbackStatus.PENDING, teaching_quality=4, clarity=4)
    # Target lookup sees the professor; the duplicate check loses the race
    with mock.patch.object(QuerySet, "exists", side_effect=[True, False]):
        with pytest.raises(DuplicateSubmission):
            submit_feedback(_payload(professor), student)
    assert Feedback.objects.filter(author=student).count() == 1
