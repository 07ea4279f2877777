import logging

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from accounts.models import Role
from catalogue.models import Discipline, Infrastructure, Professor
from feedback.models import Feedback, FeedbackStatus, TargetType

User = get_user_model()

PASSWORD = "Strong#Passw0rd"


@pytest.fixture(autouse=True)
def silence_django_request_logger():
    """Reduce noise from expected 4xx in passing tests.

    Many tests intentionally exercise 400/401/403/409 paths. Django logs
    these at WARNING via 'django.request'. Lower that logger to ERROR
    during tests to avoid clutter.
    """
    logger = logging.getLogger("django.request")
    old = logger.level
    logger.setLevel(logging.ERROR)
    try:
        yield
    finally:
        logger.setLevel(old)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=Role.STUDENT, *, email=None, name="Test User", password=PASSWORD, is_active=True):
        counter["n"] += 1
        registration = f"{20240000 + counter['n']}"
        user = User.objects.create_user(
            username=registration,
            email=email or f"user{counter['n']}@example.com",
            password=password,
            is_active=is_active,
        )
        profile = user.profile
        profile.role = role
        profile.full_name = name
        profile.registration = registration
        profile.save()
        return user

    return _make


@pytest.fixture
def student(make_user):
    return make_user(Role.STUDENT, name="Ana Souza")


@pytest.fixture
def other_student(make_user):
    return make_user(Role.STUDENT, name="Bruno Lima")


@pytest.fixture
def admin_user(make_user):
    return make_user(Role.ADMIN, name="Carla Admin")


@pytest.fixture
def api_client():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def professor(db):
    return Professor.objects.create(name="Helena Prado", courses=["Computer Science"])


@pytest.fixture
def discipline(db, professor):
    item = Discipline.objects.create(name="Algorithms", department="Computing", courses=["Computer Science"])
    item.professors.add(professor)
    return item


@pytest.fixture
def infrastructure(db):
    return Infrastructure.objects.create(name="Lab 3", type="laboratory", location="Block B")


@pytest.fixture
def make_feedback(db):
    """Create feedback directly through the ORM, approved unless told otherwise."""

    def _make(author, target, *, semester="2025.1", academic_year=2025, status=FeedbackStatus.APPROVED, is_anonymous=False, comment="", **ratings):
        target_type = TargetType(target._meta.model_name)
        return Feedback.objects.create(
            author=author,
            target_type=target_type,
            target_id=target.pk,
            semester=semester,
            academic_year=academic_year,
            status=status,
            is_anonymous=is_anonymous,
            comment=comment,
            **ratings,
        )

    return _make
