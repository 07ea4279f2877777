"""django-filter sets for list endpoints."""
from __future__ import annotations

import django_filters
from django.contrib.auth import get_user_model

from accounts.models import Role
from feedback.models import Feedback, FeedbackStatus, TargetType

User = get_user_model()


class FeedbackFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(field_name="target_type", choices=TargetType.choices)
    target = django_filters.NumberFilter(field_name="target_id")
    status = django_filters.ChoiceFilter(choices=FeedbackStatus.choices)
    start_date = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    end_date = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Feedback
        fields = ["type", "target", "status", "semester", "academic_year", "start_date", "end_date"]


class UserFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(field_name="profile__role", choices=Role.choices)

    class Meta:
        model = User
        fields = ["role", "is_active"]
