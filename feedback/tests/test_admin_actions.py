from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model

from feedback.models import FeedbackStatus


@pytest.mark.django_db
def test_bulk_approve_and_reject_from_admin_site(client, student, other_student, professor, make_feedback):
    root = get_user_model().objects.create_superuser(username="root", email="root@example.com", password="pw")
    client.force_login(root)
    first = make_feedback(student, professor, status=FeedbackStatus.PENDING, teaching_quality=4, clarity=4)
    second = make_feedback(other_student, professor, status=FeedbackStatus.PENDING, teaching_quality=2, clarity=2)

    r = client.post("/admin/feedback/feedback/", {"action": "approve", "_selected_action": [first.pk, second.pk]})
    assert r.status_code == 302
    first.refresh_from_db()
    second.refresh_from_db()
    assert first.status == second.status == FeedbackStatus.APPROVED

    client.post("/admin/feedback/feedback/", {"action": "reject", "_selected_action": [second.pk]})
    second.refresh_from_db()
    assert second.status == FeedbackStatus.REJECTED
