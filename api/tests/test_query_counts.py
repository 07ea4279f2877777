from __future__ import annotations

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from catalogue.models import Professor


def _list_queries(client) -> tuple[int, dict]:
    with CaptureQueriesContext(connection) as ctx:
        r = client.get("/api/v1/feedback/")
        assert r.status_code == 200
    return len(ctx), r.json()


@pytest.mark.django_db
def test_feedback_list_query_count_does_not_grow_with_rows(api_client, admin_user, make_user, discipline, infrastructure, make_feedback):
    client = api_client(admin_user)
    first = Professor.objects.create(name="Ines Duarte")
    make_feedback(make_user(), first, teaching_quality=4, clarity=4)
    make_feedback(make_user(), discipline, teaching_quality=3, clarity=3)
    make_feedback(make_user(), infrastructure, infrastructure_condition=2)
    small, body = _list_queries(client)
    assert body["count"] == 3

    for i in range(6):
        make_feedback(make_user(), Professor.objects.create(name=f"Professor {i}"), teaching_quality=5, clarity=5)
    make_feedback(make_user(), discipline, is_anonymous=True, teaching_quality=2, clarity=2)
    large, body = _list_queries(client)
    assert body["count"] == 10
    assert large == small
    # count, page rows and one lookup per target type
    assert large <= 6
    assert all(item["target"] is not None for item in body["results"])
    assert {item["target"]["name"] for item in body["results"]} >= {"Ines Duarte", "Algorithms", "Lab 3"}
