"""Aggregate statistics and rankings over feedback.

All public figures are computed from approved feedback only. Each average
runs over the rows where that rating column is set: SQL `AVG` skips NULLs,
so an infrastructure rating never moves a professor average and a missing
rating never counts as zero.

The ranking composite is the exception: `overall_rating` is the mean of
the two quality averages with a missing average counted as 0.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from django.db import DatabaseError
from django.db.models import Avg, Count, Q, QuerySet

from .exceptions import AggregationFailed
from .models import Feedback, FeedbackStatus, TargetType, get_target_model

logger = logging.getLogger(__name__)

AVERAGES = ("avg_teaching_quality", "avg_clarity", "avg_infrastructure_condition")


def _metrics() -> dict[str, Any]:
    return {
        "avg_teaching_quality": Avg("teaching_quality"),
        "avg_clarity": Avg("clarity"),
        "avg_infrastructure_condition": Avg("infrastructure_condition"),
        "total_feedbacks": Count("id"),
    }


def _as_float(value) -> float | None:
    # Postgres returns Decimal for AVG over integers
    return None if value is None else float(value)


def _normalise(row: dict) -> dict:
    for key in AVERAGES:
        if key in row:
            row[key] = _as_float(row[key])
    return row


def _run(description: str, build: Callable[[], Any]):
    """Evaluate a query eagerly so store failures surface here, not in a serializer."""
    try:
        return build()
    except DatabaseError as exc:
        logger.exception("Aggregation query failed: %s", description)
        raise AggregationFailed(description) from exc


def approved_feedback() -> QuerySet[Feedback]:
    return Feedback.objects.filter(status=FeedbackStatus.APPROVED)


def stats_by_target_type(target_type: str | None = None, *, only_approved: bool = True) -> list[dict]:
    """Averages and totals grouped by target type, ordered by type."""
    qs = approved_feedback() if only_approved else Feedback.objects.all()
    if target_type:
        qs = qs.filter(target_type=TargetType(target_type))
    rows = qs.values("target_type").annotate(**_metrics()).order_by("target_type")
    return _run("stats by target type", lambda: [_normalise(dict(row)) for row in rows])


def stats_by_semester(academic_year: int | None = None, target_type: str | None = None) -> list[dict]:
    """Averages and totals per (semester, target type), newest semester first."""
    qs = approved_feedback()
    if academic_year is not None:
        qs = qs.filter(academic_year=academic_year)
    if target_type:
        qs = qs.filter(target_type=TargetType(target_type))
    rows = qs.values("semester", "target_type").annotate(**_metrics()).order_by("-semester", "target_type")
    return _run("stats by semester", lambda: [_normalise(dict(row)) for row in rows])


def stats_for_target(target_type: str, target_id: int) -> dict:
    """Averages and total for a single catalogue record."""
    qs = approved_feedback().filter(target_type=TargetType(target_type), target_id=target_id)
    row = _run("stats for target", lambda: qs.aggregate(**_metrics()))
    return _normalise({"target_type": target_type, "target_id": target_id, **row})


def overall_rating(avg_teaching_quality: float | None, avg_clarity: float | None) -> float:
    return ((avg_teaching_quality or 0.0) + (avg_clarity or 0.0)) / 2


def ranking(target_type: str, limit: int = 10, min_feedbacks: int = 1) -> list[dict]:
    """Rank targets of one type by composite score.

    Targets with fewer than `min_feedbacks` approved records that carry a
    quality rating are left out. Equal scores keep ascending target id
    order (the sort is stable).
    """
    target_type = TargetType(target_type)
    qs = (
        approved_feedback()
        .filter(target_type=target_type)
        .filter(Q(teaching_quality__isnull=False) | Q(clarity__isnull=False))
        .values("target_id")
        .annotate(
            avg_teaching_quality=Avg("teaching_quality"),
            avg_clarity=Avg("clarity"),
            total_feedbacks=Count("id"),
        )
        .filter(total_feedbacks__gte=min_feedbacks)
        .order_by("target_id")
    )
    groups = _run("ranking", lambda: [_normalise(dict(row)) for row in qs])

    for group in groups:
        group["overall_rating"] = overall_rating(group["avg_teaching_quality"], group["avg_clarity"])
    ranked = sorted(groups, key=lambda g: g["overall_rating"], reverse=True)[: max(limit, 0)]

    model = get_target_model(target_type)
    targets = _run("ranking targets", lambda: model.objects.in_bulk([g["target_id"] for g in ranked]))
    for group in ranked:
        target = targets.get(group["target_id"])
        group["target_info"] = target.summary() if target is not None else None
    return ranked
