"""Error translation for the REST API.

Configured as `REST_FRAMEWORK["EXCEPTION_HANDLER"]`. Domain errors map to
their HTTP status; anything DRF does not recognise (store failures,
programming errors) is logged and answered with an opaque 500 so no
handler failure reaches the server as an unhandled exception.
"""
from __future__ import annotations

import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler, set_rollback

from accounts.access import AccessDenied, Reason
from accounts.authentication import BearerTokenAuthentication
from feedback.exceptions import AggregationFailed, DuplicateSubmission, InvalidFeedback

logger = logging.getLogger(__name__)


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The request conflicts with an existing record.")
    default_code = "conflict"


class StatisticsUnavailable(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("Statistics are temporarily unavailable.")
    default_code = "aggregation_failed"


def _invalid_feedback_response(exc: InvalidFeedback) -> Response:
    set_rollback()
    return Response(
        {
            "detail": "Invalid data.",
            "code": exc.code,
            "errors": [error._asdict() for error in exc.errors],
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _translate(exc: Exception) -> Exception:
    if isinstance(exc, DuplicateSubmission):
        return Conflict(str(exc), code=exc.code)
    if isinstance(exc, AggregationFailed):
        return StatisticsUnavailable()
    if isinstance(exc, AccessDenied):
        if exc.decision.reason is Reason.UNAUTHENTICATED:
            translated = exceptions.NotAuthenticated()
            translated.auth_header = BearerTokenAuthentication.keyword
            return translated
        return exceptions.PermissionDenied()
    return exc


def exception_handler(exc, context):
    if isinstance(exc, InvalidFeedback):
        return _invalid_feedback_response(exc)

    exc = _translate(exc)
    response = drf_exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error("Unhandled error in %s", type(view).__name__, exc_info=exc)
        set_rollback()
        return Response(
            {"detail": "Internal server error.", "code": "internal_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(response.data, dict) and "detail" in response.data:
        code = getattr(response.data["detail"], "code", None)
        if code:
            response.data.setdefault("code", code)
    return response
