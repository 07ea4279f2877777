"""REST API v1 viewsets and endpoints."""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError, transaction
from django.db.models import Q
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import exceptions, mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from accounts.access import STATISTICS, Action, is_admin
from accounts.authentication import issue_token, revoke_tokens
from catalogue.models import Discipline, Infrastructure, Professor
from feedback.models import Feedback, FeedbackStatus, TargetType, load_targets
from feedback import moderation, stats as aggregation
from feedback.submission import submit_feedback
from .exceptions import Conflict
from .filters import FeedbackFilter, UserFilter
from .permissions import AccessControlMixin, ResourceAccess
from .serializers import (
    AccountSerializer,
    DisciplineDetailSerializer,
    DisciplineSerializer,
    FeedbackSerializer,
    FeedbackStatusSerializer,
    InfrastructureSerializer,
    LoginSerializer,
    PasswordChangeSerializer,
    ProfessorSerializer,
    RankingResponseSerializer,
    RankingQuerySerializer,
    RegistrationSerializer,
    SemesterStatsQuerySerializer,
    SemesterStatsResponseSerializer,
    StatsQuerySerializer,
    StatsResponseSerializer,
    TargetStatsSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


class LoginRateThrottle(AnonRateThrottle):
    scope = "login"


def _auth_payload(user, token) -> dict:
    return {"token": token.key, "user": AccountSerializer(user).data}


# Auth


@extend_schema(request=RegistrationSerializer, responses={201: OpenApiTypes.OBJECT})
@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def register(request):
    serializer = RegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    token = issue_token(user)
    logger.info("Registered user %s as %s", user.pk, user.profile.role)
    return Response(_auth_payload(user, token), status=status.HTTP_201_CREATED)


@extend_schema(request=LoginSerializer, responses={200: OpenApiTypes.OBJECT})
@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    email = serializer.validated_data["email"]
    user = User.objects.select_related("profile").filter(email__iexact=email).first()
    if user is None or not user.check_password(serializer.validated_data["password"]):
        logger.info("Rejected login attempt")
        raise exceptions.AuthenticationFailed("Invalid credentials.")
    if not user.is_active:
        raise exceptions.AuthenticationFailed("User account is disabled.")
    token = issue_token(user)
    update_last_login(None, user)
    return Response(_auth_payload(user, token))


@extend_schema(responses={200: AccountSerializer})
@api_view(["GET"])
def verify(request):
    """Confirm the presented token and return its user."""
    return Response({"valid": True, "user": AccountSerializer(request.user).data})


@extend_schema(request=None, responses={204: None})
@api_view(["POST"])
def logout(request):
    revoke_tokens(request.user)
    logger.info("User %s logged out", request.user.pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


# Users


class UserViewSet(
    AccessControlMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = User.objects.select_related("profile").order_by("id")
    serializer_class = AccountSerializer
    permission_classes = [ResourceAccess]
    filterset_class = UserFilter
    search_fields = ["email", "profile__full_name", "profile__registration"]
    ordering_fields = ["id", "date_joined"]
    lookup_value_regex = r"\d+"
    access_actions = {
        "list": Action.ADMINISTER,
        "destroy": Action.ADMINISTER,
        "deactivate": Action.ADMINISTER,
        "password": Action.UPDATE,
    }

    def get_access_resource(self):
        if self.action == "me":
            return self.request.user
        return super().get_access_resource()

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return UserUpdateSerializer
        if self.action == "password":
            return PasswordChangeSerializer
        return AccountSerializer

    @extend_schema(responses={200: AccountSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        user = self.get_object()
        serializer = self.get_serializer(user, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("User %s updated by user %s", user.pk, request.user.pk)
        return Response(AccountSerializer(user).data)

    def perform_destroy(self, instance):
        pk = instance.pk
        instance.delete()
        logger.info("User %s deleted by user %s", pk, self.request.user.pk)

    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(AccountSerializer(request.user).data)

    @extend_schema(request=PasswordChangeSerializer, responses={204: None})
    @action(detail=True, methods=["put"])
    def password(self, request, pk=None):
        user = self.get_object()
        serializer = self.get_serializer(user, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Password changed for user %s by user %s", user.pk, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: AccountSerializer})
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        user = self.get_object()
        user.is_active = False
        user.save(update_fields=["is_active"])
        revoke_tokens(user)
        logger.info("User %s deactivated by user %s", user.pk, request.user.pk)
        return Response(AccountSerializer(user).data)


# Catalogue


class CatalogueViewSet(AccessControlMixin, viewsets.ModelViewSet):
    """Read for any authenticated user, writes for administrators."""

    permission_classes = [ResourceAccess]
    search_fields = ["name"]
    ordering_fields = ["name", "created_at"]
    lookup_value_regex = r"\d+"
    target_type: TargetType

    def perform_destroy(self, instance):
        pk = instance.pk
        instance.delete()
        logger.info("%s %s deleted by user %s", self.target_type.label, pk, self.request.user.pk)

    @extend_schema(parameters=[OpenApiParameter("name", str, OpenApiParameter.PATH)])
    @action(detail=False, methods=["get"], url_path=r"name/(?P<name>[^/]+)")
    def by_name(self, request, name=None):
        """First record whose name contains `name`, ignoring case."""
        item = self.get_queryset().filter(name__icontains=name).order_by("id").first()
        if item is None:
            raise exceptions.NotFound(f"No {self.target_type.label.lower()} matches '{name}'.")
        return Response(self.get_serializer(item).data)

    @extend_schema(responses={200: TargetStatsSerializer})
    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):
        item = self.get_object()
        return Response(aggregation.stats_for_target(self.target_type, item.pk))


class ProfessorViewSet(CatalogueViewSet):
    queryset = Professor.objects.prefetch_related("disciplines").order_by("name")
    serializer_class = ProfessorSerializer
    target_type = TargetType.PROFESSOR


class DisciplineViewSet(CatalogueViewSet):
    queryset = Discipline.objects.prefetch_related("professors").order_by("name")
    serializer_class = DisciplineSerializer
    filterset_fields = ["department"]
    target_type = TargetType.DISCIPLINE

    def get_serializer_class(self):
        if self.action in ("retrieve", "by_name"):
            return DisciplineDetailSerializer
        return DisciplineSerializer

    def _save_unique(self, serializer, exclude_pk=None):
        name = serializer.validated_data.get("name")
        if name is not None:
            clash = Discipline.objects.filter(name__iexact=name)
            if exclude_pk is not None:
                clash = clash.exclude(pk=exclude_pk)
            if clash.exists():
                raise Conflict("A discipline with this name already exists.", code="duplicate_name")
        try:
            with transaction.atomic():
                serializer.save()
        except IntegrityError as exc:
            raise Conflict("A discipline with this name already exists.", code="duplicate_name") from exc

    def perform_create(self, serializer):
        self._save_unique(serializer)

    def perform_update(self, serializer):
        self._save_unique(serializer, exclude_pk=serializer.instance.pk)


class InfrastructureViewSet(CatalogueViewSet):
    queryset = Infrastructure.objects.order_by("name")
    serializer_class = InfrastructureSerializer
    filterset_fields = ["type", "location"]
    target_type = TargetType.INFRASTRUCTURE

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action in ("list", "by_name"):
            qs = qs.filter(is_active=True)
        return qs


# Feedback


class FeedbackViewSet(
    AccessControlMixin,
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Feedback records and the statistics computed from them.

    Non-administrators see approved feedback plus their own. Authors of
    anonymous feedback are hidden from every caller.
    """

    queryset = Feedback.objects.select_related("author", "author__profile")
    serializer_class = FeedbackSerializer
    permission_classes = [ResourceAccess]
    filterset_class = FeedbackFilter
    search_fields = ["comment"]
    ordering_fields = ["created_at", "updated_at"]
    lookup_value_regex = r"\d+"
    access_actions = {
        "set_status": Action.MODERATE,
        "stats": Action.READ,
        "stats_by_semester": Action.READ,
        "ranking": Action.READ,
    }

    def get_access_resource(self):
        if self.action in ("stats", "stats_by_semester", "ranking"):
            return STATISTICS
        return super().get_access_resource()

    def get_queryset(self):
        qs = super().get_queryset()
        if getattr(self, "swagger_fake_view", False):
            return qs.none()
        user = self.request.user
        if is_admin(user):
            return qs
        return qs.filter(Q(status=FeedbackStatus.APPROVED) | Q(author=user))

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        rows = page if page is not None else list(queryset)
        context = self.get_serializer_context()
        context["targets"] = load_targets(rows)
        serializer = self.get_serializer(rows, many=True, context=context)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    @extend_schema(request=OpenApiTypes.OBJECT, responses={201: FeedbackSerializer})
    def create(self, request, *args, **kwargs):
        feedback = submit_feedback(request.data, request.user)
        serializer = self.get_serializer(feedback)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        moderation.delete_feedback(instance, self.request.user)

    @extend_schema(request=FeedbackStatusSerializer, responses={200: FeedbackSerializer})
    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, pk=None):
        feedback = self.get_object()
        serializer = FeedbackStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        moderation.set_status(feedback, serializer.validated_data["status"], request.user)
        return Response(self.get_serializer(feedback).data)

    @extend_schema(parameters=[StatsQuerySerializer], responses={200: StatsResponseSerializer})
    @action(detail=False, methods=["get"], filter_backends=[], pagination_class=None)
    def stats(self, request):
        params = StatsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        # Unmoderated figures are for administrators only
        only_approved = params.validated_data["only_approved"] or not is_admin(request.user)
        rows = aggregation.stats_by_target_type(params.validated_data.get("target_type"), only_approved=only_approved)
        return Response({"count": len(rows), "only_approved": only_approved, "results": rows})

    @extend_schema(parameters=[SemesterStatsQuerySerializer], responses={200: SemesterStatsResponseSerializer})
    @action(detail=False, methods=["get"], url_path="stats/semester", filter_backends=[], pagination_class=None)
    def stats_by_semester(self, request):
        params = SemesterStatsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        rows = aggregation.stats_by_semester(
            academic_year=params.validated_data.get("academic_year"),
            target_type=params.validated_data.get("target_type"),
        )
        return Response({"count": len(rows), "results": rows})

    @extend_schema(parameters=[RankingQuerySerializer], responses={200: RankingResponseSerializer})
    @action(detail=False, methods=["get"], filter_backends=[], pagination_class=None)
    def ranking(self, request):
        params = RankingQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        entries = aggregation.ranking(
            params.validated_data["target_type"],
            limit=params.validated_data["limit"],
            min_feedbacks=params.validated_data["min_feedbacks"],
        )
        return Response({"count": len(entries), "results": entries})
