"""Serializers for REST API v1.

Responses never include password hashes, and feedback marked anonymous
never includes its author, whoever is asking.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import RegexValidator
from django.db import IntegrityError, transaction
from rest_framework import serializers

from accounts.access import is_admin
from accounts.models import Role, UserProfile
from catalogue.models import Discipline, Infrastructure, Professor
from feedback.models import Feedback, FeedbackStatus, TargetType
from .exceptions import Conflict

User = get_user_model()

name_validator = RegexValidator(r"^[A-Za-zÀ-ÿ\s]+$", "Name may contain only letters and spaces.")


def _course_list(**kwargs) -> serializers.ListField:
    return serializers.ListField(child=serializers.CharField(max_length=50), **kwargs)


def _ensure_email_free(email: str, exclude_pk: int | None = None) -> None:
    qs = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise Conflict("Email is already in use.", code="email_in_use")


# Accounts


class AccountSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="profile.full_name", read_only=True)
    registration = serializers.CharField(source="profile.registration", read_only=True)
    role = serializers.CharField(source="profile.role", read_only=True)
    courses = _course_list(source="profile.courses", read_only=True)

    class Meta:
        model = User
        fields = ("id", "name", "email", "registration", "role", "courses", "is_active", "date_joined")
        read_only_fields = fields


class AuthorSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="profile.full_name", read_only=True)

    class Meta:
        model = User
        fields = ("id", "name", "email")
        read_only_fields = fields


class RegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=50, validators=[name_validator])
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    registration = serializers.RegexField(
        r"^\d{4,20}$",
        error_messages={"invalid": "Registration must contain 4 to 20 digits."},
    )
    # Administrators are appointed by other administrators, never self-registered
    role = serializers.ChoiceField(choices=[Role.STUDENT, Role.PROFESSOR], default=Role.STUDENT)
    courses = _course_list(allow_empty=True)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate(self, attrs):
        candidate = User(username=attrs.get("registration", ""), email=attrs.get("email", ""), first_name=attrs.get("name", ""))
        try:
            validate_password(attrs["password"], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"password": list(exc.messages)})
        return attrs

    def create(self, validated_data):
        email = validated_data["email"]
        registration = validated_data["registration"]
        _ensure_email_free(email)
        if UserProfile.objects.filter(registration=registration).exists() or User.objects.filter(username=registration).exists():
            raise Conflict("Registration is already in use.", code="registration_in_use")
        try:
            with transaction.atomic():
                user = User.objects.create_user(username=registration, email=email, password=validated_data["password"])
                profile = user.profile
                profile.full_name = validated_data["name"]
                profile.registration = registration
                profile.role = validated_data["role"]
                profile.courses = validated_data["courses"]
                profile.save()
        except IntegrityError as exc:
            raise Conflict("Email or registration is already in use.") from exc
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class UserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=50, required=False, validators=[name_validator])
    email = serializers.EmailField(required=False)
    courses = _course_list(required=False)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        # Only administrators may change role or activation; others are ignored
        if not is_admin(self.context["request"].user):
            attrs.pop("role", None)
            attrs.pop("is_active", None)
        return attrs

    def update(self, instance, validated_data):
        profile = instance.profile
        if "email" in validated_data:
            email = validated_data["email"].strip().lower()
            _ensure_email_free(email, exclude_pk=instance.pk)
            instance.email = email
        if "is_active" in validated_data:
            instance.is_active = validated_data["is_active"]
        if "name" in validated_data:
            profile.full_name = validated_data["name"]
        if "courses" in validated_data:
            profile.courses = validated_data["courses"]
        if "role" in validated_data:
            profile.role = validated_data["role"]
        with transaction.atomic():
            instance.save()
            profile.save()
        return instance


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(trim_whitespace=False)
    new_password = serializers.CharField(trim_whitespace=False)
    confirm_password = serializers.CharField(trim_whitespace=False)

    def validate_current_password(self, value: str) -> str:
        if not self.instance.check_password(value):
            raise serializers.ValidationError("Current password is incorrect.")
        return value

    def validate(self, attrs):
        if attrs["new_password"] != attrs["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": "Password confirmation does not match."})
        try:
            validate_password(attrs["new_password"], user=self.instance)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"new_password": list(exc.messages)})
        return attrs

    def update(self, instance, validated_data):
        instance.set_password(validated_data["new_password"])
        instance.save(update_fields=["password"])
        return instance


# Catalogue


class ProfessorSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Professor
        fields = ("id", "name")


class ProfessorSerializer(serializers.ModelSerializer):
    courses = _course_list(required=False)
    disciplines = serializers.PrimaryKeyRelatedField(many=True, queryset=Discipline.objects.all(), required=False)

    class Meta:
        model = Professor
        fields = ("id", "name", "courses", "disciplines", "created_at", "updated_at")
        read_only_fields = ("created_at", "updated_at")


class DisciplineSerializer(serializers.ModelSerializer):
    # Uniqueness is reported as a conflict by the view, not as a field error
    name = serializers.CharField(min_length=3, max_length=150)
    courses = _course_list(required=False)
    professors = serializers.PrimaryKeyRelatedField(many=True, queryset=Professor.objects.all(), required=False)

    class Meta:
        model = Discipline
        fields = ("id", "name", "department", "courses", "professors", "created_at")
        read_only_fields = ("created_at",)


class DisciplineDetailSerializer(DisciplineSerializer):
    professors = ProfessorSummarySerializer(many=True, read_only=True)


class InfrastructureSerializer(serializers.ModelSerializer):
    class Meta:
        model = Infrastructure
        fields = ("id", "name", "type", "location", "is_active", "created_at", "updated_at")
        read_only_fields = ("created_at", "updated_at")


# Feedback


class FeedbackSerializer(serializers.ModelSerializer):
    """Read representation; submissions go through `feedback.submission`."""

    author = serializers.SerializerMethodField()
    target = serializers.SerializerMethodField()
    ratings = serializers.SerializerMethodField()
    metadata = serializers.SerializerMethodField()

    class Meta:
        model = Feedback
        fields = (
            "id",
            "target_type",
            "target_id",
            "target",
            "author",
            "is_anonymous",
            "ratings",
            "comment",
            "metadata",
            "status",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_author(self, obj) -> dict | None:
        if obj.is_anonymous:
            return None
        return AuthorSerializer(obj.author).data

    def get_target(self, obj) -> dict | None:
        targets = self.context.get("targets")
        if targets is None:
            target = obj.get_target()
        else:
            target = targets.get((obj.target_type, obj.target_id))
        return target.summary() if target is not None else None

    def get_ratings(self, obj) -> dict[str, int]:
        return obj.ratings

    def get_metadata(self, obj) -> dict:
        return {"semester": obj.semester, "academic_year": obj.academic_year}


class FeedbackStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FeedbackStatus.choices)


# Statistics


class StatsQuerySerializer(serializers.Serializer):
    target_type = serializers.ChoiceField(choices=TargetType.choices, required=False)
    only_approved = serializers.BooleanField(required=False, default=True)


class SemesterStatsQuerySerializer(serializers.Serializer):
    academic_year = serializers.IntegerField(required=False, min_value=1)
    target_type = serializers.ChoiceField(choices=TargetType.choices, required=False)


class RankingQuerySerializer(serializers.Serializer):
    target_type = serializers.ChoiceField(choices=TargetType.choices)
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=100)
    min_feedbacks = serializers.IntegerField(required=False, default=1, min_value=1)


class StatsRowSerializer(serializers.Serializer):
    target_type = serializers.CharField()
    avg_teaching_quality = serializers.FloatField(allow_null=True)
    avg_clarity = serializers.FloatField(allow_null=True)
    avg_infrastructure_condition = serializers.FloatField(allow_null=True)
    total_feedbacks = serializers.IntegerField()


class SemesterStatsRowSerializer(StatsRowSerializer):
    semester = serializers.CharField()


class TargetStatsSerializer(StatsRowSerializer):
    target_id = serializers.IntegerField()


class RankingEntrySerializer(serializers.Serializer):
    target_id = serializers.IntegerField()
    avg_teaching_quality = serializers.FloatField(allow_null=True)
    avg_clarity = serializers.FloatField(allow_null=True)
    total_feedbacks = serializers.IntegerField()
    overall_rating = serializers.FloatField()
    target_info = serializers.DictField(allow_null=True)


class StatsResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    only_approved = serializers.BooleanField()
    results = StatsRowSerializer(many=True)


class SemesterStatsResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    results = SemesterStatsRowSerializer(many=True)


class RankingResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    results = RankingEntrySerializer(many=True)
