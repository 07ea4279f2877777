from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Feedback",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("target_type", models.CharField(choices=[("professor", "Professor"), ("discipline", "Discipline"), ("infrastructure", "Infrastructure")], max_length=16)),
                ("target_id", models.PositiveBigIntegerField()),
                ("is_anonymous", models.BooleanField(default=False)),
                ("teaching_quality", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("clarity", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("infrastructure_condition", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.CharField(max_length=500)),
                ("semester", models.CharField(max_length=6, validators=[django.core.validators.RegexValidator("^[0-9]{4}\\.[12]\\Z")])),
                ("academic_year", models.PositiveSmallIntegerField()),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], default="pending", max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="feedback", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["target_type", "target_id"], name="feedback_target_idx"),
                    models.Index(fields=["academic_year", "semester"], name="feedback_term_idx"),
                    models.Index(fields=["status", "target_type"], name="feedback_status_type_idx"),
                    models.Index(fields=["-created_at"], name="feedback_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("author", "target_type", "target_id", "semester", "academic_year"), name="feedback_unique_per_term"),
                ],
            },
        ),
    ]
