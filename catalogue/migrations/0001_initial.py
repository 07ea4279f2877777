import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Professor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(3)])),
                ("courses", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Infrastructure",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(3)])),
                ("type", models.CharField(choices=[("laboratory", "Laboratory"), ("classroom", "Classroom"), ("library", "Library"), ("auditorium", "Auditorium"), ("cafeteria", "Cafeteria"), ("sports_facility", "Sports facility")], max_length=32)),
                ("location", models.CharField(max_length=200)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["type"], name="catalogue_infra_type_idx"),
                    models.Index(fields=["location"], name="catalogue_infra_loc_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Discipline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150, unique=True, validators=[django.core.validators.MinLengthValidator(3)])),
                ("department", models.CharField(max_length=100)),
                ("courses", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("professors", models.ManyToManyField(blank=True, related_name="disciplines", to="catalogue.professor")),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["department"], name="catalogue_disc_dept_idx")],
            },
        ),
    ]
