from django.contrib import admin

from .models import Discipline, Infrastructure, Professor


@admin.register(Professor)
class ProfessorAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(Discipline)
class DisciplineAdmin(admin.ModelAdmin):
    list_display = ("name", "department", "created_at")
    list_filter = ("department",)
    search_fields = ("name", "department")
    filter_horizontal = ("professors",)


@admin.register(Infrastructure)
class InfrastructureAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "location", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("name", "location")
