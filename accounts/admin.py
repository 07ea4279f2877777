from django.contrib import admin

from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("registration", "full_name", "user", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("registration", "full_name", "user__email")
