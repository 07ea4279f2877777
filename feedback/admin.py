from django.contrib import admin
from django.utils import timezone

from .models import Feedback, FeedbackStatus


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ("target_type", "target_id", "author", "is_anonymous", "semester", "status", "created_at")
    list_filter = ("status", "target_type", "academic_year", "semester")
    search_fields = ("comment", "author__email")
    readonly_fields = ("created_at", "updated_at")
    actions = ("approve", "reject")

    @admin.action(description="Approve selected feedback")
    def approve(self, request, queryset):
        updated = queryset.update(status=FeedbackStatus.APPROVED, updated_at=timezone.now())
        self.message_user(request, f"{updated} feedback approved.")

    @admin.action(description="Reject selected feedback")
    def reject(self, request, queryset):
        updated = queryset.update(status=FeedbackStatus.REJECTED, updated_at=timezone.now())
        self.message_user(request, f"{updated} feedback rejected.")
