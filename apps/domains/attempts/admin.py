from django.contrib import admin

from apps.domains.attempts.models import AttemptAnswer, ExamAttempt


class AttemptAnswerInline(admin.TabularInline):
    model = AttemptAnswer
    extra = 0
    can_delete = False
    readonly_fields = ("question_id", "submitted_value", "is_correct", "score", "max_score", "time_spent", "submitted_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    """조회 전용. 상태 변경은 API(상태 머신)로만."""

    list_display = ("id", "user_id", "exam_id", "attempt_number", "status", "score", "start_time", "end_time")
    list_filter = ("status", "cheating_detected")
    search_fields = ("id", "user_id", "exam_id")
    readonly_fields = [f.name for f in ExamAttempt._meta.fields]
    inlines = [AttemptAnswerInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
