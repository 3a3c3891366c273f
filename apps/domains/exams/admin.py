from django.contrib import admin

from apps.domains.exams.models import Exam, ExamQuestion


class ExamQuestionInline(admin.TabularInline):
    model = ExamQuestion
    extra = 0


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ("title", "duration_seconds", "max_attempts", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("title",)
    inlines = [ExamQuestionInline]
