import uuid

from django.db import models
from apps.api.common.models import BaseModel


class Exam(BaseModel):
    """
    시험 정의 (attempt 정책에 필요한 메타 정보만)

    - duration_seconds: attempt 시작 시 remaining_time 초기값 (미설정이면 응시 불가)
    - max_attempts: (user, exam) 당 최대 응시 횟수
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    duration_seconds = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="제한 시간(초). 비어 있으면 attempt를 시작할 수 없음",
    )
    max_attempts = models.PositiveIntegerField(default=1)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "exams_exam"
        ordering = ["-created_at"]

    def __str__(self):
        return self.title
