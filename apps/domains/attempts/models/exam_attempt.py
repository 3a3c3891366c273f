# apps/domains/attempts/models/exam_attempt.py
import uuid

from django.db import models
from apps.api.common.models import SoftDeleteModel


class ExamAttempt(SoftDeleteModel):
    """
    학생의 '시험 1회 응시' (시간 제한 있는 진행 상태 포함)

    🔥 상태 전이/시간 계산 규칙은 여기 두지 않는다
    - 규칙: examhall.domain.attempts.entities.Attempt
    - 저장: examhall.adapters.db.django.repositories_attempts

    ✅ 저장 불변식 (상태 머신이 보장)
    - start_time != null  ⇔  status == in_progress
    - end_time   != null  ⇔  status ∈ {completed, expired, terminated}
    - remaining_time >= 0 (초), 0 <= elapsed_carry_ms < 1000
    - deadline_at != null  ⇔  status == in_progress
    - correct_answers + wrong_answers == 답안 수
    """

    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        PAUSED = "paused", "Paused"
        COMPLETED = "completed", "Completed"
        EXPIRED = "expired", "Expired"
        TERMINATED = "terminated", "Terminated"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user_id = models.CharField(max_length=64, db_index=True)
    exam_id = models.CharField(max_length=64, db_index=True)

    # 1부터 시작 (시험 n번째 응시)
    attempt_number = models.PositiveIntegerField(default=1)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.IN_PROGRESS,
        db_index=True,
    )

    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    remaining_time = models.PositiveIntegerField(default=0, help_text="남은 시간(초)")
    elapsed_carry_ms = models.PositiveIntegerField(default=0, help_text="초 단위로 차감되지 않은 사용 시간(ms)")
    # start_time + remaining_time - elapsed_carry_ms (진행 중일 때만). sweeper 조회용
    deadline_at = models.DateTimeField(null=True, blank=True)

    score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    correct_answers = models.PositiveIntegerField(default=0)
    wrong_answers = models.PositiveIntegerField(default=0)

    last_question_id = models.CharField(max_length=64, null=True, blank=True)
    cheating_detected = models.BooleanField(default=False)

    # 감사용 (채점에 사용하지 않음)
    ip_address = models.CharField(max_length=45, null=True, blank=True)
    device_info = models.CharField(max_length=255, null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "attempts_exam_attempt"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "exam_id", "attempt_number"],
                name="uniq_attempt_user_exam_number",
            ),
        ]
        indexes = [
            models.Index(fields=["user_id", "exam_id"], name="idx_attempt_user_exam"),
            models.Index(fields=["status", "deadline_at"], name="idx_attempt_status_deadline"),
        ]

    def __str__(self):
        return (
            f"ExamAttempt exam={self.exam_id} "
            f"user={self.user_id} "
            f"#{self.attempt_number} ({self.status})"
        )
