# apps/domains/attempts/models/attempt_answer.py
from django.db import models
from apps.api.common.models import BaseModel

from .exam_attempt import ExamAttempt


class AttemptAnswer(BaseModel):
    """
    attempt × question 답안 1건 (재제출 시 같은 행을 덮어씀)

    is_correct / score 는 서버 채점 결과만 저장 (클라이언트 입력 아님)
    """

    attempt = models.ForeignKey(
        ExamAttempt,
        on_delete=models.CASCADE,
        related_name="answers",
    )
    question_id = models.CharField(max_length=64)

    submitted_value = models.TextField(blank=True, default="")
    is_correct = models.BooleanField(default=False)
    score = models.DecimalField(max_digits=7, decimal_places=2, default=0)
    # 채점 당시 문항 배점 스냅샷 (null = 가중치 없음)
    max_score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)

    time_spent = models.PositiveIntegerField(null=True, blank=True, help_text="초")
    submitted_at = models.DateTimeField(null=True, blank=True)

    # 제출 순서 (마지막 제출이 가장 큼)
    sequence = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "attempts_attempt_answer"
        unique_together = ("attempt", "question_id")
        ordering = ["sequence", "id"]

    def __str__(self):
        return f"{self.attempt_id} Q={self.question_id} correct={self.is_correct}"
