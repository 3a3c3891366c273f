import uuid

from django.db import models
from apps.api.common.models import BaseModel
from .exam import Exam


class ExamQuestion(BaseModel):
    """
    시험 문항 정의 (attempt 채점 기준)

    score_weight 가 비어 있으면 가중치 없는 문항 → 정답률(%) 채점
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name="questions",
    )

    number = models.PositiveIntegerField()  # 1번, 2번 ...
    correct_answer = models.CharField(max_length=500, blank=True, default="")
    score_weight = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "exams_question"
        unique_together = ("exam", "number")
        ordering = ["number"]

    def __str__(self):
        return f"{self.exam} Q{self.number}"
