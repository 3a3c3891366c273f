"""
Exam 정책 조회 — .objects. 접근을 adapters 내부로 한정
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExamPolicy:
    """attempt 시작에 필요한 시험 설정 스냅샷."""
    exam_id: str
    duration_seconds: Optional[int]
    max_attempts: int


def exam_policy_get(exam_id) -> Optional[ExamPolicy]:
    """활성 시험만. 없거나 비활성이면 None."""
    from apps.domains.exams.models import Exam
    try:
        pk = uuid.UUID(str(exam_id))
    except (TypeError, ValueError):
        return None
    exam = Exam.objects.filter(id=pk, is_active=True).first()
    if exam is None:
        return None
    return ExamPolicy(
        exam_id=str(exam.id),
        duration_seconds=exam.duration_seconds,
        max_attempts=int(exam.max_attempts or 1),
    )
