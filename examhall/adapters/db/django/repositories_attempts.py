"""
Attempt Repository — Django ORM 구현 (메서드 내부에서만 apps.domains.attempts import)

- get_for_update / next_attempt_number 는 select_for_update: 호출자가 UoW 트랜잭션 안에 있어야 함
- soft delete 된 attempt는 조회되지 않는다 (번호 계산에는 포함)
"""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from examhall.domain.attempts.entities import (
    Answer,
    Attempt,
    AttemptStatus,
    QuestionKey,
    overdue_at,
)
from examhall.domain.attempts.errors import AttemptLockedError, InternalError, InvalidStateError


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _answer_to_entity(a) -> Answer:
    return Answer(
        question_id=a.question_id,
        submitted_value=a.submitted_value or "",
        is_correct=bool(a.is_correct),
        score=Decimal(a.score if a.score is not None else 0),
        max_score=(Decimal(a.max_score) if a.max_score is not None else None),
        time_spent=a.time_spent,
        submitted_at=a.submitted_at,
    )


def _model_to_entity(m) -> Optional[Attempt]:
    if m is None:
        return None
    try:
        status = AttemptStatus(m.status)
    except ValueError as e:
        raise InternalError(f"Unknown attempt status in storage: {m.status!r}", attempt_id=str(m.id)) from e

    answers = {}
    for a in m.answers.all():
        answers[a.question_id] = _answer_to_entity(a)

    return Attempt(
        attempt_id=str(m.id),
        user_id=m.user_id,
        exam_id=m.exam_id,
        attempt_number=int(m.attempt_number),
        status=status,
        remaining_time=int(m.remaining_time or 0),
        elapsed_carry_ms=int(m.elapsed_carry_ms or 0),
        start_time=m.start_time,
        end_time=m.end_time,
        score=m.score,
        correct_answers=int(m.correct_answers or 0),
        wrong_answers=int(m.wrong_answers or 0),
        answers=answers,
        device_info=m.device_info,
        ip_address=m.ip_address,
        metadata=dict(m.metadata or {}),
        cheating_detected=bool(m.cheating_detected),
        last_question_id=m.last_question_id,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _attempt_fields(attempt: Attempt) -> dict:
    return {
        "user_id": attempt.user_id,
        "exam_id": attempt.exam_id,
        "attempt_number": attempt.attempt_number,
        "status": attempt.status.value,
        "start_time": attempt.start_time,
        "end_time": attempt.end_time,
        "remaining_time": attempt.remaining_time,
        "elapsed_carry_ms": attempt.elapsed_carry_ms,
        # 조회 전용 파생 컬럼 (sweeper 인덱스). 진행 중일 때만 값이 있음
        "deadline_at": attempt.deadline(),
        "score": attempt.score,
        "correct_answers": attempt.correct_answers,
        "wrong_answers": attempt.wrong_answers,
        "last_question_id": attempt.last_question_id,
        "cheating_detected": attempt.cheating_detected,
        "ip_address": attempt.ip_address,
        "device_info": attempt.device_info,
        "metadata": attempt.metadata,
    }


class DjangoAttemptRepository:
    """AttemptRepository 구현. ORM 접근은 모두 메서드 내부에서 lazy import."""

    def get(self, attempt_id: str) -> Optional[Attempt]:
        from apps.domains.attempts.models import ExamAttempt
        pk = _parse_uuid(attempt_id)
        if pk is None:
            return None
        m = ExamAttempt.objects.prefetch_related("answers").filter(id=pk).first()
        return _model_to_entity(m)

    def get_for_update(self, attempt_id: str, skip_locked: bool = False) -> Optional[Attempt]:
        """
        호출자가 이미 UoW 트랜잭션 내에 있어야 함 (select_for_update 락 유지).
        skip_locked: 잠긴 row는 건너뜀 → 존재하면 AttemptLockedError
        """
        from apps.domains.attempts.models import ExamAttempt
        pk = _parse_uuid(attempt_id)
        if pk is None:
            return None
        m = ExamAttempt.objects.select_for_update(skip_locked=skip_locked).filter(id=pk).first()
        if m is None and skip_locked and ExamAttempt.objects.filter(id=pk).exists():
            raise AttemptLockedError(
                f"Attempt is locked by another transaction: {attempt_id}",
                attempt_id=str(pk),
            )
        return _model_to_entity(m)

    def add(self, attempt: Attempt) -> None:
        from django.db import IntegrityError, transaction
        from apps.domains.attempts.models import ExamAttempt

        try:
            # 중복 번호 충돌 시 바깥 트랜잭션은 살려둔 채 이 insert만 되돌린다
            with transaction.atomic():
                ExamAttempt.objects.create(id=uuid.UUID(attempt.attempt_id), **_attempt_fields(attempt))
        except IntegrityError as e:
            raise InvalidStateError(
                "Attempt already exists for this attempt number.",
                user_id=attempt.user_id,
                exam_id=attempt.exam_id,
                attempt_number=attempt.attempt_number,
            ) from e
        self._save_answers(attempt)

    def save(self, attempt: Attempt) -> None:
        from django.utils import timezone
        from apps.domains.attempts.models import ExamAttempt

        updated = (
            ExamAttempt.objects
            .filter(id=uuid.UUID(attempt.attempt_id))
            .update(updated_at=timezone.now(), **_attempt_fields(attempt))
        )
        if updated != 1:
            raise InternalError(f"Attempt row vanished during save: {attempt.attempt_id}", attempt_id=attempt.attempt_id)
        self._save_answers(attempt)

    def _save_answers(self, attempt: Attempt) -> None:
        from apps.domains.attempts.models import AttemptAnswer

        pk = uuid.UUID(attempt.attempt_id)
        for sequence, answer in enumerate(attempt.answers.values(), start=1):
            AttemptAnswer.objects.update_or_create(
                attempt_id=pk,
                question_id=answer.question_id,
                defaults={
                    "submitted_value": answer.submitted_value,
                    "is_correct": answer.is_correct,
                    "score": answer.score,
                    "max_score": answer.max_score,
                    "time_spent": answer.time_spent,
                    "submitted_at": answer.submitted_at,
                    "sequence": sequence,
                },
            )

    def next_attempt_number(self, user_id: str, exam_id: str) -> int:
        from apps.domains.attempts.models import ExamAttempt

        # 집계 함수는 FOR UPDATE와 같이 쓸 수 없어 번호 목록을 잠그고 읽는다
        numbers = list(
            ExamAttempt.all_objects
            .select_for_update()
            .filter(user_id=user_id, exam_id=exam_id)
            .values_list("attempt_number", flat=True)
        )
        return (max(numbers) if numbers else 0) + 1

    def list_overdue_ids(self, now: datetime, limit: Optional[int] = None) -> list[str]:
        from apps.domains.attempts.models import ExamAttempt

        if limit is not None and limit <= 0:
            return []

        # deadline_at 인덱스로 후보만 읽고, 밀리초 판정은 엔티티와 같은 함수로 확인
        rows = (
            ExamAttempt.objects
            .filter(
                status=AttemptStatus.IN_PROGRESS.value,
                start_time__isnull=False,
                deadline_at__lt=now,
            )
            .order_by("start_time")
            .values_list("id", "start_time", "remaining_time", "elapsed_carry_ms")
        )

        overdue: list[str] = []
        for pk, start_time, remaining_time, carry_ms in rows.iterator():
            if overdue_at(start_time, int(remaining_time or 0), int(carry_ms or 0), now):
                overdue.append(str(pk))
                if limit is not None and len(overdue) >= limit:
                    break
        return overdue

    def list_for_user(
        self,
        user_id: str,
        statuses: Iterable[AttemptStatus],
        order_by_end_time: bool = False,
    ) -> list[Attempt]:
        from apps.domains.attempts.models import ExamAttempt

        qs = (
            ExamAttempt.objects
            .prefetch_related("answers")
            .filter(user_id=user_id, status__in=[s.value for s in statuses])
        )
        qs = qs.order_by("-end_time", "-created_at") if order_by_end_time else qs.order_by("-created_at")
        return [_model_to_entity(m) for m in qs]


class DjangoQuestionLookup:
    """QuestionLookup 구현 (apps.domains.exams.ExamQuestion 읽기 전용)."""

    def get(self, question_id: str) -> Optional[QuestionKey]:
        from apps.domains.exams.models import ExamQuestion
        pk = _parse_uuid(question_id)
        if pk is None:
            return None
        q = (
            ExamQuestion.objects
            .filter(id=pk)
            .only("id", "exam_id", "correct_answer", "score_weight")
            .first()
        )
        if q is None:
            return None
        return QuestionKey(
            question_id=str(q.id),
            exam_id=str(q.exam_id),
            correct_answer=q.correct_answer or "",
            score_weight=q.score_weight,
        )
