"""
Attempt 상태 머신 Use Case — 도메인/포트만 사용 (Django 미사용)

상태 전이·시간 계산은 엔티티, 채점은 ScoringEngine, 영속화/락은 UoW 어댑터가 수행.
모든 전제조건 검사는 변경 전에 끝나므로 실패한 호출은 아무것도 쓰지 않는다
(예외가 나면 UoW가 rollback).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from examhall.application.ports.audit import AuditSink
from examhall.application.ports.clock import Clock
from examhall.application.ports.unit_of_work import UnitOfWork
from examhall.domain.attempts.entities import Answer, Attempt
from examhall.domain.attempts.errors import (
    AttemptNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
    QuestionNotFoundError,
)
from examhall.domain.attempts.scoring import ScoringEngine
from examhall.domain.shared.ids import generate_attempt_id

logger = logging.getLogger("examhall.attempts")

UnitOfWorkFactory = Callable[[], UnitOfWork]


@dataclass(frozen=True)
class AnswerInput:
    """클라이언트 답안 1건 (is_correct/score는 받지 않는다)."""
    question_id: str
    submitted_value: Optional[str] = None
    time_spent: Optional[int] = None


def _require_id(name: str, value: Any) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidArgumentError(f"{name} is required.", field=name)
    return text


def _require_positive_int(name: str, value: Any) -> int:
    if value is None:
        raise InvalidArgumentError(f"{name} is required.", field=name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer.", field=name)
    if value <= 0:
        raise InvalidArgumentError(f"{name} must be positive.", field=name)
    return value


def _coerce_answer(item: Union[AnswerInput, Mapping[str, Any]]) -> AnswerInput:
    if isinstance(item, AnswerInput):
        return item
    if not isinstance(item, Mapping):
        raise InvalidArgumentError("answer must be an object.")
    return AnswerInput(
        question_id=item.get("question_id"),
        submitted_value=item.get("submitted_value"),
        time_spent=item.get("time_spent"),
    )


class AttemptStateMachine:
    """
    Attempt 생명주기 전담.

    - start / pause / resume / extend_time / record_answer(s) / submit / terminate : 클라이언트·관리자
    - force_expire : OverdueSweeper 전용 (멱등)
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        audit: AuditSink,
        scoring: Optional[ScoringEngine] = None,
        id_factory: Callable[[], str] = generate_attempt_id,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._audit = audit
        self._scoring = scoring or ScoringEngine()
        self._id_factory = id_factory

    @property
    def scoring(self) -> ScoringEngine:
        return self._scoring

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load_for_update(uow: UnitOfWork, attempt_id: Any, skip_locked: bool = False) -> Attempt:
        attempt_id = _require_id("attempt_id", attempt_id)
        attempt = uow.attempts.get_for_update(attempt_id, skip_locked=skip_locked)
        if attempt is None:
            raise AttemptNotFoundError(f"Attempt not found: {attempt_id}", attempt_id=attempt_id)
        return attempt

    def _build_answer(self, uow: UnitOfWork, attempt: Attempt, item: AnswerInput, now) -> Answer:
        question_id = _require_id("question_id", item.question_id)

        value = item.submitted_value
        if value is not None and not isinstance(value, str):
            raise InvalidArgumentError("submitted_value must be a string.", field="submitted_value")

        time_spent = item.time_spent
        if time_spent is not None:
            if isinstance(time_spent, bool) or not isinstance(time_spent, int) or time_spent < 0:
                raise InvalidArgumentError("time_spent must be a non-negative integer.", field="time_spent")

        question = uow.questions.get(question_id)
        if question is None or str(question.exam_id) != str(attempt.exam_id):
            raise QuestionNotFoundError(
                f"Question {question_id} does not belong to exam {attempt.exam_id}",
                question_id=question_id,
            )

        evaluation = self._scoring.evaluate(question, value)
        return Answer(
            question_id=question.question_id,
            submitted_value=(value or "").strip(),
            is_correct=evaluation.is_correct,
            score=evaluation.score,
            max_score=evaluation.max_score,
            time_spent=time_spent,
            submitted_at=now,
        )

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def start(
        self,
        user_id: Any,
        exam_id: Any,
        configured_duration_seconds: Optional[int],
        *,
        max_attempts: Optional[int] = None,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Attempt:
        """
        새 attempt 생성 (in_progress, 시계 즉시 시작).
        시간 기본값은 두지 않는다: 시험 설정의 duration을 호출자가 넘겨야 함.
        응시 자격(공개 여부 등)은 호출자 책임, max_attempts만 여기서 강제.
        """
        user_id = _require_id("user_id", user_id)
        exam_id = _require_id("exam_id", exam_id)
        duration = _require_positive_int("configured_duration_seconds", configured_duration_seconds)
        if max_attempts is not None:
            max_attempts = _require_positive_int("max_attempts", max_attempts)

        with self._uow_factory() as uow:
            next_number = uow.attempts.next_attempt_number(user_id, exam_id)
            if max_attempts is not None and next_number > max_attempts:
                raise InvalidStateError(
                    "Max attempts exceeded.",
                    user_id=user_id,
                    exam_id=exam_id,
                    max_attempts=max_attempts,
                )

            attempt = Attempt.begin(
                attempt_id=self._id_factory(),
                user_id=user_id,
                exam_id=exam_id,
                attempt_number=next_number,
                duration_seconds=duration,
                now=self._clock.now(),
                device_info=device_info,
                ip_address=ip_address,
                metadata=metadata,
            )
            uow.attempts.add(attempt)

        self._audit.record(
            "attempt.started",
            attempt_id=attempt.attempt_id,
            user_id=user_id,
            exam_id=exam_id,
            attempt_number=attempt.attempt_number,
            remaining_time=attempt.remaining_time,
        )
        return attempt

    def get(self, attempt_id: Any) -> Attempt:
        attempt_id = _require_id("attempt_id", attempt_id)
        with self._uow_factory() as uow:
            attempt = uow.attempts.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(f"Attempt not found: {attempt_id}", attempt_id=attempt_id)
        return attempt

    def pause(self, attempt_id: Any) -> Attempt:
        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            attempt.pause(self._clock.now())
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.paused",
            attempt_id=attempt.attempt_id,
            remaining_time=attempt.remaining_time,
        )
        return attempt

    def resume(self, attempt_id: Any) -> Attempt:
        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            attempt.resume(self._clock.now())
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.resumed",
            attempt_id=attempt.attempt_id,
            remaining_time=attempt.remaining_time,
        )
        return attempt

    def extend_time(self, attempt_id: Any, extra_seconds: Any) -> Attempt:
        """remaining_time += extra_seconds. paused 상태에서도 허용 (정책 플래그, DESIGN.md 참고)."""
        extra_seconds = _require_positive_int("extra_seconds", extra_seconds)

        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            attempt.extend(extra_seconds, self._clock.now())
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.extended",
            attempt_id=attempt.attempt_id,
            extra_seconds=extra_seconds,
            remaining_time=attempt.remaining_time,
            status=attempt.status.value,
        )
        return attempt

    def record_answer(
        self,
        attempt_id: Any,
        question_id: Any,
        submitted_value: Optional[str],
        time_spent: Optional[int] = None,
    ) -> Answer:
        item = AnswerInput(
            question_id=question_id,
            submitted_value=submitted_value,
            time_spent=time_spent,
        )
        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            now = self._clock.now()
            attempt.ensure_accepting_answers(now)

            answer = self._build_answer(uow, attempt, item, now)
            attempt.put_answer(answer, now)
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.answer_recorded",
            attempt_id=attempt.attempt_id,
            question_id=answer.question_id,
            is_correct=answer.is_correct,
        )
        return answer

    def record_answers(
        self,
        attempt_id: Any,
        answers: Iterable[Union[AnswerInput, Mapping[str, Any]]],
    ) -> list[Answer]:
        """자동 저장: 여러 답안을 한 트랜잭션으로 (하나라도 실패하면 전부 rollback)."""
        items = [_coerce_answer(a) for a in (answers or [])]
        if not items:
            raise InvalidArgumentError("answers must not be empty.", field="answers")

        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            now = self._clock.now()
            attempt.ensure_accepting_answers(now)

            recorded = []
            for item in items:
                answer = self._build_answer(uow, attempt, item, now)
                attempt.put_answer(answer, now)
                recorded.append(answer)
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.answers_autosaved",
            attempt_id=attempt.attempt_id,
            total_answers=len(recorded),
        )
        return recorded

    def submit(self, attempt_id: Any) -> Attempt:
        """in_progress → completed. paused는 거부 (먼저 resume 해야 함)."""
        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            attempt.complete(self._clock.now(), self._scoring.aggregate(attempt))
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.submitted",
            attempt_id=attempt.attempt_id,
            score=str(attempt.score),
            correct_answers=attempt.correct_answers,
            wrong_answers=attempt.wrong_answers,
        )
        return attempt

    def force_expire(self, attempt_id: Any) -> Optional[Attempt]:
        """
        시간 초과 attempt 강제 종료 (OverdueSweeper 전용).

        멱등: 이미 최종 상태면 아무것도 하지 않고 None.
        paused / 아직 시간이 남은 attempt는 InvalidStateError (sweeper는 정상 경합으로 취급).
        다른 요청이 row를 잡고 있으면 기다리지 않고 AttemptLockedError (InvalidStateError 하위).
        """
        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id, skip_locked=True)
            if attempt.is_terminal():
                logger.info(
                    "Attempt already resolved, skip expire | attempt_id=%s status=%s",
                    attempt.attempt_id,
                    attempt.status.value,
                )
                return None

            attempt.expire(self._clock.now(), self._scoring.aggregate(attempt))
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.expired",
            attempt_id=attempt.attempt_id,
            score=str(attempt.score),
            correct_answers=attempt.correct_answers,
            wrong_answers=attempt.wrong_answers,
        )
        return attempt

    def terminate(
        self,
        attempt_id: Any,
        reason: Optional[str] = None,
        cheating_detected: bool = False,
    ) -> Attempt:
        """관리자 강제 종료 (in_progress/paused → terminated). 기록된 답안으로 점수 산출."""
        with self._uow_factory() as uow:
            attempt = self._load_for_update(uow, attempt_id)
            attempt.terminate(
                self._clock.now(),
                self._scoring.aggregate(attempt),
                reason=(reason or "").strip() or None,
                cheating_detected=bool(cheating_detected),
            )
            uow.attempts.save(attempt)

        self._audit.record(
            "attempt.terminated",
            attempt_id=attempt.attempt_id,
            reason=reason,
            cheating_detected=attempt.cheating_detected,
        )
        return attempt
