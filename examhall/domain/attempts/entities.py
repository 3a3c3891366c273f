"""
Attempt 도메인 엔티티 — 순수 파이썬 (Django/ORM 미사용)

상태 전이 규칙은 엔티티 메서드로 표현.
시간 계산은 모두 호출자가 넘겨준 now 기준 (Clock 포트는 use case에서 주입).

    in_progress ──pause──▶ paused ──resume──▶ in_progress
    in_progress ──submit──▶ completed
    in_progress ──expire──▶ expired        (OverdueSweeper 전용)
    in_progress | paused ──terminate──▶ terminated
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from examhall.domain.attempts.errors import InvalidArgumentError, InvalidStateError


class AttemptStatus(str, Enum):
    """Attempt 상태 (apps.domains.attempts.models.ExamAttempt.Status 와 동기화)."""
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    EXPIRED = "expired"
    TERMINATED = "terminated"


# 최종 상태 (더 이상 어떤 전이도 없음)
TERMINAL_STATUSES = (AttemptStatus.COMPLETED, AttemptStatus.EXPIRED, AttemptStatus.TERMINATED)

# 사용자 기준 "진행 중" (me/active 조회)
ACTIVE_STATUSES = (AttemptStatus.IN_PROGRESS, AttemptStatus.PAUSED)


_MS = timedelta(milliseconds=1)


def elapsed_millis(start: datetime, now: datetime) -> int:
    """start → now 경과 밀리초 (내림). 시계가 뒤로 가도 음수는 없음."""
    return max(0, (now - start) // _MS)


def overdue_at(
    start_time: Optional[datetime],
    remaining_time: int,
    carry_ms: int,
    now: datetime,
) -> bool:
    """
    저장된 컬럼 값만으로 시간 초과 판정 (repository 조회에서도 사용).
    carry_ms: 이전 구간들에서 초 단위로 차감되지 못한 잔여 밀리초
    """
    if start_time is None:
        return False
    return elapsed_millis(start_time, now) + carry_ms > remaining_time * 1000


@dataclass(frozen=True)
class QuestionKey:
    """
    채점에 필요한 문항 정보 (읽기 전용 스냅샷).
    score_weight가 None이면 가중치 없는 문항 → 백분율 채점.
    """
    question_id: str
    exam_id: str
    correct_answer: str
    score_weight: Optional[Decimal] = None


@dataclass
class Answer:
    """attempt × question 당 1건. 재제출 시 덮어씀 (last-write-wins)."""
    question_id: str
    submitted_value: str
    is_correct: bool
    score: Decimal
    max_score: Optional[Decimal] = None
    time_spent: Optional[int] = None
    submitted_at: Optional[datetime] = None


@dataclass
class Attempt:
    """
    시험 1회 응시 도메인 엔티티.
    DB/ORM 없이 규칙만 보유.
    """
    attempt_id: str
    user_id: str
    exam_id: str
    attempt_number: int
    status: AttemptStatus
    remaining_time: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    score: Optional[Decimal] = None
    correct_answers: int = 0
    wrong_answers: int = 0
    # question_id → Answer, dict 삽입 순서 = 제출 순서
    answers: dict[str, Answer] = field(default_factory=dict)
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    cheating_detected: bool = False
    last_question_id: Optional[str] = None
    # pause 시 1초 미만 사용분 (0 ~ 999). 다음 구간에 이어서 합산
    elapsed_carry_ms: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def begin(
        cls,
        *,
        attempt_id: str,
        user_id: str,
        exam_id: str,
        attempt_number: int,
        duration_seconds: int,
        now: datetime,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Attempt:
        """새 attempt (in_progress, 시계 즉시 시작)."""
        if attempt_number < 1:
            raise InvalidArgumentError(f"attempt_number must be positive: {attempt_number}")
        if duration_seconds <= 0:
            raise InvalidArgumentError(f"duration must be positive: {duration_seconds}")
        return cls(
            attempt_id=attempt_id,
            user_id=user_id,
            exam_id=exam_id,
            attempt_number=attempt_number,
            status=AttemptStatus.IN_PROGRESS,
            remaining_time=int(duration_seconds),
            start_time=now,
            device_info=device_info,
            ip_address=ip_address,
            metadata=dict(metadata or {}),
            created_at=now,
            updated_at=now,
        )

    # ------------------------------------------------------------------
    # 조회 (시간 계산)
    # ------------------------------------------------------------------

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_running(self) -> bool:
        return self.status == AttemptStatus.IN_PROGRESS and self.start_time is not None

    def _active_millis(self, now: datetime) -> int:
        if not self.is_running():
            return 0
        return elapsed_millis(self.start_time, now) + self.elapsed_carry_ms

    def elapsed_seconds(self, now: datetime) -> int:
        """
        아직 remaining_time에서 차감되지 않은 활성 경과 초 (내림).
        현재 구간 + 이월된 밀리초. paused/최종 상태면 0.
        """
        return self._active_millis(now) // 1000

    def time_left(self, now: datetime) -> int:
        return max(0, self.remaining_time - self.elapsed_seconds(now))

    def is_overdue(self, now: datetime) -> bool:
        """in_progress 이고 경과 시간이 남은 시간을 초과 (밀리초 단위 비교)."""
        return self.is_running() and overdue_at(
            self.start_time, self.remaining_time, self.elapsed_carry_ms, now
        )

    def deadline(self) -> Optional[datetime]:
        """이 시각을 넘기면 overdue. 시계가 멈춰 있으면 None."""
        if not self.is_running():
            return None
        return self.start_time + timedelta(seconds=self.remaining_time) - self.elapsed_carry_ms * _MS

    def total_duration(self) -> Optional[int]:
        """
        생성 → 종료까지 벽시계 기준 초 (일시정지 구간 포함).
        아직 끝나지 않았으면 None.
        """
        if self.end_time is None or self.created_at is None:
            return None
        return elapsed_millis(self.created_at, self.end_time) // 1000

    def answered_count(self) -> int:
        return len(self.answers)

    # ------------------------------------------------------------------
    # 상태 전이
    # ------------------------------------------------------------------

    def _require(self, action: str, *allowed: AttemptStatus) -> None:
        if self.status not in allowed:
            raise InvalidStateError(
                f"Cannot {action} attempt {self.attempt_id}: status={self.status.value}",
                attempt_id=self.attempt_id,
                status=self.status.value,
            )

    def _consume_elapsed(self, now: datetime) -> None:
        """
        진행 중 구간을 remaining_time에서 차감하고 시계를 멈춘다.
        초 단위로 떨어지지 않는 나머지는 elapsed_carry_ms로 넘긴다.
        """
        if self.is_running():
            spent, carry = divmod(self._active_millis(now), 1000)
            if spent >= self.remaining_time:
                self.remaining_time = 0
                self.elapsed_carry_ms = 0
            else:
                self.remaining_time -= spent
                self.elapsed_carry_ms = carry
        self.start_time = None

    def pause(self, now: datetime) -> None:
        """in_progress → paused. remaining_time 동결."""
        self._require("pause", AttemptStatus.IN_PROGRESS)
        self._consume_elapsed(now)
        self.status = AttemptStatus.PAUSED
        self.updated_at = now

    def resume(self, now: datetime) -> None:
        """paused → in_progress. remaining_time 그대로."""
        self._require("resume", AttemptStatus.PAUSED)
        self.start_time = now
        self.status = AttemptStatus.IN_PROGRESS
        self.updated_at = now

    def extend(self, extra_seconds: int, now: datetime) -> None:
        """시간 연장. 일시정지 중에도 허용, 최종 상태는 불가."""
        if extra_seconds <= 0:
            raise InvalidArgumentError(f"extra_seconds must be positive: {extra_seconds}")
        self._require("extend", *ACTIVE_STATUSES)
        self.remaining_time += int(extra_seconds)
        self.updated_at = now

    def ensure_accepting_answers(self, now: datetime) -> None:
        self._require("answer", AttemptStatus.IN_PROGRESS)
        if self.is_overdue(now):
            raise InvalidStateError(
                f"Cannot answer attempt {self.attempt_id}: time budget exhausted",
                attempt_id=self.attempt_id,
                status=self.status.value,
            )

    def put_answer(self, answer: Answer, now: datetime) -> None:
        """
        question_id 기준 upsert 후 정답/오답 수를 전체 답안에서 다시 계산.
        (증분 계산은 재제출 시 이중 집계가 생김)
        """
        self.ensure_accepting_answers(now)
        # 재제출이면 기존 위치를 지우고 최신 제출 순서로 다시 넣는다
        self.answers.pop(answer.question_id, None)
        self.answers[answer.question_id] = answer
        self.last_question_id = answer.question_id
        self.recount()
        self.updated_at = now

    def recount(self) -> None:
        correct = sum(1 for a in self.answers.values() if a.is_correct)
        self.correct_answers = correct
        self.wrong_answers = len(self.answers) - correct

    def _close(self, status: AttemptStatus, now: datetime, score: Decimal) -> None:
        self._consume_elapsed(now)
        self.elapsed_carry_ms = 0
        self.end_time = now
        self.status = status
        self.score = score
        self.updated_at = now

    def complete(self, now: datetime, score: Decimal) -> None:
        """in_progress → completed (수동 제출)."""
        self._require("submit", AttemptStatus.IN_PROGRESS)
        self._close(AttemptStatus.COMPLETED, now, score)

    def expire(self, now: datetime, score: Decimal) -> None:
        """in_progress → expired (시간 초과 강제 종료)."""
        self._require("expire", AttemptStatus.IN_PROGRESS)
        if not self.is_overdue(now):
            raise InvalidStateError(
                f"Cannot expire attempt {self.attempt_id}: time budget not exhausted",
                attempt_id=self.attempt_id,
                status=self.status.value,
            )
        self._close(AttemptStatus.EXPIRED, now, score)

    def terminate(
        self,
        now: datetime,
        score: Decimal,
        reason: Optional[str] = None,
        cheating_detected: bool = False,
    ) -> None:
        """in_progress/paused → terminated (관리자 강제 종료)."""
        self._require("terminate", *ACTIVE_STATUSES)
        self._close(AttemptStatus.TERMINATED, now, score)
        if reason:
            self.metadata["termination_reason"] = reason
        if cheating_detected:
            self.cheating_detected = True
