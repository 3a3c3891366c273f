"""
Repository 포트 — 영속화 추상화 (Django/ORM 미사용)
"""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Protocol

from examhall.domain.attempts.entities import Attempt, AttemptStatus, QuestionKey


class AttemptRepository(Protocol):
    """Attempt + 답안 영속화. select_for_update/atomic은 어댑터에서 수행."""

    @abstractmethod
    def get(self, attempt_id: str) -> Optional[Attempt]:
        """attempt_id로 조회 (락 없음, 답안 포함). 없으면 None."""
        ...

    @abstractmethod
    def get_for_update(self, attempt_id: str, skip_locked: bool = False) -> Optional[Attempt]:
        """
        attempt_id로 조회 + row lock. 호출자는 UoW 트랜잭션 안에 있어야 함.
        skip_locked=True 이면 락을 기다리지 않고, 다른 트랜잭션이 잡은 row는 AttemptLockedError.
        """
        ...

    @abstractmethod
    def add(self, attempt: Attempt) -> None:
        """신규 attempt insert. (user, exam, attempt_number) 중복이면 InvalidStateError."""
        ...

    @abstractmethod
    def save(self, attempt: Attempt) -> None:
        """기존 attempt의 모든 필드 + 답안 upsert (원자적)."""
        ...

    @abstractmethod
    def next_attempt_number(self, user_id: str, exam_id: str) -> int:
        """(user, exam) 기존 attempt 잠금 후 max(attempt_number) + 1."""
        ...

    @abstractmethod
    def list_overdue_ids(self, now: datetime, limit: Optional[int] = None) -> list[str]:
        """in_progress 이면서 활성 경과 시간 > remaining_time 인 attempt id (오래된 순)."""
        ...

    @abstractmethod
    def list_for_user(
        self,
        user_id: str,
        statuses: Iterable[AttemptStatus],
        order_by_end_time: bool = False,
    ) -> list[Attempt]:
        """사용자 attempt 목록 (기본 최신 생성 순, order_by_end_time이면 종료 시각 역순)."""
        ...


class QuestionLookup(Protocol):
    """문항 정답/배점 조회 (읽기 전용)."""

    @abstractmethod
    def get(self, question_id: str) -> Optional[QuestionKey]:
        ...
