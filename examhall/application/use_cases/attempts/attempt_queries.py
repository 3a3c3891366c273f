"""
Attempt 조회 Use Case — 읽기 전용 (락 없음)
"""
from __future__ import annotations

from typing import Any, Optional

from examhall.application.ports.unit_of_work import UnitOfWork
from examhall.domain.attempts.entities import ACTIVE_STATUSES, Attempt, AttemptStatus
from examhall.domain.attempts.errors import AttemptNotFoundError, InvalidArgumentError
from examhall.domain.attempts.scoring import AttemptStats, ScoringEngine


def _user_id(user_id: Any) -> str:
    text = str(user_id).strip() if user_id is not None else ""
    if not text:
        raise InvalidArgumentError("user_id is required.", field="user_id")
    return text


def list_active_attempts(uow: UnitOfWork, user_id: Any) -> list[Attempt]:
    """in_progress / paused attempt (최신 생성 순)."""
    with uow:
        return uow.attempts.list_for_user(_user_id(user_id), ACTIVE_STATUSES)


def list_completed_attempts(uow: UnitOfWork, user_id: Any) -> list[Attempt]:
    """completed attempt (종료 시각 역순)."""
    with uow:
        return uow.attempts.list_for_user(
            _user_id(user_id),
            (AttemptStatus.COMPLETED,),
            order_by_end_time=True,
        )


def attempt_stats(
    uow: UnitOfWork,
    attempt_id: Any,
    scoring: Optional[ScoringEngine] = None,
) -> AttemptStats:
    """정답/오답/전체 수 + 점수 합 + 정답률."""
    attempt_id = str(attempt_id).strip() if attempt_id is not None else ""
    if not attempt_id:
        raise InvalidArgumentError("attempt_id is required.", field="attempt_id")
    with uow:
        attempt = uow.attempts.get(attempt_id)
    if attempt is None:
        raise AttemptNotFoundError(f"Attempt not found: {attempt_id}", attempt_id=attempt_id)
    return (scoring or ScoringEngine()).stats(attempt)
