"""
Attempt 도메인 오류 — 순수 파이썬

HTTP 계층은 status_code / code 만 보고 응답을 만든다 (apps.api.common.exceptions).
"""
from __future__ import annotations


class AttemptDomainError(Exception):
    """Attempt 도메인 규칙 위반 등."""

    status_code = 500
    code = "error"

    def __init__(self, message: str = "", **details) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])
        self.details = details


class InvalidArgumentError(AttemptDomainError):
    """입력 누락/형식 오류."""

    status_code = 400
    code = "invalid_argument"


class AttemptNotFoundError(AttemptDomainError):
    """Attempt가 DB에 없음 (soft delete 포함)."""

    status_code = 404
    code = "not_found"


class QuestionNotFoundError(AttemptDomainError):
    """문항이 없거나 attempt의 시험에 속하지 않음."""

    status_code = 404
    code = "not_found"


class InvalidStateError(AttemptDomainError):
    """현재 상태에서 허용되지 않는 전이."""

    status_code = 409
    code = "invalid_state"


class InternalError(AttemptDomainError):
    """영속화 실패 / 저장 데이터 손상."""

    status_code = 500
    code = "internal"


class AttemptLockedError(InvalidStateError):
    """다른 트랜잭션이 attempt row를 잡고 있음 (대기하지 않는 조회에서만)."""

    code = "locked"
