"""
Unit of Work 포트 — attempt 작업 1건의 트랜잭션 경계 (Django 미사용)
"""
from __future__ import annotations

from typing import Protocol

from examhall.application.ports.repositories import AttemptRepository, QuestionLookup


class UnitOfWork(Protocol):
    """
    with 블록 = 트랜잭션 1개.
    블록 안에서 get_for_update 로 잡은 락은 블록이 끝날 때까지 유지되고,
    예외로 빠져나가면 그 안의 쓰기는 모두 버려진다.
    """

    @property
    def attempts(self) -> AttemptRepository:
        ...

    @property
    def questions(self) -> QuestionLookup:
        ...

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
