"""
Django Unit of Work — attempt 작업 1건 = transaction.atomic 1개

- attempts / questions 리포지토리는 처음 접근할 때 생성 (Django import도 그때)
- 예외로 빠져나가면 atomic이 rollback, 정상 종료면 commit
- select_for_update 락은 with 블록이 끝날 때 풀린다
"""
from __future__ import annotations

from typing import Optional


class DjangoUnitOfWork:

    def __init__(self, using: Optional[str] = None) -> None:
        self._using = using
        self._atomic = None
        self._attempts = None
        self._questions = None

    @property
    def attempts(self):
        if self._attempts is None:
            from examhall.adapters.db.django.repositories_attempts import DjangoAttemptRepository
            self._attempts = DjangoAttemptRepository()
        return self._attempts

    @property
    def questions(self):
        if self._questions is None:
            from examhall.adapters.db.django.repositories_attempts import DjangoQuestionLookup
            self._questions = DjangoQuestionLookup()
        return self._questions

    def __enter__(self) -> DjangoUnitOfWork:
        from django.db import transaction

        if self._atomic is not None:
            raise RuntimeError("DjangoUnitOfWork is not reentrant; create a new one per operation.")
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        atomic, self._atomic = self._atomic, None
        if atomic is not None:
            atomic.__exit__(exc_type, exc_val, exc_tb)

    def commit(self) -> None:
        # 정상 종료 시 atomic 블록이 commit
        pass

    def rollback(self) -> None:
        from django.db import transaction

        transaction.set_rollback(True, using=self._using)
