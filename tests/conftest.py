"""
공용 fixture

- 순수 use case 테스트: in-memory repository / UoW / 고정 시계 (Django DB 불필요)
- Django 테스트: pytest-django 의 db / django_user_model fixture 사용
"""
from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from examhall.application.use_cases.attempts.attempt_lifecycle import AttemptStateMachine
from examhall.application.use_cases.attempts.sweep_overdue_attempts import OverdueSweeper
from examhall.domain.attempts.entities import AttemptStatus, QuestionKey
from examhall.domain.attempts.errors import AttemptLockedError, InternalError, InvalidStateError

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)

EXAM_ID = "exam-1"
OTHER_EXAM_ID = "exam-2"


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current = self.current + timedelta(seconds=seconds)
        return self.current


class RecordingAuditSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def record(self, event_name, **fields) -> None:
        self.events.append((event_name, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class InMemoryAttemptRepository:
    """저장 시점 스냅샷을 보관 (엔티티를 꺼내 고쳐도 save 전에는 반영 안 됨)."""

    def __init__(self) -> None:
        self.rows: dict = {}
        self.fail_on_save: set[str] = set()
        # 다른 트랜잭션이 row lock을 잡고 있는 attempt
        self.locked: set[str] = set()

    def get(self, attempt_id):
        row = self.rows.get(attempt_id)
        return copy.deepcopy(row) if row is not None else None

    def get_for_update(self, attempt_id, skip_locked=False):
        if skip_locked and attempt_id in self.locked and attempt_id in self.rows:
            raise AttemptLockedError(f"Attempt is locked by another transaction: {attempt_id}")
        return self.get(attempt_id)

    def add(self, attempt) -> None:
        for row in self.rows.values():
            if (row.user_id, row.exam_id, row.attempt_number) == (
                attempt.user_id, attempt.exam_id, attempt.attempt_number
            ):
                raise InvalidStateError("Attempt already exists for this attempt number.")
        self.rows[attempt.attempt_id] = copy.deepcopy(attempt)

    def save(self, attempt) -> None:
        if attempt.attempt_id in self.fail_on_save:
            raise InternalError(f"save failed: {attempt.attempt_id}")
        if attempt.attempt_id not in self.rows:
            raise InternalError(f"Attempt row vanished during save: {attempt.attempt_id}")
        self.rows[attempt.attempt_id] = copy.deepcopy(attempt)

    def next_attempt_number(self, user_id, exam_id) -> int:
        numbers = [
            r.attempt_number
            for r in self.rows.values()
            if r.user_id == user_id and r.exam_id == exam_id
        ]
        return (max(numbers) if numbers else 0) + 1

    def list_overdue_ids(self, now, limit=None):
        running = sorted(
            (r for r in self.rows.values()
             if r.status == AttemptStatus.IN_PROGRESS and r.start_time is not None),
            key=lambda r: r.start_time,
        )
        ids = [r.attempt_id for r in running if r.is_overdue(now)]
        return ids[:limit] if limit is not None else ids

    def list_for_user(self, user_id, statuses, order_by_end_time=False):
        statuses = set(statuses)
        rows = [copy.deepcopy(r) for r in self.rows.values() if r.user_id == user_id and r.status in statuses]
        if order_by_end_time:
            rows.sort(key=lambda r: r.end_time, reverse=True)
        else:
            rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows


class InMemoryQuestionLookup:
    def __init__(self) -> None:
        self.questions: dict[str, QuestionKey] = {}

    def add(self, question_id, correct_answer, score_weight=None, exam_id=EXAM_ID) -> QuestionKey:
        q = QuestionKey(
            question_id=question_id,
            exam_id=exam_id,
            correct_answer=correct_answer,
            score_weight=(Decimal(str(score_weight)) if score_weight is not None else None),
        )
        self.questions[question_id] = q
        return q

    def get(self, question_id):
        return self.questions.get(question_id)


class InMemoryUnitOfWork:
    """예외로 빠져나가면 with 진입 시점 스냅샷으로 되돌린다."""

    def __init__(self, attempts: InMemoryAttemptRepository, questions: InMemoryQuestionLookup) -> None:
        self.attempts = attempts
        self.questions = questions
        self._snapshot = None
        self.committed = False

    def __enter__(self):
        self._snapshot = copy.deepcopy(self.attempts.rows)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.attempts.rows = self._snapshot


class SequentialIds:
    def __init__(self) -> None:
        self.n = 0

    def __call__(self) -> str:
        self.n += 1
        return f"attempt-{self.n}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit():
    return RecordingAuditSink()


@pytest.fixture
def repo():
    return InMemoryAttemptRepository()


@pytest.fixture
def questions():
    lookup = InMemoryQuestionLookup()
    lookup.add("q1", "Paris", score_weight=5)
    lookup.add("q2", "42", score_weight=10)
    lookup.add("q-free-1", "blue")
    lookup.add("q-free-2", "red")
    lookup.add("q-other", "x", score_weight=1, exam_id=OTHER_EXAM_ID)
    return lookup


@pytest.fixture
def uow_factory(repo, questions):
    return lambda: InMemoryUnitOfWork(repo, questions)


@pytest.fixture
def state_machine(uow_factory, clock, audit):
    return AttemptStateMachine(
        uow_factory=uow_factory,
        clock=clock,
        audit=audit,
        id_factory=SequentialIds(),
    )


@pytest.fixture
def sweeper(uow_factory, clock, state_machine):
    return OverdueSweeper(uow_factory=uow_factory, clock=clock, state_machine=state_machine)


@pytest.fixture
def started(state_machine):
    """remaining_time=600 으로 시작한 attempt."""
    return state_machine.start("user-1", EXAM_ID, 600)
