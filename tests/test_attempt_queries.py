import logging
from decimal import Decimal

import pytest

from examhall.adapters.audit.logging_audit import LoggingAuditSink
from examhall.application.use_cases.attempts.attempt_queries import (
    attempt_stats,
    list_active_attempts,
    list_completed_attempts,
)
from examhall.domain.attempts.errors import AttemptNotFoundError, InvalidArgumentError


def test_list_active_attempts_newest_first(state_machine, uow_factory, clock):
    first = state_machine.start("user-1", "exam-1", 600)
    clock.advance(5)
    second = state_machine.start("user-1", "exam-2", 600)
    state_machine.pause(second.attempt_id)
    clock.advance(5)
    done = state_machine.start("user-1", "exam-3", 600)
    state_machine.submit(done.attempt_id)
    state_machine.start("user-2", "exam-1", 600)

    active = list_active_attempts(uow_factory(), "user-1")

    assert [a.attempt_id for a in active] == [second.attempt_id, first.attempt_id]


def test_list_completed_attempts_by_end_time(state_machine, uow_factory, clock):
    a = state_machine.start("user-1", "exam-1", 600)
    b = state_machine.start("user-1", "exam-2", 600)
    clock.advance(10)
    state_machine.submit(b.attempt_id)
    clock.advance(10)
    state_machine.submit(a.attempt_id)
    c = state_machine.start("user-1", "exam-3", 600)
    state_machine.terminate(c.attempt_id)

    completed = list_completed_attempts(uow_factory(), "user-1")

    assert [x.attempt_id for x in completed] == [a.attempt_id, b.attempt_id]


def test_list_requires_user(uow_factory):
    with pytest.raises(InvalidArgumentError):
        list_active_attempts(uow_factory(), "")


def test_attempt_stats(state_machine, started, uow_factory):
    state_machine.record_answer(started.attempt_id, "q1", "Paris")
    state_machine.record_answer(started.attempt_id, "q2", "0")

    stats = attempt_stats(uow_factory(), started.attempt_id)

    assert (stats.correct, stats.incorrect, stats.total) == (1, 1, 2)
    assert stats.score == Decimal("5.00")
    assert stats.percentage == Decimal("50.00")


def test_attempt_stats_unknown(uow_factory):
    with pytest.raises(AttemptNotFoundError):
        attempt_stats(uow_factory(), "missing")


def test_logging_audit_sink_writes_event(caplog):
    sink = LoggingAuditSink()
    with caplog.at_level(logging.INFO, logger="examhall.audit"):
        sink.record("attempt.paused", attempt_id="a-1", remaining_time=30)

    record = caplog.records[-1]
    assert record.getMessage() == "attempt.paused | attempt_id=a-1 remaining_time=30"
    assert record.audit_event == "attempt.paused"


def test_logging_audit_sink_never_raises():
    class Exploding(logging.Logger):
        def info(self, *args, **kwargs):
            raise RuntimeError("handler down")

    LoggingAuditSink(target=Exploding("boom")).record("attempt.started", attempt_id="a-1")
