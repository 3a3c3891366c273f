import logging

from examhall.application.use_cases.attempts.sweep_overdue_attempts import OverdueSweeper
from examhall.domain.attempts.entities import AttemptStatus


def test_sweeper_expires_overdue_attempt(state_machine, sweeper, started, clock, repo):
    state_machine.record_answer(started.attempt_id, "q1", "Paris")
    answers_before = repo.get(started.attempt_id).answers
    clock.advance(650)

    report = sweeper.sweep()

    stored = repo.get(started.attempt_id)
    assert report.expired == [started.attempt_id]
    assert report.scanned == 1
    assert stored.status == AttemptStatus.EXPIRED
    assert stored.end_time == clock.now()
    assert stored.answers == answers_before


def test_sweeper_ignores_paused_and_fresh_attempts(state_machine, sweeper, clock, repo):
    paused = state_machine.start("user-1", "exam-1", 60)
    fresh = state_machine.start("user-2", "exam-1", 3_600)
    state_machine.pause(paused.attempt_id)
    clock.advance(600)

    report = sweeper.sweep()

    assert report.scanned == 0
    assert repo.get(paused.attempt_id).status == AttemptStatus.PAUSED
    assert repo.get(fresh.attempt_id).status == AttemptStatus.IN_PROGRESS


def test_sweeper_respects_batch_limit_oldest_first(state_machine, uow_factory, clock):
    first = state_machine.start("user-1", "exam-1", 10)
    clock.advance(1)
    state_machine.start("user-2", "exam-1", 10)
    clock.advance(100)

    limited = OverdueSweeper(uow_factory=uow_factory, clock=clock, state_machine=state_machine, batch_limit=1)

    assert limited.find_overdue() == [first.attempt_id]
    assert limited.sweep().expired == [first.attempt_id]
    assert len(limited.sweep().expired) == 1


def test_sweeper_counts_race_losers_as_skipped(state_machine, sweeper, started, clock, monkeypatch, caplog):
    clock.advance(650)
    monkeypatch.setattr(sweeper, "find_overdue", lambda: [started.attempt_id, started.attempt_id])

    with caplog.at_level(logging.INFO, logger="examhall.overdue_sweeper"):
        report = sweeper.sweep()

    assert report.expired == [started.attempt_id]
    assert report.skipped == [started.attempt_id]
    assert report.failed == []


def test_sweeper_skips_attempt_that_stopped_being_overdue(state_machine, sweeper, started, clock, monkeypatch):
    clock.advance(100)
    monkeypatch.setattr(sweeper, "find_overdue", lambda: [started.attempt_id])

    report = sweeper.sweep()

    assert report.skipped == [started.attempt_id]
    assert report.expired == []


def test_sweeper_isolates_failures(state_machine, sweeper, clock, repo, caplog):
    broken = state_machine.start("user-1", "exam-1", 10)
    healthy = state_machine.start("user-2", "exam-1", 10)
    clock.advance(30)
    repo.fail_on_save.add(broken.attempt_id)

    with caplog.at_level(logging.ERROR, logger="examhall.overdue_sweeper"):
        report = sweeper.sweep()

    assert report.failed == [broken.attempt_id]
    assert report.expired == [healthy.attempt_id]
    assert repo.get(broken.attempt_id).status == AttemptStatus.IN_PROGRESS
    assert "expire failed" in caplog.text


def test_sweeper_marks_unknown_attempt_failed(sweeper, monkeypatch):
    monkeypatch.setattr(sweeper, "find_overdue", lambda: ["ghost"])

    report = sweeper.sweep()

    assert report.failed == ["ghost"]
    assert report.as_dict()["failed"] == 1


def test_sweeper_skips_locked_row_without_waiting(state_machine, sweeper, clock, repo, caplog):
    locked = state_machine.start("user-1", "exam-1", 10)
    free = state_machine.start("user-2", "exam-1", 10)
    clock.advance(30)
    repo.locked.add(locked.attempt_id)

    with caplog.at_level(logging.INFO, logger="examhall.overdue_sweeper"):
        report = sweeper.sweep()

    assert report.skipped == [locked.attempt_id]
    assert report.expired == [free.attempt_id]
    assert report.failed == []
    assert repo.get(locked.attempt_id).status == AttemptStatus.IN_PROGRESS
    assert "locked by another transaction" in caplog.text

    # 락이 풀리면 다음 tick에서 처리
    repo.locked.clear()
    assert sweeper.sweep().expired == [locked.attempt_id]


def test_sweeper_expires_attempt_spent_in_short_slices(state_machine, sweeper, started, clock, repo):
    for _ in range(2000):
        clock.advance(0.9)
        state_machine.pause(started.attempt_id)
        clock.advance(30)
        state_machine.resume(started.attempt_id)
    clock.advance(1)

    report = sweeper.sweep()

    assert report.expired == [started.attempt_id]
    assert repo.get(started.attempt_id).status == AttemptStatus.EXPIRED
