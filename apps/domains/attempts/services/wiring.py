# apps/domains/attempts/services/wiring.py
"""
Attempt 상태 머신 / Sweeper 조립 (Django 어댑터 주입)

View / Celery task / management command 는 여기서만 인스턴스를 얻는다.
"""
from __future__ import annotations

from django.conf import settings

from examhall.adapters.audit.logging_audit import LoggingAuditSink
from examhall.adapters.clock.system_clock import SystemClock
from examhall.adapters.db.django.uow import DjangoUnitOfWork
from examhall.application.use_cases.attempts.attempt_lifecycle import AttemptStateMachine
from examhall.application.use_cases.attempts.sweep_overdue_attempts import OverdueSweeper


def build_state_machine() -> AttemptStateMachine:
    return AttemptStateMachine(
        uow_factory=DjangoUnitOfWork,
        clock=SystemClock(),
        audit=LoggingAuditSink(),
    )


def build_overdue_sweeper(batch_limit=None) -> OverdueSweeper:
    state_machine = build_state_machine()
    if batch_limit is None:
        batch_limit = getattr(settings, "ATTEMPT_SWEEP_BATCH_LIMIT", 500)
    return OverdueSweeper(
        uow_factory=DjangoUnitOfWork,
        clock=SystemClock(),
        state_machine=state_machine,
        batch_limit=batch_limit,
    )
