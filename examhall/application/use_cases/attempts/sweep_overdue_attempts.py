"""
Overdue Attempt Sweeper Use Case — 포트만 사용 (Django/Celery/Redis 미사용)

tick 1회:
  1) 시간 초과 in_progress attempt id 조회 (paused는 시계가 멈춰 있으므로 대상 아님)
  2) attempt마다 별도 UoW로 force_expire → 한 건 실패가 나머지를 막지 않음
  3) 수동 submit/pause와의 경합에서 진 경우(InvalidState / 이미 최종 상태)는 info 로그
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from examhall.application.ports.clock import Clock
from examhall.application.use_cases.attempts.attempt_lifecycle import (
    AttemptStateMachine,
    UnitOfWorkFactory,
)
from examhall.domain.attempts.errors import InvalidStateError
from examhall.domain.shared.ids import generate_request_id

logger = logging.getLogger("examhall.overdue_sweeper")

DEFAULT_BATCH_LIMIT = 500


@dataclass
class SweepReport:
    run_id: str
    scanned: int = 0
    expired: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "scanned": self.scanned,
            "expired": len(self.expired),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }


class OverdueSweeper:
    """스케줄러(Celery beat / management command)가 주기적으로 sweep() 호출."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock,
        state_machine: AttemptStateMachine,
        batch_limit: Optional[int] = DEFAULT_BATCH_LIMIT,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._state_machine = state_machine
        self._batch_limit = batch_limit

    def find_overdue(self) -> list[str]:
        now = self._clock.now()
        with self._uow_factory() as uow:
            return uow.attempts.list_overdue_ids(now, limit=self._batch_limit)

    def sweep(self) -> SweepReport:
        report = SweepReport(run_id=generate_request_id())
        attempt_ids = self.find_overdue()
        report.scanned = len(attempt_ids)

        for attempt_id in attempt_ids:
            try:
                expired = self._state_machine.force_expire(attempt_id)
            except InvalidStateError as e:
                # 목록 조회 이후 pause/연장 등으로 상태가 바뀜 → 이미 처리된 것으로 간주
                # 다른 요청이 row를 잡고 있으면(AttemptLockedError) 기다리지 않고 다음 tick에서 다시 본다
                report.skipped.append(attempt_id)
                logger.info(
                    "Overdue attempt no longer expirable | run_id=%s attempt_id=%s reason=%s",
                    report.run_id,
                    attempt_id,
                    e.message,
                )
                continue
            except Exception:
                report.failed.append(attempt_id)
                logger.exception(
                    "Overdue attempt expire failed | run_id=%s attempt_id=%s",
                    report.run_id,
                    attempt_id,
                )
                continue

            if expired is None:
                report.skipped.append(attempt_id)
                continue

            report.expired.append(attempt_id)
            logger.info(
                "Auto-expired overdue attempt | run_id=%s attempt_id=%s score=%s",
                report.run_id,
                attempt_id,
                expired.score,
            )

        if report.scanned:
            logger.info("Overdue sweep done | %s", report.as_dict())
        return report
