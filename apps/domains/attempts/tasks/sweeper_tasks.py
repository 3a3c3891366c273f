# apps/domains/attempts/tasks/sweeper_tasks.py
import logging

from celery import shared_task
from django.conf import settings

from apps.domains.attempts.services.wiring import build_overdue_sweeper
from libs.redis import acquire_lock, release_lock

logger = logging.getLogger(__name__)

SWEEP_LOCK_NAME = "attempts:overdue-sweep"


# 재시도 없음: 다음 beat tick이 곧 다시 돈다
@shared_task(bind=True)
def sweep_overdue_attempts_task(self) -> dict:
    ttl = int(getattr(settings, "ATTEMPT_SWEEP_LOCK_TTL_SECONDS", 300))
    if not acquire_lock(SWEEP_LOCK_NAME, ttl_seconds=ttl):
        return {"skipped": True}

    try:
        report = build_overdue_sweeper().sweep()
    finally:
        release_lock(SWEEP_LOCK_NAME)

    return report.as_dict()
