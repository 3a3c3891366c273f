# apps/api/config/settings/worker.py

from .base import *
import os

# 워커는 URLConf 불필요
ROOT_URLCONF = None

# ==================================================
# Celery (워커 필수)
# ==================================================

CELERY_BROKER_URL = os.environ["CELERY_BROKER_URL"]
CELERY_RESULT_BACKEND = os.environ["CELERY_RESULT_BACKEND"]

# sweeper tick 락은 Redis 설정이 있어야 동작 (없으면 락 없이 진행)
if not (REDIS_URL or REDIS_HOST):
    import logging
    logging.getLogger(__name__).warning("REDIS_HOST not set: overdue sweep runs without tick lock")
