"""
Redis 기반 실행 락 (중복 실행 방지)

Celery beat tick이 여러 워커에서 겹치지 않도록 SETNX 락을 건다.
- 키: lock:{name}
- TTL: tick 예상 시간보다 충분히 길게
- SETNX 실패 시 다른 워커가 실행 중 → 이번 tick 건너뜀
- 완료/실패 시 명시적 DEL
- Redis 미사용/장애 시 락 없이 진행 (attempt 단위 row lock이 최종 방어선)
"""

from __future__ import annotations

import logging

import redis

from libs.redis.client import get_redis_client

logger = logging.getLogger(__name__)

LOG_LOCK_SKIP = "LOCK_SKIP name=%s reason=held"
LOG_LOCK_ACQUIRED = "LOCK name=%s acquired"
LOG_LOCK_RELEASED = "LOCK name=%s released"

DEFAULT_LOCK_TTL_SECONDS = 300


def _key(name: str) -> str:
    return f"lock:{name}"


def acquire_lock(name: str, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> bool:
    """
    락 획득 (SET NX EX)

    Returns:
        True: 락 획득 성공 또는 Redis 미사용 → 진행
        False: 다른 실행이 락 보유 중
    """
    client = get_redis_client()
    if not client:
        return True

    try:
        ok = client.set(_key(name), "1", nx=True, ex=ttl_seconds)
        if ok:
            logger.debug(LOG_LOCK_ACQUIRED, name)
            return True
        logger.info(LOG_LOCK_SKIP, name)
        return False
    except redis.RedisError as e:
        logger.warning("Redis lock acquire failed, proceeding: %s", e)
        return True


def release_lock(name: str) -> None:
    client = get_redis_client()
    if not client:
        return

    try:
        client.delete(_key(name))
        logger.debug(LOG_LOCK_RELEASED, name)
    except redis.RedisError as e:
        # TTL 만료 시 자동 해제되므로 치명적이지 않음
        logger.warning("Redis lock release failed: %s", e)
