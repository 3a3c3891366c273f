"""
Redis 클라이언트 (sweeper tick 락 전용)

설정: settings.REDIS_URL 이 있으면 우선, 없으면 REDIS_HOST / PORT / PASSWORD / DB.
미설정 또는 연결 실패 시 None → 호출부는 락 없이 진행 (attempt row lock이 최종 방어선).
연결 실패는 프로세스 수명 동안 기억한다 (tick마다 재시도하지 않음).
"""

from __future__ import annotations

import logging
from typing import Optional

import redis
from django.conf import settings

logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None
_disabled = False

_TIMEOUTS = {"socket_timeout": 5, "socket_connect_timeout": 5}


def _connect() -> Optional[redis.Redis]:
    url = getattr(settings, "REDIS_URL", None)
    if url:
        return redis.Redis.from_url(url, decode_responses=True, **_TIMEOUTS)

    host = getattr(settings, "REDIS_HOST", None)
    if not host:
        return None
    return redis.Redis(
        host=host,
        port=int(getattr(settings, "REDIS_PORT", 6379)),
        password=getattr(settings, "REDIS_PASSWORD", None) or None,
        db=int(getattr(settings, "REDIS_DB", 0)),
        decode_responses=True,
        **_TIMEOUTS,
    )


def get_redis_client() -> Optional[redis.Redis]:
    global _client, _disabled

    if _disabled:
        return None
    if _client is not None:
        return _client

    client = _connect()
    if client is None:
        logger.debug("Redis not configured, sweep lock disabled")
        _disabled = True
        return None

    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning("Redis connection failed, sweep runs without lock: %s", e)
        _disabled = True
        return None

    _client = client
    return client
