"""
Redis 보호 레이어

DB(row lock)가 attempt 상태의 단일 진실.
Redis는 sweeper tick 중복 실행 방지 목적으로만 사용. 장애 시 락 없이 진행.
"""

from libs.redis.client import get_redis_client
from libs.redis.locks import acquire_lock, release_lock

__all__ = [
    "get_redis_client",
    "acquire_lock",
    "release_lock",
]
