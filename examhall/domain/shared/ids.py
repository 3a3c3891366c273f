"""
도메인 공통: ID 생성 (외부 라이브러리 없음)
"""
from __future__ import annotations

import uuid


def generate_attempt_id() -> str:
    """Attempt 식별자 (UUID4 문자열, 생성 후 불변)."""
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """로그/추적용 짧은 요청 ID."""
    return str(uuid.uuid4())[:8]
