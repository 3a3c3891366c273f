"""
Audit 포트 — fire-and-forget 이벤트 기록
"""
from __future__ import annotations

from typing import Any, Protocol


class AuditSink(Protocol):
    """구현체는 절대 예외를 호출자에게 올리지 않는다."""

    def record(self, event_name: str, **fields: Any) -> None:
        ...
