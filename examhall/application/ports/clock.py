"""
Clock 포트 — 현재 시각 (테스트에서 고정/전진 가능한 구현으로 교체)
"""
from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """timezone-aware 현재 시각 (UTC)."""
        ...
