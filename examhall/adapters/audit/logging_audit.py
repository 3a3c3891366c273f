"""
Audit Sink — logging 기반 (fire-and-forget)

logger "examhall.audit" 로 구조화 필드를 key=value 형태로 남긴다.
기록 실패는 호출자에게 전파하지 않는다.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger("examhall.audit")


def _format_fields(fields: dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in sorted(fields.items()))


class LoggingAuditSink:
    def __init__(self, target: Optional[logging.Logger] = None) -> None:
        self._logger = target or logger

    def record(self, event_name: str, **fields: Any) -> None:
        try:
            self._logger.info(
                "%s | %s",
                event_name,
                _format_fields(fields),
                extra={"audit_event": event_name, "audit_fields": fields},
            )
        except Exception as e:
            # audit 실패로 attempt 처리를 막지 않는다
            logging.getLogger(__name__).warning("Audit record failed (ignored): %s", e)
