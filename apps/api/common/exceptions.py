# apps/api/common/exceptions.py
"""
DRF EXCEPTION_HANDLER

- AttemptDomainError 계열 → status_code / code 그대로 {"detail", "code"}
- DatabaseError → 500 internal (원문 메시지는 로그에만)
- 그 외(DRF ValidationError, 인증/권한 등)는 DRF 기본 처리
"""
from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from examhall.domain.attempts.errors import AttemptDomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    if isinstance(exc, AttemptDomainError):
        if exc.status_code >= 500:
            logger.error("Domain internal error: %s | details=%s", exc.message, exc.details)
        else:
            logger.info("Domain error %s: %s", exc.code, exc.message)
        return Response({"detail": exc.message, "code": exc.code}, status=exc.status_code)

    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling request")
        return Response(
            {"detail": "Database error.", "code": "internal"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return exception_handler(exc, context)
