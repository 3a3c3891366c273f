# PATH: apps/domains/attempts/views/attempt_views.py
"""
Attempt 생명주기 API (thin)

- 입력 형식 검증: serializers.attempt_input
- 상태/시간/채점 규칙: examhall AttemptStateMachine
- 도메인 오류 → HTTP 변환: apps.api.common.exceptions.domain_exception_handler
"""
from __future__ import annotations

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.domains.attempts.permissions import (
    IsAdminOrStaff,
    IsAttemptOwnerOrStaff,
    is_admin_user,
)
from apps.domains.attempts.serializers.attempt import (
    AnswerSerializer,
    AttemptSerializer,
    AttemptStatsSerializer,
)
from apps.domains.attempts.serializers.attempt_input import (
    AnswerInputSerializer,
    AnswersBulkSerializer,
    ExtendTimeSerializer,
    StartAttemptSerializer,
    TerminateAttemptSerializer,
)
from apps.domains.attempts.services.wiring import build_state_machine
from examhall.adapters.db.django.repositories_exams import exam_policy_get
from examhall.adapters.db.django.uow import DjangoUnitOfWork
from examhall.application.use_cases.attempts.attempt_queries import (
    attempt_stats,
    list_active_attempts,
    list_completed_attempts,
)
from examhall.domain.attempts.errors import AttemptNotFoundError, InvalidArgumentError

logger = logging.getLogger(__name__)


def _client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()[:45] or None
    return (request.META.get("REMOTE_ADDR") or "")[:45] or None


def _attempt_response(attempt, http_status=status.HTTP_200_OK) -> Response:
    serializer = AttemptSerializer(attempt, context={"now": timezone.now()})
    return Response(serializer.data, status=http_status)


class _AttemptBaseView(APIView):
    permission_classes = [IsAuthenticated, IsAttemptOwnerOrStaff]

    def get_state_machine(self):
        return build_state_machine()

    def get_attempt_checked(self, state_machine, attempt_id):
        """소유권 확인 (없으면 404, 남의 attempt면 403)."""
        attempt = state_machine.get(attempt_id)
        self.check_object_permissions(self.request, attempt)
        return attempt


class AttemptStartView(APIView):
    """
    POST /attempts/
    시험 설정(duration_seconds / max_attempts)은 Exam에서 읽는다.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = StartAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        policy = exam_policy_get(data["exam_id"])
        if policy is None:
            raise AttemptNotFoundError(f"Exam not found: {data['exam_id']}", exam_id=str(data["exam_id"]))
        if not policy.duration_seconds:
            raise InvalidArgumentError("Exam has no configured duration.", exam_id=policy.exam_id)

        user_id = str(request.user.pk)
        if data.get("user_id") and is_admin_user(request.user):
            user_id = data["user_id"]

        attempt = build_state_machine().start(
            user_id,
            policy.exam_id,
            policy.duration_seconds,
            max_attempts=policy.max_attempts,
            device_info=(data.get("device_info") or request.META.get("HTTP_USER_AGENT", "")[:255] or None),
            ip_address=_client_ip(request),
            metadata=data.get("metadata") or {},
        )
        return _attempt_response(attempt, status.HTTP_201_CREATED)


class AttemptDetailView(_AttemptBaseView):
    def get(self, request, attempt_id):
        attempt = self.get_attempt_checked(self.get_state_machine(), attempt_id)
        return _attempt_response(attempt)


class AttemptPauseView(_AttemptBaseView):
    def post(self, request, attempt_id):
        sm = self.get_state_machine()
        self.get_attempt_checked(sm, attempt_id)
        return _attempt_response(sm.pause(attempt_id))


class AttemptResumeView(_AttemptBaseView):
    def post(self, request, attempt_id):
        sm = self.get_state_machine()
        self.get_attempt_checked(sm, attempt_id)
        return _attempt_response(sm.resume(attempt_id))


class AttemptExtendTimeView(_AttemptBaseView):
    """시간 연장은 관리자만."""
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request, attempt_id):
        serializer = ExtendTimeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sm = self.get_state_machine()
        attempt = sm.extend_time(attempt_id, serializer.validated_data["extra_seconds"])
        return _attempt_response(attempt)


class AttemptAnswersView(_AttemptBaseView):
    """
    POST: 답안 1건 기록
    PUT : 자동 저장 (여러 답안, 전부 성공 또는 전부 실패)
    """

    def post(self, request, attempt_id):
        serializer = AnswerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        sm = self.get_state_machine()
        self.get_attempt_checked(sm, attempt_id)
        answer = sm.record_answer(
            attempt_id,
            data["question_id"],
            data.get("submitted_value"),
            time_spent=data.get("time_spent"),
        )
        return Response(AnswerSerializer(answer).data, status=status.HTTP_200_OK)

    def put(self, request, attempt_id):
        serializer = AnswersBulkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sm = self.get_state_machine()
        self.get_attempt_checked(sm, attempt_id)
        answers = sm.record_answers(attempt_id, serializer.validated_data["answers"])
        logger.info("Exam attempt auto-saved | attempt_id=%s total_answers=%s", attempt_id, len(answers))
        return Response(
            {
                "total_answers": len(answers),
                "answers": AnswerSerializer(answers, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class AttemptSubmitView(_AttemptBaseView):
    def post(self, request, attempt_id):
        sm = self.get_state_machine()
        self.get_attempt_checked(sm, attempt_id)
        return _attempt_response(sm.submit(attempt_id))


class AttemptTerminateView(_AttemptBaseView):
    """관리자 강제 종료 (부정행위 등)."""
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request, attempt_id):
        serializer = TerminateAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        attempt = self.get_state_machine().terminate(
            attempt_id,
            reason=data.get("reason"),
            cheating_detected=data.get("cheating_detected", False),
        )
        return _attempt_response(attempt)


class AttemptStatsView(_AttemptBaseView):
    def get(self, request, attempt_id):
        sm = self.get_state_machine()
        self.get_attempt_checked(sm, attempt_id)
        stats = attempt_stats(DjangoUnitOfWork(), attempt_id, scoring=sm.scoring)
        return Response(AttemptStatsSerializer(stats).data, status=status.HTTP_200_OK)


class MyActiveAttemptsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        attempts = list_active_attempts(DjangoUnitOfWork(), request.user.pk)
        serializer = AttemptSerializer(attempts, many=True, context={"now": timezone.now()})
        return Response(serializer.data, status=status.HTTP_200_OK)


class MyCompletedAttemptsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        attempts = list_completed_attempts(DjangoUnitOfWork(), request.user.pk)
        serializer = AttemptSerializer(attempts, many=True, context={"now": timezone.now()})
        return Response(serializer.data, status=status.HTTP_200_OK)
