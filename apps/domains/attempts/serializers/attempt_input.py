# apps/domains/attempts/serializers/attempt_input.py
"""
요청 입력 검증 (형식만). 상태/존재 여부 검증은 상태 머신이 한다.
"""
from rest_framework import serializers


class StartAttemptSerializer(serializers.Serializer):
    exam_id = serializers.UUIDField()
    # 관리자가 대리 시작할 때만 사용 (기본: 로그인 사용자)
    user_id = serializers.CharField(max_length=64, required=False)
    device_info = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    metadata = serializers.DictField(required=False)


class ExtendTimeSerializer(serializers.Serializer):
    extra_seconds = serializers.IntegerField(min_value=1)


class AnswerInputSerializer(serializers.Serializer):
    question_id = serializers.CharField(max_length=64)
    # 빈 값/누락 = 무응답 (유효)
    submitted_value = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    time_spent = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)


class AnswersBulkSerializer(serializers.Serializer):
    answers = AnswerInputSerializer(many=True, allow_empty=False)


class TerminateAttemptSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    cheating_detected = serializers.BooleanField(required=False, default=False)
