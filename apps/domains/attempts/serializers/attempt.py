# apps/domains/attempts/serializers/attempt.py
"""
Attempt 응답 직렬화 — 도메인 엔티티(Attempt/Answer) 기준 (ModelSerializer 아님)
"""
from rest_framework import serializers


class AnswerSerializer(serializers.Serializer):
    question_id = serializers.CharField()
    submitted_value = serializers.CharField(allow_blank=True)
    is_correct = serializers.BooleanField()
    score = serializers.DecimalField(max_digits=7, decimal_places=2)
    max_score = serializers.DecimalField(max_digits=7, decimal_places=2, allow_null=True)
    time_spent = serializers.IntegerField(allow_null=True)
    submitted_at = serializers.DateTimeField(allow_null=True)


class AttemptSerializer(serializers.Serializer):
    id = serializers.CharField(source="attempt_id")
    user_id = serializers.CharField()
    exam_id = serializers.CharField()
    attempt_number = serializers.IntegerField()
    status = serializers.SerializerMethodField()

    start_time = serializers.DateTimeField(allow_null=True)
    end_time = serializers.DateTimeField(allow_null=True)
    remaining_time = serializers.IntegerField()
    time_left = serializers.SerializerMethodField()
    total_duration = serializers.IntegerField(allow_null=True)

    score = serializers.DecimalField(max_digits=7, decimal_places=2, allow_null=True)
    correct_answers = serializers.IntegerField()
    wrong_answers = serializers.IntegerField()
    answers = serializers.SerializerMethodField()

    last_question_id = serializers.CharField(allow_null=True)
    cheating_detected = serializers.BooleanField()
    device_info = serializers.CharField(allow_null=True)
    ip_address = serializers.CharField(allow_null=True)
    metadata = serializers.DictField()

    created_at = serializers.DateTimeField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)

    def get_status(self, obj) -> str:
        return obj.status.value

    def get_time_left(self, obj) -> int:
        """진행 중이면 현재 구간 경과를 뺀 값, 아니면 remaining_time."""
        now = self.context.get("now")
        if now is None:
            return obj.remaining_time
        return obj.time_left(now)

    def get_answers(self, obj) -> list:
        return AnswerSerializer(list(obj.answers.values()), many=True).data


class AttemptStatsSerializer(serializers.Serializer):
    correct = serializers.IntegerField()
    incorrect = serializers.IntegerField()
    total = serializers.IntegerField()
    score = serializers.DecimalField(max_digits=9, decimal_places=2)
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
