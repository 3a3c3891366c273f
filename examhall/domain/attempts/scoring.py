"""
채점 정책 — 순수 파이썬

- 정답 판정: 앞뒤 공백 제거 + 대소문자 무시 완전 일치 (부분 점수/수치 허용오차 없음)
- 문항 점수: 정답이면 score_weight, 아니면 0
- 총점: 가중치 문항이 하나라도 있으면 문항 점수 합, 없으면 정답률(%)
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from examhall.domain.attempts.entities import Attempt, QuestionKey

ZERO = Decimal("0")
HUNDRED = Decimal("100")
SCORE_QUANTUM = Decimal("0.01")


def normalize_answer(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def quantize_score(value: Decimal) -> Decimal:
    return Decimal(value).quantize(SCORE_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Evaluation:
    is_correct: bool
    score: Decimal
    max_score: Optional[Decimal]


@dataclass(frozen=True)
class AttemptStats:
    correct: int
    incorrect: int
    total: int
    score: Decimal
    percentage: Decimal


class ScoringEngine:
    """문항 단위 판정 + attempt 단위 집계. Question은 읽기만 한다."""

    def evaluate(self, question: QuestionKey, submitted_value: Optional[str]) -> Evaluation:
        ans = normalize_answer(submitted_value)
        cor = normalize_answer(question.correct_answer)

        # 빈 답안은 "무응답"으로 기록되지만 정답이 될 수 없음
        is_correct = ans != "" and ans == cor

        weight = question.score_weight
        if weight is None:
            return Evaluation(is_correct=is_correct, score=ZERO, max_score=None)

        weight = Decimal(weight)
        return Evaluation(
            is_correct=is_correct,
            score=(weight if is_correct else ZERO),
            max_score=weight,
        )

    def is_weighted(self, attempt: Attempt) -> bool:
        return any(a.max_score is not None for a in attempt.answers.values())

    def percentage(self, attempt: Attempt) -> Decimal:
        correct = sum(1 for a in attempt.answers.values() if a.is_correct)
        total = max(1, attempt.answered_count())
        return quantize_score(Decimal(correct) * HUNDRED / Decimal(total))

    def aggregate(self, attempt: Attempt) -> Decimal:
        if self.is_weighted(attempt):
            return quantize_score(sum((a.score for a in attempt.answers.values()), ZERO))
        return self.percentage(attempt)

    def stats(self, attempt: Attempt) -> AttemptStats:
        total = attempt.answered_count()
        correct = sum(1 for a in attempt.answers.values() if a.is_correct)
        return AttemptStats(
            correct=correct,
            incorrect=total - correct,
            total=total,
            score=quantize_score(sum((a.score for a in attempt.answers.values()), ZERO)),
            percentage=self.percentage(attempt),
        )
