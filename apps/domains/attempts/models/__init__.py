# apps/domains/attempts/models/__init__.py

from .exam_attempt import ExamAttempt
from .attempt_answer import AttemptAnswer

__all__ = [
    "ExamAttempt",
    "AttemptAnswer",
]
