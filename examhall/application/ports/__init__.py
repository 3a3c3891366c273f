from examhall.application.ports.audit import AuditSink
from examhall.application.ports.clock import Clock
from examhall.application.ports.repositories import AttemptRepository, QuestionLookup
from examhall.application.ports.unit_of_work import UnitOfWork

__all__ = [
    "AuditSink",
    "Clock",
    "AttemptRepository",
    "QuestionLookup",
    "UnitOfWork",
]
