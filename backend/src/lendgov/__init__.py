"""Lending governance decision engine."""
from .exceptions import (
    AlreadyClaimed,
    AuditUnavailable,
    AuditWriteFailure,
    DuplicateApplication,
    DuplicateEnqueue,
    GovernanceError,
    InvalidApplication,
    NotFound,
    SignalUnavailable,
)
from .models import (
    AuditRecord,
    ContentResult,
    Disposition,
    EngineResult,
    HumanDecision,
    Industry,
    LoanApplication,
    PolicyConfig,
    PolicyResult,
    ReviewQueueEntry,
    RiskResult,
    parse_application,
)

__version__ = "0.1.0"

__all__ = [
    "AlreadyClaimed",
    "AuditRecord",
    "AuditUnavailable",
    "AuditWriteFailure",
    "ContentResult",
    "Disposition",
    "DuplicateApplication",
    "DuplicateEnqueue",
    "EngineResult",
    "GovernanceError",
    "HumanDecision",
    "Industry",
    "InvalidApplication",
    "LoanApplication",
    "NotFound",
    "PolicyConfig",
    "PolicyResult",
    "ReviewQueueEntry",
    "RiskResult",
    "SignalUnavailable",
    "parse_application",
]
