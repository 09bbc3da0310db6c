from .arbitration import decide, human_disagrees, natural_disposition
from .audit_log import AuditLog, AuditQuery, InMemoryAuditStore
from .batch import BatchRunner
from .content import ContentAnalyzer, KeywordContentAnalyzer, LlmContentAnalyzer
from .engine import DecisionEngine
from .governance import GovernanceService
from .policy import evaluate
from .review_queue import ReviewQueue
from .risk import HttpRiskEstimator, RiskEstimator, SimulatedRiskEstimator

__all__ = [
    "AuditLog",
    "AuditQuery",
    "BatchRunner",
    "ContentAnalyzer",
    "DecisionEngine",
    "GovernanceService",
    "HttpRiskEstimator",
    "InMemoryAuditStore",
    "KeywordContentAnalyzer",
    "LlmContentAnalyzer",
    "ReviewQueue",
    "RiskEstimator",
    "SimulatedRiskEstimator",
    "decide",
    "evaluate",
    "human_disagrees",
    "natural_disposition",
]
