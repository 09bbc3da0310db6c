import math

from pydantic import BaseModel, ConfigDict, Field, computed_field, ValidationError, field_validator, model_validator
from typing import Any, List, Mapping, Optional
from datetime import datetime, timezone
from enum import Enum

from .exceptions import InvalidApplication


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Industry(str, Enum):
    RETAIL = "Retail"
    TECH = "Technology"
    MANUFACTURING = "Manufacturing"
    HOSPITALITY = "Hospitality"
    GAMBLING = "Gambling"
    CONSTRUCTION = "Construction"
    LOGISTICS = "Logistics"


class Disposition(str, Enum):
    AUTO_APPROVE = "AUTO_APPROVE"
    AUTO_DECLINE = "AUTO_DECLINE"
    HITL_REVIEW = "HITL_REVIEW"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


class HumanDecision(str, Enum):
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"

    @property
    def disposition(self) -> Disposition:
        return Disposition.AUTO_APPROVE if self is HumanDecision.APPROVED else Disposition.AUTO_DECLINE


class FeedbackType(str, Enum):
    MODEL_RETRAINING = "MODEL_RETRAINING"
    POLICY_ADJUSTMENT = "POLICY_ADJUSTMENT"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class LoanApplication(_Frozen):
    """Input: business loan application. Never mutated after creation."""
    id: str = Field(..., min_length=1)
    business_name: str
    applicant_name: str
    revenue: float = Field(..., ge=0, description="Declared annual revenue")
    requested_amount: float = Field(..., gt=0)
    credit_score: int = Field(..., description="300-850 by convention, not enforced")
    industry: Industry
    description: str
    application_date: datetime

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("application id must not be blank")
        return value


def parse_application(payload: Any) -> LoanApplication:
    """Validate a raw mapping into a LoanApplication, raising InvalidApplication."""
    if isinstance(payload, LoanApplication):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidApplication("application payload must be a mapping")
    try:
        return LoanApplication.model_validate(dict(payload))
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidApplication(
            "application failed validation",
            application_id=payload.get("id") if isinstance(payload.get("id"), str) else None,
            details={"errors": errors},
        ) from exc


class PolicyConfig(_Frozen):
    """Operator-tunable policy knobs. Changes apply to later evaluations only."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    min_credit_score: int = Field(600, ge=300, le=850)
    max_loan_amount: int = Field(50000, gt=0)
    # Reserved: plumbed through but not consumed by arbitration.
    ai_confidence_threshold: int = Field(80, ge=0, le=100)
    strict_industry_checking: bool = True


class ChecklistItem(_Frozen):
    rule: str
    passed: bool


class PolicyResult(_Frozen):
    passed: bool
    checklist: List[ChecklistItem]
    reasons: List[str] = []


class ShapValue(_Frozen):
    """Single signed contribution to the risk score."""
    feature: str
    impact: float


def risk_level_for(probability_of_default: float) -> RiskLevel:
    if probability_of_default < 0.2:
        return RiskLevel.LOW
    if probability_of_default > 0.6:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM


class RiskResult(_Frozen):
    score: int = Field(..., ge=0, le=100)
    probability_of_default: float = Field(..., ge=0.0, le=1.0, allow_inf_nan=False)
    level: RiskLevel
    shap_values: List[ShapValue] = []

    @field_validator("shap_values")
    @classmethod
    def _rank_by_impact(cls, values: List[ShapValue]) -> List[ShapValue]:
        return sorted(values, key=lambda v: abs(v.impact), reverse=True)

    @classmethod
    def from_probability(cls, probability_of_default: float, shap_values: List[ShapValue]) -> "RiskResult":
        """Score and level come from the unrounded PD; only the stored PD is rounded."""
        pd = probability_of_default
        if not math.isfinite(pd) or not 0.0 <= pd <= 1.0:
            raise ValueError(f"probability of default must be within [0, 1], got {pd!r}")
        return cls(
            score=math.floor(round((1 - pd) * 100, 9)),
            probability_of_default=round(pd, 3),
            level=risk_level_for(pd),
            shap_values=shap_values,
        )


class ContentResult(_Frozen):
    """Semantic analysis of the free-text purpose description."""
    summary: str
    flags: List[str] = []
    sentiment: Sentiment
    reasoning: str

    @model_validator(mode="after")
    def _sentiment_matches_flags(self) -> "ContentResult":
        if (self.sentiment is Sentiment.POSITIVE) == bool(self.flags):
            raise ValueError("sentiment must be Positive exactly when there are no flags")
        return self


class EngineResult(_Frozen):
    application_id: str
    policy: PolicyResult
    risk: RiskResult
    content: ContentResult
    final_status: Disposition
    timestamp: datetime = Field(default_factory=utcnow)


class HumanOverride(_Frozen):
    original_status: Disposition
    final_decision: HumanDecision
    justification: str
    timestamp: datetime = Field(default_factory=utcnow)


class FeedbackLoop(_Frozen):
    triggered: bool
    type: FeedbackType


class AuditRecord(EngineResult):
    """Finalised decision. Corrections append a new record, never edit one."""
    application: LoanApplication
    human_override: Optional[HumanOverride] = None
    feedback_loop: Optional[FeedbackLoop] = None
    recorded_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_result(cls, result: EngineResult, application: LoanApplication, **extra: Any) -> "AuditRecord":
        return cls(**{**dict(result), **extra}, application=application)


class ReviewClaim(_Frozen):
    reviewer: str
    claimed_at: datetime = Field(default_factory=utcnow)


class ReviewQueueEntry(_Frozen):
    result: EngineResult
    application: LoanApplication
    config: PolicyConfig
    claim: Optional[ReviewClaim] = None
    enqueued_at: datetime = Field(default_factory=utcnow)

    @property
    def application_id(self) -> str:
        return self.result.application_id


class SubmissionOutcome(_Frozen):
    result: EngineResult
    queued: bool
    audit_durable: Optional[bool] = None


class ResolutionOutcome(_Frozen):
    record: AuditRecord
    audit_durable: bool


class BatchStats(_Frozen):
    """Pre-human disposition counts; human resolutions are not reflected."""
    total: int
    auto_approve: int
    hitl_review: int
    failed: int = 0

    @computed_field
    @property
    def approval_rate(self) -> float:
        return self.auto_approve / self.total if self.total else 0.0

    @computed_field
    @property
    def review_rate(self) -> float:
        return self.hitl_review / self.total if self.total else 0.0
