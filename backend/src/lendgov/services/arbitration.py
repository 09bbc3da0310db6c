"""
Arbitration: combines policy, risk and content signals into a disposition.

Precedence, first match wins:
  1. policy failed                                   -> HITL_REVIEW
  2. risk Low, no content flags, amount within limit -> AUTO_APPROVE
  3. otherwise                                       -> HITL_REVIEW

AUTO_DECLINE is only reachable through human resolution of a queued entry.
"""
from ..models import (
    ContentResult,
    Disposition,
    HumanDecision,
    LoanApplication,
    PolicyConfig,
    PolicyResult,
    RiskLevel,
    RiskResult,
)


def natural_disposition(
    risk: RiskResult,
    content: ContentResult,
    config: PolicyConfig,
    requested_amount: float,
) -> Disposition:
    """Rules 2-3 only: what arbitration picks once policy has passed."""
    if (
        risk.level is RiskLevel.LOW
        and not content.flags
        and requested_amount <= config.max_loan_amount
    ):
        return Disposition.AUTO_APPROVE
    return Disposition.HITL_REVIEW


def decide(
    policy: PolicyResult,
    risk: RiskResult,
    content: ContentResult,
    config: PolicyConfig,
    application: LoanApplication,
) -> Disposition:
    if not policy.passed:
        return Disposition.HITL_REVIEW
    return natural_disposition(risk, content, config, application.requested_amount)


def human_disagrees(
    decision: HumanDecision,
    risk: RiskResult,
    content: ContentResult,
    config: PolicyConfig,
    requested_amount: float,
) -> bool:
    """True when the reviewer's outcome differs from the counterfactual auto-decision."""
    return decision.disposition is not natural_disposition(risk, content, config, requested_amount)
