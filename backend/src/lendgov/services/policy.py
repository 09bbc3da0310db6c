"""
Deterministic, configuration-driven policy rules.

evaluate() is pure and total: every application produces a PolicyResult and
every rule emits exactly one checklist entry, in a fixed order, whether it
passes or not, so checklists diff cleanly across evaluations.
"""
from dataclasses import dataclass
from typing import Callable, Optional

from ..models import ChecklistItem, Industry, LoanApplication, PolicyConfig, PolicyResult

REVENUE_FLOOR = 50_000
RESTRICTED_INDUSTRIES = frozenset({Industry.GAMBLING})


@dataclass(frozen=True)
class RuleOutcome:
    passed: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class PolicyRule:
    name: Callable[[PolicyConfig], str]
    check: Callable[[LoanApplication, PolicyConfig], RuleOutcome]


def _revenue_floor(app: LoanApplication, config: PolicyConfig) -> RuleOutcome:
    if app.revenue >= REVENUE_FLOOR:
        return RuleOutcome(True)
    return RuleOutcome(False, f"Annual Revenue below minimum threshold (${REVENUE_FLOOR // 1000}k)")


def _credit_floor(app: LoanApplication, config: PolicyConfig) -> RuleOutcome:
    if app.credit_score >= config.min_credit_score:
        return RuleOutcome(True)
    return RuleOutcome(False, f"Credit Score ({app.credit_score}) below policy minimum")


def _restricted_industry(app: LoanApplication, config: PolicyConfig) -> RuleOutcome:
    if config.strict_industry_checking and app.industry in RESTRICTED_INDUSTRIES:
        return RuleOutcome(False, f"Industry '{app.industry.value}' is restricted")
    return RuleOutcome(True)


DEFAULT_RULES: tuple[PolicyRule, ...] = (
    PolicyRule(lambda _: f"Min Revenue >= ${REVENUE_FLOOR // 1000}k", _revenue_floor),
    PolicyRule(lambda cfg: f"Credit Score >= {cfg.min_credit_score}", _credit_floor),
    PolicyRule(lambda _: "Restricted Industry Check", _restricted_industry),
)


def evaluate(
    application: LoanApplication,
    config: PolicyConfig,
    rules: tuple[PolicyRule, ...] = DEFAULT_RULES,
) -> PolicyResult:
    checklist = []
    reasons = []
    for rule in rules:
        outcome = rule.check(application, config)
        checklist.append(ChecklistItem(rule=rule.name(config), passed=outcome.passed))
        if not outcome.passed and outcome.reason:
            reasons.append(outcome.reason)

    return PolicyResult(
        passed=all(item.passed for item in checklist),
        checklist=checklist,
        reasons=reasons,
    )
