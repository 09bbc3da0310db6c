import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from ..exceptions import SignalUnavailable
from ..models import EngineResult, LoanApplication, PolicyConfig
from . import policy as policy_rules
from .arbitration import decide
from .content import ContentAnalyzer
from .risk import RiskEstimator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DecisionEngine:
    """
    Fan-out / fan-in evaluation of one application.

    Policy runs locally. Risk and content run concurrently, each bounded by
    signal_timeout; any failure or timeout aborts the evaluation with
    SignalUnavailable instead of substituting a default signal.
    """

    def __init__(
        self,
        risk_estimator: RiskEstimator,
        content_analyzer: ContentAnalyzer,
        signal_timeout: Optional[float] = 5.0,
    ):
        self.risk_estimator = risk_estimator
        self.content_analyzer = content_analyzer
        self.signal_timeout = signal_timeout

    async def evaluate(self, application: LoanApplication, config: PolicyConfig) -> EngineResult:
        policy = policy_rules.evaluate(application, config)

        risk_task = asyncio.ensure_future(
            self._collect("risk", self.risk_estimator.estimate(application), application.id)
        )
        content_task = asyncio.ensure_future(
            self._collect("content", self.content_analyzer.analyze(application), application.id)
        )
        try:
            risk, content = await asyncio.gather(risk_task, content_task)
        except SignalUnavailable:
            for task in (risk_task, content_task):
                task.cancel()
            raise

        disposition = decide(policy, risk, content, config, application)
        logger.info(
            f"Evaluated {application.id}: policy={'PASS' if policy.passed else 'FAIL'} "
            f"risk={risk.level.value} flags={len(content.flags)} -> {disposition.value}"
        )
        return EngineResult(
            application_id=application.id,
            policy=policy,
            risk=risk,
            content=content,
            final_status=disposition,
        )

    async def _collect(self, signal: str, pending: Awaitable[T], application_id: str) -> T:
        try:
            return await asyncio.wait_for(pending, timeout=self.signal_timeout)
        except asyncio.TimeoutError as exc:
            logger.error(f"{signal} signal timed out after {self.signal_timeout}s for {application_id}")
            raise SignalUnavailable(signal, f"{signal} signal timed out", application_id) from exc
        except Exception as exc:
            logger.error(f"{signal} signal failed for {application_id}: {exc}")
            raise SignalUnavailable(signal, f"{signal} signal failed: {exc}", application_id) from exc
