"""
Batch simulation over synthetic applications.

Counts are pre-human dispositions only: arbitration never auto-declines, and
anything a reviewer later declines still counts here as HITL_REVIEW. Nothing
is enqueued or written to the audit log.
"""
import asyncio
import logging
from typing import Callable, Optional

from ..exceptions import SignalUnavailable
from ..models import BatchStats, Disposition, LoanApplication, PolicyConfig
from ..utils.synthetic import generate_application
from .engine import DecisionEngine

logger = logging.getLogger(__name__)


class BatchRunner:
    def __init__(
        self,
        engine: DecisionEngine,
        source: Callable[[], LoanApplication] = generate_application,
        concurrency: int = 16,
    ):
        self.engine = engine
        self.source = source
        self.concurrency = max(1, concurrency)

    async def run(self, count: int, config: PolicyConfig) -> BatchStats:
        if count < 0:
            raise ValueError("count must be non-negative")
        semaphore = asyncio.Semaphore(self.concurrency)

        async def one() -> Optional[Disposition]:
            async with semaphore:
                try:
                    result = await self.engine.evaluate(self.source(), config)
                except SignalUnavailable as exc:
                    logger.warning(f"Batch evaluation skipped: {exc}")
                    return None
                return result.final_status

        dispositions = await asyncio.gather(*(one() for _ in range(count)))
        stats = BatchStats(
            total=count,
            auto_approve=sum(d is Disposition.AUTO_APPROVE for d in dispositions),
            hitl_review=sum(d is Disposition.HITL_REVIEW for d in dispositions),
            failed=sum(d is None for d in dispositions),
        )
        logger.info(
            f"Batch of {count}: {stats.auto_approve} auto-approved, "
            f"{stats.hitl_review} to review, {stats.failed} failed"
        )
        return stats
