import logging
import threading
from typing import Optional

from ..exceptions import AlreadyClaimed, DuplicateEnqueue, NotFound
from ..models import (
    AuditRecord,
    Disposition,
    EngineResult,
    FeedbackLoop,
    FeedbackType,
    HumanDecision,
    HumanOverride,
    LoanApplication,
    PolicyConfig,
    ReviewClaim,
    ReviewQueueEntry,
)
from .arbitration import human_disagrees

logger = logging.getLogger(__name__)


def feedback_type_for(entry: ReviewQueueEntry, decision: HumanDecision) -> FeedbackType:
    # Approving past failed rules questions the policy, not the model.
    if decision is HumanDecision.APPROVED and not entry.result.policy.passed:
        return FeedbackType.POLICY_ADJUSTMENT
    return FeedbackType.MODEL_RETRAINING


class ReviewQueue:
    """
    Applications awaiting a human decision, keyed by application id.

    A single queue-wide lock makes enqueue/resolve linearizable: resolve is a
    compare-and-remove on presence, so at most one resolution per id succeeds
    and none can complete before its enqueue.
    """

    def __init__(self):
        self._entries: dict[str, ReviewQueueEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, application_id: object) -> bool:
        with self._lock:
            return application_id in self._entries

    def enqueue(self, result: EngineResult, application: LoanApplication, config: PolicyConfig) -> ReviewQueueEntry:
        if result.application_id != application.id:
            raise ValueError("engine result does not belong to this application")
        entry = ReviewQueueEntry(result=result, application=application, config=config)
        with self._lock:
            if application.id in self._entries:
                raise DuplicateEnqueue("application is already pending review", application_id=application.id)
            self._entries[application.id] = entry
        logger.info(f"Queued {application.id} for human review ({len(result.policy.reasons)} policy failures)")
        return entry

    def get(self, application_id: str) -> ReviewQueueEntry:
        with self._lock:
            entry = self._entries.get(application_id)
        if entry is None:
            raise NotFound("no pending review entry", application_id=application_id)
        return entry

    def pending(self) -> list[ReviewQueueEntry]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.enqueued_at)

    def claim(self, application_id: str, reviewer: str) -> ReviewQueueEntry:
        with self._lock:
            entry = self._entries.get(application_id)
            if entry is None:
                raise NotFound("no pending review entry", application_id=application_id)
            if entry.claim is not None and entry.claim.reviewer != reviewer:
                raise AlreadyClaimed(
                    f"entry is claimed by {entry.claim.reviewer}", application_id=application_id
                )
            if entry.claim is None:
                entry = entry.model_copy(update={"claim": ReviewClaim(reviewer=reviewer)})
                self._entries[application_id] = entry
        logger.info(f"{reviewer} claimed {application_id}")
        return entry

    def resolve(
        self,
        application_id: str,
        decision: HumanDecision,
        justification: str,
        reviewer: Optional[str] = None,
    ) -> AuditRecord:
        """Remove the pending entry and return its finalised AuditRecord."""
        with self._lock:
            entry = self._entries.get(application_id)
            if entry is None:
                raise NotFound("no pending review entry", application_id=application_id)
            if reviewer and entry.claim is not None and entry.claim.reviewer != reviewer:
                raise AlreadyClaimed(
                    f"entry is claimed by {entry.claim.reviewer}", application_id=application_id
                )
            del self._entries[application_id]

        result = entry.result
        triggered = human_disagrees(
            decision, result.risk, result.content, entry.config, entry.application.requested_amount
        )
        record = AuditRecord.from_result(
            result,
            entry.application,
            final_status=decision.disposition,
            human_override=HumanOverride(
                original_status=Disposition.HITL_REVIEW,
                final_decision=decision,
                justification=justification,
            ),
            feedback_loop=FeedbackLoop(triggered=triggered, type=feedback_type_for(entry, decision)),
        )
        logger.info(
            f"Resolved {application_id} as {decision.value}"
            + (" (feedback loop triggered)" if triggered else "")
        )
        return record
