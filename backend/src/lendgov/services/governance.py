import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from ..config.policy import PolicyConfigStore
from ..exceptions import DuplicateApplication
from ..models import (
    AuditRecord,
    Disposition,
    EngineResult,
    HumanDecision,
    ResolutionOutcome,
    ReviewQueueEntry,
    SubmissionOutcome,
    parse_application,
)
from .audit_log import AuditLog
from .engine import DecisionEngine
from .review_queue import ReviewQueue

logger = logging.getLogger(__name__)


class GovernanceService:
    """
    Application -> engine -> audit log or review queue.

    Every submitted application yields exactly one EngineResult and,
    eventually, exactly one AuditRecord: ids are reserved while in flight
    and rejected once pending or audited.
    """

    def __init__(
        self,
        engine: DecisionEngine,
        config_store: Optional[PolicyConfigStore] = None,
        review_queue: Optional[ReviewQueue] = None,
        audit_log: Optional[AuditLog] = None,
    ):
        self.engine = engine
        self.config_store = config_store or PolicyConfigStore()
        self.review_queue = review_queue or ReviewQueue()
        self.audit_log = audit_log or AuditLog()
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    @contextmanager
    def _reserve(self, application_id: str) -> Iterator[None]:
        with self._lock:
            if application_id in self._in_flight or application_id in self.review_queue:
                raise self._duplicate(application_id)
            self._in_flight.add(application_id)
        try:
            # Store lookup runs outside the lock; AuditUnavailable propagates.
            if self.audit_log.contains(application_id):
                raise self._duplicate(application_id)
            yield
        finally:
            with self._lock:
                self._in_flight.discard(application_id)

    @staticmethod
    def _duplicate(application_id: str) -> DuplicateApplication:
        return DuplicateApplication("application id has already been submitted", application_id=application_id)

    async def preview(self, application: Any) -> EngineResult:
        """Evaluate without recording anything (applicant eligibility check)."""
        app = parse_application(application)
        return await self.engine.evaluate(app, self.config_store.current())

    async def submit(self, application: Any) -> SubmissionOutcome:
        app = parse_application(application)
        with self._reserve(app.id):
            config = self.config_store.current()
            result = await self.engine.evaluate(app, config)

            if result.final_status is Disposition.HITL_REVIEW:
                self.review_queue.enqueue(result, app, config)
                return SubmissionOutcome(result=result, queued=True)

            durable = self.audit_log.append(AuditRecord.from_result(result, app))
            if not durable:
                logger.warning(f"Disposition for {app.id} held until its audit record is written")
            return SubmissionOutcome(result=result, queued=False, audit_durable=durable)

    def pending_reviews(self) -> list[ReviewQueueEntry]:
        return self.review_queue.pending()

    def claim(self, application_id: str, reviewer: str) -> ReviewQueueEntry:
        return self.review_queue.claim(application_id, reviewer)

    def resolve(
        self,
        application_id: str,
        decision: HumanDecision,
        justification: str,
        reviewer: Optional[str] = None,
    ) -> ResolutionOutcome:
        # The id stays reserved from leaving the queue until its record is in
        # the audit log or its backlog; the store write runs outside the lock.
        with self._lock:
            record = self.review_queue.resolve(application_id, HumanDecision(decision), justification, reviewer)
            self._in_flight.add(application_id)
        try:
            durable = self.audit_log.append(record)
        finally:
            with self._lock:
                self._in_flight.discard(application_id)
        if not durable:
            logger.warning(f"Resolution for {application_id} held until its audit record is written")
        return ResolutionOutcome(record=record, audit_durable=durable)
