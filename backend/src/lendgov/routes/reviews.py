from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from ..background.tasks import flush_audit_backlog
from ..config.settings import Settings
from ..models import HumanDecision, ResolutionOutcome, ReviewQueueEntry
from ..services.governance import GovernanceService
from .dependencies import get_service, get_settings

router = APIRouter(prefix="/reviews", tags=["Reviews"])

NO_JUSTIFICATION = "No justification provided."


class ClaimRequest(BaseModel):
    reviewer: str = Field(..., min_length=1)


class ResolveRequest(BaseModel):
    decision: HumanDecision
    justification: Optional[str] = None
    reviewer: Optional[str] = None


@router.get("", response_model=List[ReviewQueueEntry])
def list_reviews(service: GovernanceService = Depends(get_service)):
    return service.pending_reviews()


@router.get("/{application_id}", response_model=ReviewQueueEntry)
def get_review(application_id: str, service: GovernanceService = Depends(get_service)):
    return service.review_queue.get(application_id)


@router.post("/{application_id}/claim", response_model=ReviewQueueEntry)
def claim_review(application_id: str, request: ClaimRequest, service: GovernanceService = Depends(get_service)):
    return service.claim(application_id, request.reviewer)


@router.post("/{application_id}/resolve", response_model=ResolutionOutcome)
def resolve_review(
    application_id: str,
    request: ResolveRequest,
    background_tasks: BackgroundTasks,
    service: GovernanceService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    # An omitted justification gets a placeholder; an empty one is kept verbatim.
    justification = NO_JUSTIFICATION if request.justification is None else request.justification
    outcome = service.resolve(application_id, request.decision, justification, request.reviewer)
    if not outcome.audit_durable:
        background_tasks.add_task(
            flush_audit_backlog,
            service.audit_log,
            settings.AUDIT_RETRY_ATTEMPTS,
            settings.AUDIT_RETRY_BACKOFF_SECONDS,
        )
    return outcome
