from fastapi import APIRouter, BackgroundTasks, Depends

from ..background.tasks import flush_audit_backlog
from ..config.settings import Settings
from ..models import EngineResult, LoanApplication, SubmissionOutcome
from ..services.governance import GovernanceService
from .dependencies import get_service, get_settings

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=SubmissionOutcome, status_code=201)
async def submit_application(
    application: LoanApplication,
    background_tasks: BackgroundTasks,
    service: GovernanceService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    outcome = await service.submit(application)
    if outcome.audit_durable is False:
        background_tasks.add_task(
            flush_audit_backlog,
            service.audit_log,
            settings.AUDIT_RETRY_ATTEMPTS,
            settings.AUDIT_RETRY_BACKOFF_SECONDS,
        )
    return outcome


@router.post("/preview", response_model=EngineResult)
async def preview_application(application: LoanApplication, service: GovernanceService = Depends(get_service)):
    """Eligibility check: evaluates without queueing or auditing."""
    return await service.preview(application)
