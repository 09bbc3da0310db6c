from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends

from ..models import AuditRecord, Disposition
from ..services.governance import GovernanceService
from .dependencies import get_service

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=List[AuditRecord])
def query_audit(
    disposition: Optional[Disposition] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    application_id: Optional[str] = None,
    service: GovernanceService = Depends(get_service),
):
    return service.audit_log.query(
        disposition=disposition, since=since, until=until, application_id=application_id
    )


@router.get("/backlog")
def audit_backlog(service: GovernanceService = Depends(get_service)):
    return {"pending": service.audit_log.backlog_size}
