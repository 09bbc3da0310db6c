from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..models import BatchStats
from ..services.batch import BatchRunner
from ..services.governance import GovernanceService
from .dependencies import get_service

router = APIRouter(prefix="/batch", tags=["Simulation"])


class BatchRequest(BaseModel):
    count: int = Field(100, ge=1, le=10_000)


@router.post("", response_model=BatchStats)
async def run_batch(request: BatchRequest, service: GovernanceService = Depends(get_service)):
    """Pre-human disposition mix of synthetic applications under the current policy."""
    runner = BatchRunner(service.engine)
    return await runner.run(request.count, service.config_store.current())
