from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models import PolicyConfig
from ..services.governance import GovernanceService
from .dependencies import get_service

router = APIRouter(prefix="/config", tags=["Config"])


class PolicyConfigUpdate(BaseModel):
    min_credit_score: Optional[int] = None
    max_loan_amount: Optional[int] = None
    ai_confidence_threshold: Optional[int] = None
    strict_industry_checking: Optional[bool] = None


@router.get("", response_model=PolicyConfig)
def get_config(service: GovernanceService = Depends(get_service)):
    return service.config_store.current()


@router.patch("", response_model=PolicyConfig)
def update_config(update: PolicyConfigUpdate, service: GovernanceService = Depends(get_service)):
    return service.config_store.update(**update.model_dump(exclude_unset=True))


@router.post("/reset", response_model=PolicyConfig)
def reset_config(service: GovernanceService = Depends(get_service)):
    return service.config_store.reset()
