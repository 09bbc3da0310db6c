from fastapi import Request

from ..config.settings import Settings
from ..services.governance import GovernanceService


def get_service(request: Request) -> GovernanceService:
    return request.app.state.service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
