import argparse
import logging
import logging.config
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .client.openai_client import get_openai_client
from .config.policy import InvalidPolicyConfig, PolicyConfigStore
from .config.settings import Settings, settings as default_settings
from .database.audit_store import SqlAuditStore
from .exceptions import (
    AlreadyClaimed,
    AuditUnavailable,
    DuplicateApplication,
    GovernanceError,
    InvalidApplication,
    NotFound,
    SignalUnavailable,
)
from .models import PolicyConfig
from .routes import applications, audit, batch, config, reviews
from .services.audit_log import AuditLog
from .services.content import KeywordContentAnalyzer, LlmContentAnalyzer
from .services.engine import DecisionEngine
from .services.governance import GovernanceService
from .services.risk import HttpRiskEstimator, SimulatedRiskEstimator

logger = logging.getLogger("lendgov")

# ========================= LOGGING =========================


def configure_logging(settings: Settings) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "simple"},
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "simple",
                "filename": settings.LOG_FILE,
                "maxBytes": 10_000_000,
                "backupCount": 5,
            },
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console", "file"]},
    })


# ========================= WIRING =========================


def build_service(settings: Settings) -> GovernanceService:
    if settings.RISK_BACKEND == "http":
        risk = HttpRiskEstimator(settings.RISK_SERVICE_URL, timeout=settings.SIGNAL_TIMEOUT_SECONDS)
    else:
        risk = SimulatedRiskEstimator()

    if settings.CONTENT_BACKEND == "llm":
        content = LlmContentAnalyzer(get_openai_client(settings.LLM_API_BASE_URL), model=settings.LLM_MODEL)
    else:
        content = KeywordContentAnalyzer()

    if settings.DATABASE_URL:
        audit_log = AuditLog(SqlAuditStore(settings.DATABASE_URL))
    else:
        logger.warning("DATABASE_URL not set - audit trail is kept in memory only")
        audit_log = AuditLog()

    defaults = PolicyConfig(
        min_credit_score=settings.MIN_CREDIT_SCORE,
        max_loan_amount=settings.MAX_LOAN_AMOUNT,
        ai_confidence_threshold=settings.AI_CONFIDENCE_THRESHOLD,
        strict_industry_checking=settings.STRICT_INDUSTRY_CHECKING,
    )
    return GovernanceService(
        engine=DecisionEngine(risk, content, signal_timeout=settings.SIGNAL_TIMEOUT_SECONDS),
        config_store=PolicyConfigStore(defaults),
        audit_log=audit_log,
    )


# ========================= ERRORS =========================

ERROR_STATUS = [
    (InvalidApplication, 422),
    (InvalidPolicyConfig, 422),
    (SignalUnavailable, 503),
    (DuplicateApplication, 409),
    (AlreadyClaimed, 409),
    (NotFound, 404),
    (AuditUnavailable, 503),
]


async def governance_error_handler(request: Request, exc: GovernanceError) -> JSONResponse:
    status = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status, content={"detail": exc.to_dict()})


# ========================= FASTAPI APP =========================


def create_app(settings: Optional[Settings] = None, service: Optional[GovernanceService] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(
        title="Lending Governance API",
        description="Policy, risk and content arbitration with human-in-the-loop review and audit trail",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.service = service or build_service(settings)
    app.add_exception_handler(GovernanceError, governance_error_handler)

    app.include_router(applications.router)
    app.include_router(reviews.router)
    app.include_router(audit.router)
    app.include_router(config.router)
    app.include_router(batch.router)

    @app.get("/health", tags=["System"])
    def health():
        svc = app.state.service
        return {
            "status": "healthy",
            "pending_reviews": len(svc.review_queue),
            "audit_backlog": svc.audit_log.backlog_size,
        }

    return app


# ========================= ENTRY POINT =========================

if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()
    configure_logging(default_settings)
    uvicorn.run(create_app(), host=args.host, port=args.port)
