import asyncio
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from lendgov.config.policy import PolicyConfigStore
from lendgov.config.settings import Settings
from lendgov.main import create_app
from lendgov.models import (
    ContentResult,
    Industry,
    LoanApplication,
    PolicyConfig,
    RiskResult,
    Sentiment,
    ShapValue,
)
from lendgov.exceptions import AuditWriteFailure
from lendgov.services.audit_log import AuditLog, InMemoryAuditStore
from lendgov.services.engine import DecisionEngine
from lendgov.services.governance import GovernanceService
from lendgov.services.review_queue import ReviewQueue


def make_application(**overrides) -> LoanApplication:
    fields = dict(
        id="LN-00001",
        business_name="Apex Innovations",
        applicant_name="Jordan Lee",
        revenue=80_000,
        requested_amount=10_000,
        credit_score=720,
        industry=Industry.TECH,
        description="expansion",
        application_date=datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return LoanApplication(**fields)


def make_risk(pd: float = 0.1) -> RiskResult:
    return RiskResult.from_probability(
        pd,
        [ShapValue(feature="Credit History", impact=-0.25), ShapValue(feature="Debt Ratio", impact=0.02)],
    )


def make_content(flags=()) -> ContentResult:
    flags = list(flags)
    return ContentResult(
        summary="test summary",
        flags=flags,
        sentiment=Sentiment.NEUTRAL if flags else Sentiment.POSITIVE,
        reasoning="test reasoning",
    )


class FixedRiskEstimator:
    def __init__(self, risk=None, delay: float = 0.0, error: Exception = None):
        self.risk = risk or make_risk()
        self.delay = delay
        self.error = error
        self.calls = 0

    async def estimate(self, application):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.risk


class FixedContentAnalyzer:
    def __init__(self, content=None, delay: float = 0.0, error: Exception = None):
        self.content = content or make_content()
        self.delay = delay
        self.error = error
        self.calls = 0

    async def analyze(self, application):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.content


class FailingAuditStore:
    """Audit store that refuses writes until `healthy` is set."""

    def __init__(self, recover_after: int = None):
        self.inner = InMemoryAuditStore()
        self.healthy = False
        self.attempts = 0
        self.recover_after = recover_after

    def write(self, record):
        self.attempts += 1
        if self.recover_after is not None and self.attempts > self.recover_after:
            self.healthy = True
        if not self.healthy:
            raise AuditWriteFailure("store offline", application_id=record.application_id)
        self.inner.write(record)

    def read(self, query):
        return self.inner.read(query)

    def contains(self, application_id):
        return self.inner.contains(application_id)


@pytest.fixture
def application():
    return make_application()


@pytest.fixture
def config():
    return PolicyConfig()


@pytest.fixture
def risk_estimator():
    return FixedRiskEstimator()


@pytest.fixture
def content_analyzer():
    return FixedContentAnalyzer()


@pytest.fixture
def engine(risk_estimator, content_analyzer):
    return DecisionEngine(risk_estimator, content_analyzer, signal_timeout=1.0)


@pytest.fixture
def service(engine):
    return GovernanceService(
        engine=engine,
        config_store=PolicyConfigStore(),
        review_queue=ReviewQueue(),
        audit_log=AuditLog(),
    )


@pytest.fixture
def client(service):
    app = create_app(settings=Settings(), service=service)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def application_payload():
    return make_application().model_dump(mode="json")
