"""End-to-end runs through the HTTP API with fixed risk and content signals."""
import pytest
from fastapi.testclient import TestClient

from conftest import FixedContentAnalyzer, FixedRiskEstimator, make_application, make_content, make_risk
from lendgov.config.settings import Settings
from lendgov.database.audit_store import SqlAuditStore
from lendgov.main import create_app
from lendgov.services.audit_log import AuditLog
from lendgov.services.engine import DecisionEngine
from lendgov.services.governance import GovernanceService


@pytest.fixture
def api():
    engine = DecisionEngine(FixedRiskEstimator(make_risk(0.1)), FixedContentAnalyzer(make_content()))
    service = GovernanceService(engine, audit_log=AuditLog(SqlAuditStore("sqlite:///:memory:")))
    with TestClient(create_app(settings=Settings(), service=service)) as client:
        yield client


def payload(**overrides):
    return make_application(**overrides).model_dump(mode="json")


def test_clean_application_is_auto_approved(api):
    outcome = api.post("/applications", json=payload(description="expansion")).json()

    assert outcome["result"]["final_status"] == "AUTO_APPROVE"
    assert outcome["result"]["risk"]["level"] == "Low"
    assert outcome["result"]["risk"]["probability_of_default"] == 0.1
    assert outcome["queued"] is False
    assert api.get("/reviews").json() == []
    [record] = api.get("/audit").json()
    assert record["application_id"] == "LN-00001"
    assert record["human_override"] is None


def test_revenue_failure_is_reviewed_then_declined(api):
    outcome = api.post("/applications", json=payload(revenue=20_000)).json()

    assert outcome["result"]["policy"]["passed"] is False
    assert outcome["result"]["final_status"] == "HITL_REVIEW"
    assert [e["result"]["application_id"] for e in api.get("/reviews").json()] == ["LN-00001"]
    assert api.get("/audit").json() == []

    resolved = api.post(
        "/reviews/LN-00001/resolve", json={"decision": "DECLINED", "justification": "Revenue too thin"}
    ).json()["record"]

    assert resolved["human_override"]["original_status"] == "HITL_REVIEW"
    assert resolved["human_override"]["final_decision"] == "DECLINED"
    assert resolved["final_status"] == "AUTO_DECLINE"
    assert api.get("/reviews").json() == []
    assert [r["final_status"] for r in api.get("/audit").json()] == ["AUTO_DECLINE"]


def test_restricted_industry_fails_only_the_industry_rule(api):
    outcome = api.post("/applications", json=payload(industry="Gambling")).json()

    policy = outcome["result"]["policy"]
    assert policy["passed"] is False
    assert {item["rule"]: item["passed"] for item in policy["checklist"]} == {
        "Min Revenue >= $50k": True,
        "Credit Score >= 600": True,
        "Restricted Industry Check": False,
    }
    assert outcome["result"]["final_status"] == "HITL_REVIEW"


def test_lenient_industry_checking_lets_gambling_through(api):
    api.patch("/config", json={"strict_industry_checking": False})

    outcome = api.post("/applications", json=payload(industry="Gambling")).json()

    assert outcome["result"]["policy"]["passed"] is True
    assert outcome["result"]["final_status"] == "AUTO_APPROVE"
