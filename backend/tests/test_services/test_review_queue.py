import threading

import pytest

from conftest import make_application, make_content, make_risk
from lendgov.exceptions import AlreadyClaimed, DuplicateEnqueue, NotFound
from lendgov.models import (
    ChecklistItem,
    Disposition,
    EngineResult,
    FeedbackType,
    HumanDecision,
    PolicyConfig,
    PolicyResult,
)
from lendgov.services.review_queue import ReviewQueue


def review_result(app, policy_passed=True, risk=None, content=None) -> EngineResult:
    policy = PolicyResult(
        passed=policy_passed,
        checklist=[ChecklistItem(rule="Min Revenue >= $50k", passed=policy_passed)],
        reasons=[] if policy_passed else ["Annual Revenue below minimum threshold ($50k)"],
    )
    return EngineResult(
        application_id=app.id,
        policy=policy,
        risk=risk or make_risk(0.4),
        content=content or make_content(),
        final_status=Disposition.HITL_REVIEW,
    )


@pytest.fixture
def queue():
    return ReviewQueue()


def test_enqueue_then_get(queue, config):
    app = make_application()
    queue.enqueue(review_result(app), app, config)

    assert app.id in queue
    assert len(queue) == 1
    assert queue.get(app.id).application == app


def test_duplicate_enqueue_fails(queue, config):
    app = make_application()
    queue.enqueue(review_result(app), app, config)

    with pytest.raises(DuplicateEnqueue):
        queue.enqueue(review_result(app), app, config)
    assert len(queue) == 1


def test_resolve_removes_entry_and_builds_record(queue, config):
    app = make_application(revenue=20_000)
    queue.enqueue(review_result(app, policy_passed=False), app, config)

    record = queue.resolve(app.id, HumanDecision.DECLINED, "Revenue too thin")

    assert app.id not in queue
    assert record.application_id == app.id
    assert record.application == app
    assert record.final_status is Disposition.AUTO_DECLINE
    assert record.human_override.original_status is Disposition.HITL_REVIEW
    assert record.human_override.final_decision is HumanDecision.DECLINED
    assert record.human_override.justification == "Revenue too thin"


def test_second_resolve_is_not_found(queue, config):
    app = make_application()
    queue.enqueue(review_result(app), app, config)
    queue.resolve(app.id, HumanDecision.APPROVED, "ok")

    with pytest.raises(NotFound):
        queue.resolve(app.id, HumanDecision.APPROVED, "again")


def test_resolve_unknown_id_is_not_found(queue):
    with pytest.raises(NotFound):
        queue.resolve("missing", HumanDecision.DECLINED, "")


def test_empty_justification_is_kept_verbatim(queue, config):
    app = make_application()
    queue.enqueue(review_result(app), app, config)
    assert queue.resolve(app.id, HumanDecision.APPROVED, "").human_override.justification == ""


def test_feedback_triggered_when_human_declines_clean_application(queue, config):
    app = make_application()
    queue.enqueue(review_result(app, risk=make_risk(0.1), content=make_content()), app, config)

    record = queue.resolve(app.id, HumanDecision.DECLINED, "gut feeling")

    assert record.feedback_loop.triggered is True
    assert record.feedback_loop.type is FeedbackType.MODEL_RETRAINING


def test_feedback_not_triggered_when_human_agrees_with_counterfactual(queue, config):
    # Policy failed, but the signals alone would have auto-approved.
    app = make_application(revenue=45_000)
    queue.enqueue(review_result(app, policy_passed=False, risk=make_risk(0.1)), app, config)

    record = queue.resolve(app.id, HumanDecision.APPROVED, "Seasonal revenue dip")

    assert record.feedback_loop.triggered is False
    assert record.feedback_loop.type is FeedbackType.POLICY_ADJUSTMENT


def test_feedback_uses_config_snapshot_from_enqueue(queue):
    app = make_application(requested_amount=40_000)
    snapshot = PolicyConfig(max_loan_amount=30_000)
    queue.enqueue(review_result(app, risk=make_risk(0.1)), app, snapshot)

    record = queue.resolve(app.id, HumanDecision.APPROVED, "amount acceptable")

    # Over the limit in force at decision time, so approval overrides the engine.
    assert record.feedback_loop.triggered is True


def test_claim_lifecycle(queue, config):
    app = make_application()
    queue.enqueue(review_result(app), app, config)

    entry = queue.claim(app.id, "alex")
    assert entry.claim.reviewer == "alex"
    assert queue.claim(app.id, "alex").claim == entry.claim

    with pytest.raises(AlreadyClaimed):
        queue.claim(app.id, "sam")
    with pytest.raises(AlreadyClaimed):
        queue.resolve(app.id, HumanDecision.APPROVED, "mine now", reviewer="sam")

    queue.resolve(app.id, HumanDecision.APPROVED, "fine", reviewer="alex")
    assert app.id not in queue


def test_claim_unknown_is_not_found(queue):
    with pytest.raises(NotFound):
        queue.claim("missing", "alex")


def test_concurrent_resolves_only_one_succeeds(queue, config):
    app = make_application()
    queue.enqueue(review_result(app), app, config)
    successes, failures = [], []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        try:
            successes.append(queue.resolve(app.id, HumanDecision.APPROVED, "race"))
        except NotFound:
            failures.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(successes) == 1
    assert len(failures) == 7


def test_pending_is_in_enqueue_order(queue, config):
    apps = [make_application(id=f"LN-{i}") for i in range(3)]
    for app in apps:
        queue.enqueue(review_result(app), app, config)

    assert [e.application_id for e in queue.pending()] == ["LN-0", "LN-1", "LN-2"]
