import pytest

from conftest import FailingAuditStore, make_application, make_content, make_risk
from lendgov.background.tasks import flush_audit_backlog
from lendgov.exceptions import AuditWriteFailure
from lendgov.models import AuditRecord, Disposition, EngineResult, PolicyResult
from lendgov.services.audit_log import AuditLog


def make_record(app_id: str) -> AuditRecord:
    result = EngineResult(
        application_id=app_id,
        policy=PolicyResult(passed=True, checklist=[]),
        risk=make_risk(),
        content=make_content(),
        final_status=Disposition.AUTO_APPROVE,
    )
    return AuditRecord.from_result(result, make_application(id=app_id))


@pytest.mark.asyncio
async def test_flush_retries_until_store_recovers():
    store = FailingAuditStore(recover_after=3)
    log = AuditLog(store)
    log.append(make_record("LN-1"))

    await flush_audit_backlog(log, attempts=5, backoff=0.001)

    assert log.backlog_size == 0
    assert store.attempts == 4
    assert [r.application_id for r in log.query()] == ["LN-1"]


@pytest.mark.asyncio
async def test_flush_gives_up_and_keeps_records():
    store = FailingAuditStore()
    log = AuditLog(store)
    log.append(make_record("LN-1"))
    log.append(make_record("LN-2"))

    with pytest.raises(AuditWriteFailure):
        await flush_audit_backlog(log, attempts=3, backoff=0.001)

    assert log.backlog_size == 2
    # Two append-time writes, then one per flush attempt; each drain stops at LN-1.
    assert store.attempts == 5


@pytest.mark.asyncio
async def test_flush_with_empty_backlog_is_a_no_op():
    log = AuditLog()
    await flush_audit_backlog(log, attempts=1, backoff=0)
    assert log.backlog_size == 0
