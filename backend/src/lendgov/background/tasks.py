import asyncio
import logging

from ..exceptions import AuditWriteFailure
from ..services.audit_log import AuditLog

logger = logging.getLogger(__name__)


async def flush_audit_backlog(audit_log: AuditLog, attempts: int = 5, backoff: float = 0.5) -> None:
    """Retry undurable audit records with exponential backoff.

    Raises AuditWriteFailure if the backlog is still not empty after the last
    attempt; the records stay held in the backlog for the next flush.
    """
    remaining = audit_log.flush()
    attempt = 1
    while remaining and attempt < attempts:
        delay = backoff * (2 ** (attempt - 1))
        logger.warning(f"{remaining} audit record(s) pending, retrying in {delay:.2f}s")
        await asyncio.sleep(delay)
        remaining = audit_log.flush()
        attempt += 1

    if remaining:
        logger.error(f"Audit backlog not durable after {attempts} attempts ({remaining} record(s) held)")
        raise AuditWriteFailure(f"{remaining} audit record(s) could not be written")
    logger.info("Audit backlog flushed")
