import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

from ..exceptions import AuditWriteFailure
from ..models import AuditRecord, Disposition

logger = logging.getLogger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class AuditQuery:
    disposition: Optional[Disposition] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    application_id: Optional[str] = None

    def matches(self, record: AuditRecord) -> bool:
        if self.application_id is not None and record.application_id != self.application_id:
            return False
        if self.disposition is not None and record.final_status is not self.disposition:
            return False
        recorded_at = _aware(record.recorded_at)
        since, until = _aware(self.since), _aware(self.until)
        if since is not None and recorded_at < since:
            return False
        if until is not None and recorded_at > until:
            return False
        return True


class AuditStore(Protocol):
    """Durable, append-only backing for the audit log. No update or delete."""

    def write(self, record: AuditRecord) -> None:
        ...

    def read(self, query: AuditQuery) -> list[AuditRecord]:
        ...

    def contains(self, application_id: str) -> bool:
        ...


class InMemoryAuditStore:
    def __init__(self):
        self._records: list[AuditRecord] = []

    def write(self, record: AuditRecord) -> None:
        self._records.append(record)

    def read(self, query: AuditQuery) -> list[AuditRecord]:
        return [r for r in self._records if query.matches(r)]

    def contains(self, application_id: str) -> bool:
        return any(r.application_id == application_id for r in self._records)


class AuditLog:
    """
    Append-only sequence of finalised decisions, in decision order.

    append() never raises into the decision flow. A record the store cannot
    take is kept in an ordered backlog, and later records queue behind it so
    store order stays decision order. flush() retries the backlog; callers
    that need durability (see background.tasks) retry until it drains.

    _lock guards the backlog only; _write_lock serialises store writes, so
    backlog reads never wait on a slow store. A record leaves the backlog
    only after the store has taken it.
    """

    def __init__(self, store: Optional[AuditStore] = None):
        self.store = store if store is not None else InMemoryAuditStore()
        self._backlog: deque[AuditRecord] = deque()
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    @property
    def backlog_size(self) -> int:
        with self._lock:
            return len(self._backlog)

    def append(self, record: AuditRecord) -> bool:
        """Record a finalised decision; returns True once it is durable."""
        with self._lock:
            self._backlog.append(record)
        self._drain()
        with self._lock:
            durable = not any(r is record for r in self._backlog)
        if durable:
            logger.info(f"Audit: {record.application_id} -> {record.final_status.value}")
        return durable

    def flush(self) -> int:
        """Retry the backlog. Returns how many records are still not durable."""
        self._drain()
        return self.backlog_size

    def _drain(self) -> None:
        with self._write_lock:
            while True:
                with self._lock:
                    if not self._backlog:
                        return
                    record = self._backlog[0]
                try:
                    self.store.write(record)
                except AuditWriteFailure as exc:
                    logger.error(f"Audit write failed, {self.backlog_size} record(s) held for retry: {exc}")
                    return
                with self._lock:
                    self._backlog.popleft()

    def query(
        self,
        disposition: Optional[Disposition] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        application_id: Optional[str] = None,
    ) -> list[AuditRecord]:
        return self.store.read(
            AuditQuery(disposition=disposition, since=since, until=until, application_id=application_id)
        )

    def contains(self, application_id: str) -> bool:
        with self._lock:
            if any(r.application_id == application_id for r in self._backlog):
                return True
        return self.store.contains(application_id)
