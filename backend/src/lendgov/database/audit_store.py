import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import AuditUnavailable, AuditWriteFailure
from ..models import AuditRecord
from ..services.audit_log import AuditQuery
from .models import AuditRecordRow, create_tables, make_engine, make_session_factory

logger = logging.getLogger(__name__)


class SqlAuditStore:
    """Audit store backed by a SQL table (SQLite by default)."""

    def __init__(self, database_url: str = "sqlite:///./audit.db", engine=None):
        self.engine = engine if engine is not None else make_engine(database_url)
        self.SessionLocal = make_session_factory(self.engine)
        create_tables(self.engine)

    def write(self, record: AuditRecord) -> None:
        row = AuditRecordRow(
            application_id=record.application_id,
            final_status=record.final_status.value,
            recorded_at=record.recorded_at,
            human_override=record.human_override.final_decision.value if record.human_override else None,
            payload=record.model_dump_json(),
        )
        db = self.SessionLocal()
        try:
            db.add(row)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise AuditWriteFailure(
                f"audit insert failed: {exc}", application_id=record.application_id
            ) from exc
        finally:
            db.close()

    def read(self, query: AuditQuery) -> list[AuditRecord]:
        stmt = select(AuditRecordRow).order_by(AuditRecordRow.seq)
        if query.application_id is not None:
            stmt = stmt.where(AuditRecordRow.application_id == query.application_id)
        if query.disposition is not None:
            stmt = stmt.where(AuditRecordRow.final_status == query.disposition.value)

        db = self.SessionLocal()
        try:
            rows = db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            logger.error(f"Audit read failed: {exc}")
            raise AuditUnavailable(f"audit read failed: {exc}") from exc
        finally:
            db.close()

        # Date bounds are applied on the parsed, timezone-aware values; SQLite
        # drops tzinfo on storage.
        records = [AuditRecord.model_validate_json(row.payload) for row in rows]
        return [r for r in records if query.matches(r)]

    def contains(self, application_id: str) -> bool:
        db = self.SessionLocal()
        try:
            stmt = select(AuditRecordRow.seq).where(AuditRecordRow.application_id == application_id).limit(1)
            return db.execute(stmt).first() is not None
        except SQLAlchemyError as exc:
            logger.error(f"Audit lookup for {application_id} failed: {exc}")
            raise AuditUnavailable(f"audit lookup failed: {exc}", application_id=application_id) from exc
        finally:
            db.close()
