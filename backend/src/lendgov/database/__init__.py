from .audit_store import SqlAuditStore
from .models import AuditRecordRow, Base, create_tables, make_engine

__all__ = ["AuditRecordRow", "Base", "SqlAuditStore", "create_tables", "make_engine"]
