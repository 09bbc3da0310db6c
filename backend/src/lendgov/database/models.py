from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class AuditRecordRow(Base):
    """Append-only audit row. Nothing in the code base updates or deletes these."""
    __tablename__ = "audit_records"
    seq = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(String, index=True, nullable=False)
    final_status = Column(String, index=True, nullable=False)
    recorded_at = Column(DateTime(timezone=True), index=True, nullable=False)
    human_override = Column(String, nullable=True)
    payload = Column(Text, nullable=False)


def make_engine(database_url: str):
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(engine):
    Base.metadata.create_all(bind=engine)
