"""SQLAlchemy database models and setup."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    Text,
    ForeignKey,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from lead_research.config import settings

Base = declarative_base()


class DBNewsletterRun(Base):
    """One processed newsletter."""

    __tablename__ = "newsletter_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_hash = Column(String(64), unique=True, nullable=False, index=True)
    source = Column(String(1000))
    status = Column(String(50), default="pending")  # pending, completed, cancelled, fallback
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime)

    total_extracted = Column(Integer, default=0)
    total_qualified = Column(Integer, default=0)
    min_score = Column(Float)
    degraded = Column(Boolean, default=False)
    warnings = Column(Text)  # newline separated

    leads = relationship("DBLead", back_populates="run", cascade="all, delete-orphan")


class DBLead(Base):
    """A company retained by a newsletter run."""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Integer, ForeignKey("newsletter_runs.id"), nullable=False)
    rank = Column(Integer)

    name = Column(String(500), nullable=False)
    funding_round = Column(String(200))
    funding_amount = Column(String(100))
    sector = Column(String(500))
    headquarters = Column(String(500))
    snippet = Column(Text)
    domain = Column(String(255))
    headcount = Column(Integer)

    icp_score = Column(Float, nullable=False)
    outreach_message = Column(Text)
    demo_data = Column(Boolean, default=False)
    outreach_fallback = Column(Boolean, default=False)

    run = relationship("DBNewsletterRun", back_populates="leads")

    __table_args__ = (
        Index("idx_lead_run", "run_id"),
        Index("idx_lead_name", "name"),
        Index("idx_lead_score", "icp_score"),
    )


# Database initialization
def init_db(db_url: Optional[str] = None) -> sessionmaker:
    """Initialize database and return session maker."""
    url = db_url or settings.database_url
    engine = create_engine(url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


def get_session(db_url: Optional[str] = None) -> Session:
    """Get a new database session."""
    SessionLocal = init_db(db_url)
    return SessionLocal()


def was_processed(session: Session, content_hash: str) -> bool:
    """Check whether a newsletter with this content already completed.

    Cancelled runs and runs that fell back to demo data are processed again.
    """
    run = session.query(DBNewsletterRun).filter_by(content_hash=content_hash).first()
    return run is not None and run.status == "completed"


def save_run(session: Session, content_hash: str, source: str, run, min_score: float) -> DBNewsletterRun:
    """Record a pipeline run and its retained companies.

    A previous record for the same content is replaced.
    """
    existing = session.query(DBNewsletterRun).filter_by(content_hash=content_hash).first()
    if existing:
        session.delete(existing)
        session.flush()

    record = DBNewsletterRun(
        content_hash=content_hash,
        source=source,
        status=_run_status(run),
        completed_at=datetime.utcnow(),
        total_extracted=run.extracted_count,
        total_qualified=len(run.companies),
        min_score=min_score,
        degraded=run.degraded,
        warnings="\n".join(run.warnings),
    )
    for rank, company in enumerate(run.companies, 1):
        record.leads.append(
            DBLead(
                rank=rank,
                name=company.name,
                funding_round=company.round,
                funding_amount=company.amount,
                sector=company.sector,
                headquarters=company.headquarters,
                snippet=company.snippet,
                domain=company.domain,
                headcount=company.headcount,
                icp_score=company.icp_score,
                outreach_message=company.outreach_message,
                demo_data=company.demo_data,
                outreach_fallback=company.outreach_fallback,
            )
        )

    session.add(record)
    session.commit()
    return record


def _run_status(run) -> str:
    if run.cancelled:
        return "cancelled"
    if run.used_demo_data:
        return "fallback"
    return "completed"
