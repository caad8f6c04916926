"""Quote and QuoteLog models."""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base


class Quote(Base):
    """One contractor's bid (or bid request) against one maintenance request."""

    __tablename__ = "quotes"
    id = Column(Integer, primary_key=True)
    request_id = Column(
        Integer, ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False
    )
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text)
    status = Column(String(20), default="requested")
    # requested | pending | approved | rejected

    submitted_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    approved_at = Column(DateTime)

    organization_id = Column(Integer, ForeignKey("organizations.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    request = relationship("MaintenanceRequest", back_populates="quotes")
    contractor = relationship("Contractor", foreign_keys=[contractor_id])

    __table_args__ = (
        UniqueConstraint("request_id", "contractor_id", name="uq_quotes_request_contractor"),
        Index("ix_quotes_request_status", "request_id", "status"),
        Index("ix_quotes_contractor", "contractor_id"),
    )


class QuoteLog(Base):
    """Append-only audit row for a quote transition. Never updated or deleted."""

    __tablename__ = "quote_logs"
    id = Column(Integer, primary_key=True)
    quote_id = Column(
        Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
    )
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False)
    action = Column(String(30), nullable=False)
    # created | updated | resubmitted | quote_requested | rejected

    old_amount = Column(Numeric(12, 2))
    new_amount = Column(Numeric(12, 2))
    old_description = Column(Text)
    new_description = Column(Text)

    organization_id = Column(Integer, ForeignKey("organizations.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_quote_logs_quote", "quote_id"),
        Index("ix_quote_logs_quote_action", "quote_id", "action"),
    )
