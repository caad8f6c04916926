"""Maintenance request model."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import Base


class MaintenanceRequest(Base):
    """An issue reported at a property. Assigned to a contractor only via an approved quote."""

    __tablename__ = "maintenance_requests"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(255))
    priority = Column(String(20), default="medium")  # low | medium | high | critical
    status = Column(String(20), default="pending")
    # pending | open | in-progress | completed | cancelled
    attachments = Column(JSON, default=list)

    property_id = Column(Integer, ForeignKey("properties.id"))
    contractor_id = Column(Integer, ForeignKey("contractors.id"))
    user_id = Column(Integer, ForeignKey("users.id"))

    quote_requested = Column(Boolean, default=False)
    quoted_amount = Column(Numeric(12, 2))

    organization_id = Column(Integer, ForeignKey("organizations.id"))
    assigned_at = Column(DateTime)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    property = relationship("Property", foreign_keys=[property_id])
    contractor = relationship("Contractor", foreign_keys=[contractor_id])
    quotes = relationship("Quote", back_populates="request")

    __table_args__ = (
        Index("ix_requests_org_status", "organization_id", "status"),
        Index("ix_requests_property", "property_id"),
        Index("ix_requests_contractor", "contractor_id"),
    )
