"""Property model — read-only from the quote workflow's perspective."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from .base import Base


class Property(Base):
    __tablename__ = "properties"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    contact_number = Column(String(50))
    email = Column(String(255))

    practice_leader = Column(String(255))
    practice_leader_email = Column(String(255))
    practice_leader_phone = Column(String(50))

    landlord_name = Column(String(255))
    landlord_email = Column(String(255))

    organization_id = Column(Integer, ForeignKey("organizations.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (Index("ix_properties_org", "organization_id"),)
