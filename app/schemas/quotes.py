"""
schemas/quotes.py — Pydantic models for quote workflow endpoints

Validates quote requests, contractor submissions and landlord report
options, and shapes the quote / quote-log JSON returned to the UI.

Business Rules:
- Submitted amount must be > 0
- Include-info flags all default to False
- Landlord report sections default to summary + property + issue

Called by: routers/quotes.py
Depends on: pydantic, services.quote_notifications, services.landlord_report
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from ..services.landlord_report import ReportOptions
from ..services.quote_notifications import IncludeInfo


class IncludeInfoIn(BaseModel):
    """Optional request details to surface in the contractor's notification."""
    description: bool = False
    location: bool = False
    images: bool = False
    contact_details: bool = False
    urgency: bool = False

    def to_include_info(self) -> IncludeInfo:
        return IncludeInfo(**self.model_dump())


class QuoteRequestCreate(BaseModel):
    contractor_id: int
    include_info: IncludeInfoIn = Field(default_factory=IncludeInfoIn)
    notes: str = ""


class QuoteSubmit(BaseModel):
    """Contractor's priced bid."""
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    description: str = ""

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return (v or "").strip()


class LandlordReportOptionsIn(BaseModel):
    summary: bool = True
    property: bool = True
    issue: bool = True
    photos: bool = False
    practice_leader: bool = False

    def to_options(self) -> ReportOptions:
        return ReportOptions(**self.model_dump())


class LandlordReportRequest(BaseModel):
    landlord_email: str | None = None
    options: LandlordReportOptionsIn = Field(default_factory=LandlordReportOptionsIn)

    @field_validator("landlord_email")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


