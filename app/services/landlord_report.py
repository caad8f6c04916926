"""
landlord_report.py — Email a maintenance-request report to the property's landlord.

Business Rules:
- Recipient: explicit address, else property.landlord_email, else the
  practice leader's email
- No recipient or a malformed address raises InvalidQuoteError
- Sections are opt-in via ReportOptions: summary, property, issue, photos;
  practice leader contact lines only appear inside the property section
- Header is branded with the organization name ("Property Management" fallback)
- Returns the send_email() result; delivery failures never raise

Called by: routers/quotes.py
Depends on: quote_store, notification_service, models
"""

import html
import re
from dataclasses import dataclass

from loguru import logger

from ..models import MaintenanceRequest, Organization, Property
from .notification_service import NotificationGateway
from .quote_errors import InvalidQuoteError, NotFoundError
from .quote_store import QuoteStore

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class ReportOptions:
    summary: bool = True
    property: bool = True
    issue: bool = True
    photos: bool = False
    practice_leader: bool = False


def _row(label: str, value) -> str:
    return f'<p style="margin:6px 0"><strong>{label}:</strong> {html.escape(str(value))}</p>'


def _section(title: str, color: str, rows: list[str]) -> str:
    return (
        f'<div style="margin:20px 0;padding:16px;border:2px solid {color};border-radius:8px">'
        f'<h2 style="color:{color};margin-top:0">{title}</h2>{"".join(rows)}</div>'
    )


def build_report_html(
    request: MaintenanceRequest,
    prop: Property | None,
    options: ReportOptions,
    organization_name: str = "Property Management",
) -> str:
    address = (prop.address or prop.name) if prop else "Property"
    parts = [
        '<div style="font-family:Arial,sans-serif;max-width:800px;margin:0 auto">',
        '<div style="background:#1e3a5f;color:white;padding:25px;text-align:center">'
        f'<h1 style="margin:0">{html.escape(organization_name)}</h1>'
        '<p style="margin:8px 0 0 0">Maintenance Report</p></div>',
        f'<div style="background:#374151;color:white;padding:15px 25px">'
        f"<strong>Property:</strong> {html.escape(address or 'Property')}</div>",
    ]

    if options.summary:
        created = request.created_at.strftime("%d/%m/%Y") if request.created_at else "N/A"
        parts.append(_section("Request Summary", "#6c757d", [
            _row("Request ID", request.id),
            _row("Created", created),
            _row("Title", request.title or "N/A"),
            _row("Status", request.status or "N/A"),
            _row("Priority", request.priority or "N/A"),
            _row("Location", request.location or "N/A"),
        ]))

    if options.property and prop:
        rows = [_row("Name", prop.name or "N/A"), _row("Address", prop.address or "N/A")]
        if options.practice_leader and prop.practice_leader:
            rows.append(_row("Practice Leader", prop.practice_leader))
            if prop.practice_leader_email:
                rows.append(_row("Email", prop.practice_leader_email))
            if prop.practice_leader_phone:
                rows.append(_row("Phone", prop.practice_leader_phone))
        parts.append(_section("Property Details", "#f57c00", rows))

    if options.issue and request.description:
        parts.append(_section("Issue Details", "#7b1fa2", [_row("Description", request.description)]))

    if options.photos and request.attachments:
        imgs = [
            f'<img src="{html.escape(url, quote=True)}" alt="Photo {i}" '
            'style="max-width:100%;margin:8px 0;border-radius:6px"/>'
            for i, url in enumerate(request.attachments, 1)
        ]
        parts.append(_section(f"Photos ({len(imgs)})", "#0d6efd", imgs))

    parts.append(
        '<p style="color:#6b7280;font-size:12px;margin:20px">'
        "This report was generated automatically by HousingHub.</p></div>"
    )
    return "".join(parts)


def resolve_recipient(landlord_email: str | None, prop: Property | None) -> str:
    recipient = (landlord_email or "").strip()
    if not recipient and prop:
        recipient = (prop.landlord_email or prop.practice_leader_email or "").strip()
    if not recipient:
        raise InvalidQuoteError(
            "No landlord email found for this property. Provide an address or add "
            "a landlord/practice leader email to the property."
        )
    if not _EMAIL_RE.match(recipient):
        raise InvalidQuoteError(f"Invalid email address format: {recipient}")
    return recipient


async def send_landlord_report(
    store: QuoteStore,
    gateway: NotificationGateway,
    request_id: int,
    landlord_email: str | None = None,
    options: ReportOptions | None = None,
) -> bool:
    """Render and send the landlord report. Returns True if the email was accepted."""
    options = options or ReportOptions()
    request = store.get(MaintenanceRequest, request_id)
    if not request:
        raise NotFoundError(f"Maintenance request #{request_id} not found")
    prop = store.get(Property, request.property_id)
    recipient = resolve_recipient(landlord_email, prop)

    org = store.get(Organization, request.organization_id)
    org_name = org.name if org and org.name else "Property Management"

    subject = f"Maintenance Report - {(prop.address or prop.name) if prop else request.title}"
    sent = await gateway.send_email(recipient, subject, build_report_html(request, prop, options, org_name))
    if sent:
        logger.info(f"Landlord report for request #{request_id} sent to {recipient}")
    else:
        logger.warning(f"Landlord report for request #{request_id} was not delivered to {recipient}")
    return sent
