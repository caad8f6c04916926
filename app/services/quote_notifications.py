"""
quote_notifications.py — Notification content and fan-out for the quote workflow.

Builds the in-app messages and HTML emails contractors and managers receive
as quotes move through their lifecycle, and delivers them via
NotificationGateway.

Business Rules:
- Site details (property name, address, site phone, practice leader) are
  always embedded in quote-request and assignment messages
- IncludeInfo adds the request description, location, priority, practice
  leader contact details and photo links on quote requests
- Rejection messages carry only property name + address
- Every notify_* helper returns a NotificationOutcome and never raises —
  one recipient's failure must not block the next
- Emails are sent only when QUOTE_EMAILS_ENABLED and the recipient has an address

Called by: quote_request_service, quote_submission_service, quote_approval_service
Depends on: notification_service, quote_store, models, config
"""

import html
from dataclasses import dataclass

from loguru import logger

from ..config import settings
from ..models import Contractor, MaintenanceRequest, Property, Quote, User
from .notification_service import NotificationGateway
from .quote_errors import NotFoundError, QuoteWorkflowError
from .quote_store import QuoteStore


@dataclass
class IncludeInfo:
    """Which request details a manager chose to surface in a quote request."""
    description: bool = False
    location: bool = False
    images: bool = False
    contact_details: bool = False
    urgency: bool = False


@dataclass
class PropertyDetails:
    name: str = ""
    address: str = ""
    contact_number: str = ""
    practice_leader: str = ""
    practice_leader_phone: str | None = None
    practice_leader_email: str | None = None
    landlord_name: str | None = None
    landlord_email: str | None = None

    @classmethod
    def from_property(cls, prop: Property) -> "PropertyDetails":
        return cls(
            name=prop.name or "",
            address=prop.address or "",
            contact_number=prop.contact_number or "",
            practice_leader=prop.practice_leader or "",
            practice_leader_phone=prop.practice_leader_phone,
            practice_leader_email=prop.practice_leader_email,
            landlord_name=prop.landlord_name,
            landlord_email=prop.landlord_email,
        )


@dataclass
class NotificationOutcome:
    """Result of notifying one contractor/user — collected, never raised."""
    contractor_id: int | None
    user_id: int | None = None
    notified: bool = False
    emailed: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "contractor_id": self.contractor_id,
            "user_id": self.user_id,
            "notified": self.notified,
            "emailed": self.emailed,
            "error": self.error,
        }


@dataclass
class QuoteMessage:
    title: str
    message: str
    link: str
    type: str = "info"


# ── Lookups ─────────────────────────────────────────────────────────────


def fetch_property_details(store: QuoteStore, request: MaintenanceRequest | None) -> PropertyDetails | None:
    """Property context for message content. Best-effort: None on any failure."""
    if not request or not request.property_id:
        return None
    try:
        prop = store.get(Property, request.property_id)
    except QuoteWorkflowError as e:
        logger.warning(f"Property details unavailable for request #{request.id}: {e}")
        return None
    return PropertyDetails.from_property(prop) if prop else None


def job_link(request_id: int) -> str:
    return f"/contractor/jobs/{request_id}"


# ── Message builders ────────────────────────────────────────────────────


def _site_lines(details: PropertyDetails, include_contact: bool = True) -> list[str]:
    lines = [
        f"Property: {details.name}",
        f"Address: {details.address}",
        f"Site Phone: {details.contact_number}",
        f"Practice Leader: {details.practice_leader}",
    ]
    if include_contact:
        if details.practice_leader_phone:
            lines.append(f"Practice Leader Phone: {details.practice_leader_phone}")
        if details.practice_leader_email:
            lines.append(f"Practice Leader Email: {details.practice_leader_email}")
    return lines


def build_quote_request_message(
    request: MaintenanceRequest,
    details: PropertyDetails | None,
    include_info: IncludeInfo | None = None,
    notes: str = "",
) -> QuoteMessage:
    include_info = include_info or IncludeInfo()
    message = f"You have a new quote request for maintenance job #{request.id}: {request.title}"

    job_lines = []
    if include_info.description and request.description:
        job_lines.append(f"Description: {request.description}")
    if include_info.location and request.location:
        job_lines.append(f"Location: {request.location}")
    if include_info.urgency and request.priority:
        job_lines.append(f"Priority: {request.priority}")
    if include_info.images and request.attachments:
        job_lines.append(f"Photos: {len(request.attachments)} attached")
        job_lines.extend(f"  {url}" for url in request.attachments)
    if job_lines:
        message += "\n\n--- JOB DETAILS ---\n" + "\n".join(job_lines)

    if details:
        message += "\n\n--- SITE DETAILS ---\n" + "\n".join(
            _site_lines(details, include_contact=include_info.contact_details)
        )
    if notes:
        message += f"\n\nNotes: {notes}"

    return QuoteMessage(
        title="New Quote Request - Site Details Included",
        message=message,
        link=job_link(request.id),
    )


def build_rejection_message(request_id: int, details: PropertyDetails | None) -> QuoteMessage:
    message = (
        f"Your quote for maintenance job #{request_id} was not accepted. "
        "Thank you for your interest."
    )
    if details:
        message += f"\n\nProperty: {details.name}\nAddress: {details.address}"
    return QuoteMessage(title="Quote Not Accepted", message=message, link=job_link(request_id))


def build_assignment_message(request_id: int, details: PropertyDetails | None) -> QuoteMessage:
    message = (
        f"Congratulations! Your quote for maintenance job #{request_id} has been approved "
        "and you have been assigned to this job."
    )
    if details:
        message += "\n\n--- SITE DETAILS ---\n" + "\n".join(_site_lines(details))
    return QuoteMessage(
        title="Quote Approved - Job Assigned with Site Details",
        message=message,
        link=job_link(request_id),
        type="success",
    )


def build_submitted_message(quote: Quote, contractor: Contractor, request: MaintenanceRequest) -> QuoteMessage:
    return QuoteMessage(
        title="Quote Submitted",
        message=(
            f"{contractor.company_name} submitted a quote of ${float(quote.amount):,.2f} "
            f"for maintenance job #{request.id}: {request.title}"
        ),
        link=f"/requests/{request.id}",
    )


# ── Email templates ─────────────────────────────────────────────────────


def build_quote_email(
    kind: str,
    recipient_name: str,
    request: MaintenanceRequest,
    details: PropertyDetails | None,
    quote: Quote | None = None,
) -> tuple[str, str]:
    """Return (subject, html) for a quote lifecycle email.

    kind is one of: requested, assigned, rejected, submitted.
    """
    heading, color, subject, intro = {
        "requested": (
            "Quote Request",
            "#2563eb",
            f"Quote Request: {request.title}",
            "You have been asked to provide a quote for the job below.",
        ),
        "assigned": (
            "Job Assignment",
            "#16a34a",
            f"Job Assignment: {request.title}",
            "Your quote has been approved and you have been assigned to this job.",
        ),
        "rejected": (
            "Quote Status Update",
            "#dc2626",
            f"Quote Status Update: {request.title}",
            "Another quote was selected for this job. Thank you for your interest.",
        ),
        "submitted": (
            "Quote Submitted",
            "#2563eb",
            f"Quote Submitted: {request.title}",
            "A contractor has submitted a quote for review.",
        ),
    }[kind]

    link = (
        f"{settings.app_url}/requests/{request.id}"
        if kind == "submitted"
        else f"{settings.app_url}{job_link(request.id)}"
    )

    amount_html = ""
    if quote is not None and kind in ("assigned", "submitted"):
        amount_html = f"<p><strong>Quoted Amount:</strong> ${float(quote.amount):,.2f}</p>"

    site_html = ""
    if details and kind != "rejected":
        site_rows = "".join(
            f'<p style="margin:4px 0">{html.escape(line)}</p>' for line in _site_lines(details)
        )
        site_html = (
            '<div style="background:#f3f4f6;padding:12px;border-radius:6px;margin:12px 0">'
            f"{site_rows}</div>"
        )
    elif details:
        site_html = (
            f"<p>Property: <strong>{html.escape(details.name)}</strong> — "
            f"{html.escape(details.address)}</p>"
        )

    html_body = f"""
    <div style="font-family:Arial,sans-serif;max-width:600px">
        <h2 style="color:{color}">{heading}</h2>
        <p>Hi {html.escape(recipient_name or "there")},</p>
        <p>{intro}</p>
        <p><strong>{html.escape(request.title or "")}</strong> (#{request.id})</p>
        <p>Priority: {html.escape(str(request.priority or "medium"))} | Location: {html.escape(str(request.location or "—"))}</p>
        {amount_html}
        {site_html}
        <p style="margin-top:20px">
            <a href="{link}"
               style="background:{color};color:white;padding:10px 24px;text-decoration:none;border-radius:5px">
                View Job
            </a>
        </p>
        <p style="color:#6b7280;font-size:12px;margin-top:20px">
            This is an automated message from HousingHub.
        </p>
    </div>
    """
    return subject, html_body


# ── Delivery ────────────────────────────────────────────────────────────


async def notify_contractor(
    store: QuoteStore,
    gateway: NotificationGateway,
    contractor_id: int,
    msg: QuoteMessage,
    *,
    email_kind: str | None = None,
    request: MaintenanceRequest | None = None,
    details: PropertyDetails | None = None,
    quote: Quote | None = None,
) -> NotificationOutcome:
    """In-app (and optionally email) notification to one contractor. Never raises."""
    outcome = NotificationOutcome(contractor_id=contractor_id)
    try:
        contractor = store.get(Contractor, contractor_id)
        if not contractor or not contractor.user_id:
            raise NotFoundError(f"Contractor #{contractor_id} has no linked user")
        outcome.user_id = contractor.user_id
        gateway.notify(
            contractor.user_id,
            msg.title,
            msg.message,
            link=msg.link,
            type=msg.type,
            organization_id=contractor.organization_id,
        )
        outcome.notified = True
    except QuoteWorkflowError as e:
        logger.error(f"Failed to notify contractor {contractor_id} ('{msg.title}'): {e}")
        outcome.error = str(e)
        return outcome

    if email_kind and request is not None and settings.quote_emails_enabled and contractor.email:
        subject, html_body = build_quote_email(
            email_kind, contractor.contact_name or contractor.company_name, request, details, quote
        )
        outcome.emailed = await gateway.send_email(contractor.email, subject, html_body)
    return outcome


async def notify_managers(
    store: QuoteStore,
    gateway: NotificationGateway,
    organization_id: int | None,
    msg: QuoteMessage,
    *,
    email_kind: str | None = None,
    request: MaintenanceRequest | None = None,
    quote: Quote | None = None,
) -> list[NotificationOutcome]:
    """Notify every active manager/admin in an organization. Per-recipient isolation."""
    try:
        managers = store.find(
            User,
            User.organization_id == organization_id,
            User.role.in_(("manager", "admin")),
            User.is_active.is_(True),
        )
    except QuoteWorkflowError as e:
        logger.error(f"Could not load managers for organization {organization_id}: {e}")
        return []

    outcomes = []
    for manager in managers:
        outcome = NotificationOutcome(contractor_id=None, user_id=manager.id)
        try:
            gateway.notify(
                manager.id, msg.title, msg.message, link=msg.link,
                type=msg.type, organization_id=organization_id,
            )
            outcome.notified = True
        except QuoteWorkflowError as e:
            logger.error(f"Failed to notify manager {manager.email}: {e}")
            outcome.error = str(e)
        if outcome.notified and email_kind and request is not None and settings.quote_emails_enabled:
            subject, html_body = build_quote_email(email_kind, manager.name, request, None, quote)
            outcome.emailed = await gateway.send_email(manager.email, subject, html_body)
        outcomes.append(outcome)
    return outcomes
