"""
quote_request_service.py — Manager asks a contractor to bid on a maintenance request.

Business Rules:
- At most one quote per (request, contractor): a repeat request updates the
  existing row back to "requested" instead of inserting a duplicate
- New quote rows start with the placeholder amount until the contractor bids
- Description is the manager's notes, or "Quote requested" when blank
- Every request writes a "quote_requested" audit row
- Contractor and request must belong to the same organization
- A request that already has an approved quote is closed (RequestClosedError)
- Marking the request quote_requested, fetching property details and
  notifying the contractor are best-effort: failures are logged and the
  quote request still succeeds

Called by: routers/quotes.py
Depends on: quote_store, quote_states, quote_log_service, quote_notifications
"""

from datetime import datetime, timezone

from loguru import logger

from ..models import Contractor, MaintenanceRequest, Quote
from . import quote_states as qs
from .notification_service import NotificationGateway
from .quote_errors import NotFoundError, QuoteWorkflowError, TenantMismatchError
from .quote_log_service import write_quote_log
from .quote_notifications import (
    IncludeInfo,
    build_quote_request_message,
    fetch_property_details,
    notify_contractor,
)
from .quote_store import QuoteStore


async def request_quote(
    store: QuoteStore,
    gateway: NotificationGateway,
    request_id: int,
    contractor_id: int,
    include_info: IncludeInfo | None = None,
    notes: str = "",
) -> Quote:
    """Create or refresh the (request, contractor) quote in "requested" state."""
    request = store.get(MaintenanceRequest, request_id)
    if not request:
        raise NotFoundError(f"Maintenance request #{request_id} not found")
    contractor = store.get(Contractor, contractor_id)
    if not contractor:
        raise NotFoundError(f"Contractor #{contractor_id} not found")
    if contractor.organization_id != request.organization_id:
        raise TenantMismatchError(
            f"Contractor #{contractor_id} is not in request #{request_id}'s organization"
        )

    description = qs.request_note(notes)
    now = datetime.now(timezone.utc)

    existing = store.find_one(Quote, request_id=request_id, contractor_id=contractor_id)
    if existing:
        qs.check_transition(existing.id, existing.status, qs.REQUESTED)
    qs.ensure_request_open(store, request_id, existing.id if existing else None)

    if existing:
        old_description = existing.description
        quote = store.update(
            existing, status=qs.REQUESTED, description=description, submitted_at=now
        )
        write_quote_log(
            store, quote, qs.ACTION_QUOTE_REQUESTED,
            new_amount=quote.amount,
            old_description=old_description,
            new_description=description,
        )
        logger.info(f"Quote #{quote.id} re-requested from contractor {contractor_id} for request #{request_id}")
    else:
        quote = store.insert(
            Quote(
                request_id=request_id,
                contractor_id=contractor_id,
                status=qs.REQUESTED,
                amount=qs.PLACEHOLDER_AMOUNT,
                description=description,
                submitted_at=now,
                organization_id=request.organization_id,
            )
        )
        write_quote_log(
            store, quote, qs.ACTION_QUOTE_REQUESTED,
            new_amount=qs.PLACEHOLDER_AMOUNT,
            new_description=description,
        )
        logger.info(f"Quote #{quote.id} requested from contractor {contractor_id} for request #{request_id}")

    # Best-effort from here on, the quote row is already committed
    if not request.quote_requested:
        try:
            store.update(request, quote_requested=True)
        except QuoteWorkflowError as e:
            logger.warning(f"Could not mark request #{request_id} as quote_requested: {e}")

    details = fetch_property_details(store, request)
    msg = build_quote_request_message(request, details, include_info, notes.strip() if notes else "")
    outcome = await notify_contractor(
        store, gateway, contractor_id, msg,
        email_kind="requested", request=request, details=details, quote=quote,
    )
    if not outcome.notified:
        logger.warning(f"Quote request #{quote.id} saved but contractor {contractor_id} was not notified")

    return quote
