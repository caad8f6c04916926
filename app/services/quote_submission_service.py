"""
quote_submission_service.py — Contractor attaches a priced bid to a quote slot.

Business Rules:
- Contractor identity comes from the logged-in user (contractors.user_id)
- One live quote per (request, contractor): an existing row is updated to
  "pending" with the new amount/description; otherwise a pending row is inserted
- Audit action: "resubmitted" if the prior status was pending or rejected,
  "updated" if it was requested, "created" for a brand-new quote
- Approved quotes are final and cannot be resubmitted
- No bids once another contractor's quote on the request is approved
- The quote write is authoritative: any store error aborts and propagates
- Audit log and manager notification are best-effort

Called by: routers/quotes.py
Depends on: quote_store, quote_states, quote_log_service, quote_notifications
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from loguru import logger

from ..models import Contractor, MaintenanceRequest, Quote, User
from . import quote_states as qs
from .notification_service import NotificationGateway
from .quote_errors import InvalidQuoteError, NotFoundError, TenantMismatchError
from .quote_log_service import write_quote_log
from .quote_notifications import build_submitted_message, notify_managers
from .quote_store import QuoteStore


def contractor_for_user(store: QuoteStore, user: User) -> Contractor:
    """Resolve the caller's contractor record, or raise NotFoundError."""
    contractor = store.find_one(Contractor, user_id=user.id)
    if not contractor:
        raise NotFoundError(f"No contractor record for user {user.email}")
    return contractor


def _clean_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidQuoteError(f"Invalid quote amount: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise InvalidQuoteError("Quote amount must be greater than zero")
    return value.quantize(Decimal("0.01"))


async def submit_quote(
    store: QuoteStore,
    gateway: NotificationGateway,
    user: User,
    request_id: int,
    amount,
    description: str = "",
) -> Quote:
    """Submit or revise the caller's bid on a maintenance request."""
    amount = _clean_amount(amount)
    description = (description or "").strip()

    contractor = contractor_for_user(store, user)
    request = store.get(MaintenanceRequest, request_id)
    if not request:
        raise NotFoundError(f"Maintenance request #{request_id} not found")
    if contractor.organization_id != request.organization_id:
        raise TenantMismatchError(
            f"Contractor #{contractor.id} is not in request #{request_id}'s organization"
        )

    now = datetime.now(timezone.utc)
    existing = store.find_one(Quote, request_id=request_id, contractor_id=contractor.id)
    if existing:
        qs.check_transition(existing.id, existing.status, qs.PENDING)
    qs.ensure_request_open(store, request_id, existing.id if existing else None)

    if existing:
        prior_status = existing.status
        old_amount = existing.amount
        old_description = existing.description
        action = qs.submission_action(prior_status)
        quote = store.update(
            existing,
            amount=amount,
            description=description,
            status=qs.PENDING,
            submitted_at=now,
        )
        write_quote_log(
            store, quote, action,
            old_amount=old_amount,
            new_amount=amount,
            old_description=old_description,
            new_description=description,
        )
    else:
        action = qs.ACTION_CREATED
        quote = store.insert(
            Quote(
                request_id=request_id,
                contractor_id=contractor.id,
                amount=amount,
                description=description,
                status=qs.PENDING,
                submitted_at=now,
                organization_id=request.organization_id,
            )
        )
        write_quote_log(store, quote, action, new_amount=amount, new_description=description)

    logger.info(
        f"Quote #{quote.id} {action} by contractor {contractor.id} "
        f"for request #{request_id}: ${amount:,.2f}"
    )

    await notify_managers(
        store, gateway, request.organization_id,
        build_submitted_message(quote, contractor, request),
        email_kind="submitted", request=request, quote=quote,
    )
    return quote
