"""
quote_approval_service.py — Approve one quote, reject its competitors, assign the job.

approve_quote() is the only multi-row, multi-entity operation in the workflow.
It runs as a sequence of independent store writes (no wrapping transaction),
ordered so that any partial failure leaves the safest state:

  1. load quote                          fatal (NotFoundError)
  2. load property details               best-effort
  3. find other pending quotes (siblings)
  4. quote → approved, approved_at=now   FATAL — nothing else touched on failure
  5. batch-reject siblings               non-fatal; then log + notify only the
                                          siblings the batch actually rejected,
                                          each iteration isolated
  6. assign request to the contractor    FATAL — quote is already approved
  7. notify the winning contractor       best-effort

Business Rules:
- Re-approving an approved quote re-runs the steps; already-rejected siblings
  are excluded by the status=pending filter so no duplicate "rejected" logs
- A request that already has a different approved quote is closed
  (RequestClosedError); two concurrent approvals are not prevented (see DESIGN.md)
- reject_quote() lets a manager turn down a single pending quote

Called by: routers/quotes.py
Depends on: quote_store, quote_states, quote_log_service, quote_notifications
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from ..models import MaintenanceRequest, Quote
from . import quote_states as qs
from .notification_service import NotificationGateway
from .quote_errors import NotFoundError, QuoteWorkflowError, StoreError
from .quote_log_service import write_quote_log
from .quote_notifications import (
    NotificationOutcome,
    build_assignment_message,
    build_rejection_message,
    fetch_property_details,
    notify_contractor,
)
from .quote_store import QuoteStore


@dataclass
class ApprovalResult:
    quote: Quote
    request_id: int
    rejected_quote_ids: list[int] = field(default_factory=list)
    siblings_rejection_failed: bool = False
    rejection_notices: list[NotificationOutcome] = field(default_factory=list)
    assignment_notice: NotificationOutcome | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "quote_id": self.quote.id,
            "request_id": self.request_id,
            "status": self.quote.status,
            "rejected_quote_ids": self.rejected_quote_ids,
            "siblings_rejection_failed": self.siblings_rejection_failed,
            "rejection_notices": [n.to_dict() for n in self.rejection_notices],
            "assignment_notice": self.assignment_notice.to_dict() if self.assignment_notice else None,
            "warnings": self.warnings,
        }


async def approve_quote(store: QuoteStore, gateway: NotificationGateway, quote_id: int) -> ApprovalResult:
    """Approve a quote and assign its contractor to the maintenance request."""
    # 1. Target quote
    quote = store.get(Quote, quote_id)
    if not quote:
        raise NotFoundError(f"Quote #{quote_id} not found")
    qs.check_transition(quote.id, quote.status, qs.APPROVED)
    qs.ensure_request_open(store, quote.request_id, quote.id)

    request_id = quote.request_id
    contractor_id = quote.contractor_id
    amount = quote.amount
    result = ApprovalResult(quote=quote, request_id=request_id)

    # 2. Notification context, never blocks the approval
    request = None
    try:
        request = store.get(MaintenanceRequest, request_id)
    except QuoteWorkflowError as e:
        result.warnings.append(f"Request details unavailable: {e}")
    details = fetch_property_details(store, request)

    # 3. Competing bids
    siblings = store.find(
        Quote,
        Quote.request_id == request_id,
        Quote.status == qs.PENDING,
        Quote.id != quote_id,
    )
    sibling_ids = [s.id for s in siblings]

    # 4. The authoritative transition
    try:
        quote = store.update(quote, status=qs.APPROVED, approved_at=datetime.now(timezone.utc))
    except StoreError:
        logger.error(f"Approval of quote #{quote_id} failed, no siblings or request touched")
        raise
    result.quote = quote
    logger.info(f"Quote #{quote_id} approved for request #{request_id} (contractor {contractor_id})")

    # 5. Reject siblings in one batch, then log + notify each one independently
    if sibling_ids:
        try:
            store.update_where(
                Quote,
                [Quote.id.in_(sibling_ids), Quote.status == qs.PENDING],
                {"status": qs.REJECTED, "updated_at": datetime.now(timezone.utc)},
            )
            # Siblings that left "pending" before the batch ran were not touched
            rejected = store.find(
                Quote, Quote.id.in_(sibling_ids), Quote.status == qs.REJECTED, order_by=Quote.id
            )
        except StoreError as e:
            result.siblings_rejection_failed = True
            result.warnings.append(f"Competing quotes were not rejected: {e}")
            logger.warning(f"Quote #{quote_id} approved but rejecting {sibling_ids} failed: {e}")
        else:
            result.rejected_quote_ids = [s.id for s in rejected]
            skipped = sorted(set(sibling_ids) - set(result.rejected_quote_ids))
            if skipped:
                logger.warning(f"Quotes {skipped} changed status during approval of #{quote_id}, not rejected")
            rejection_msg = build_rejection_message(request_id, details)
            for sibling in rejected:
                result.rejection_notices.append(
                    await _record_rejection(store, gateway, sibling, rejection_msg, request, details)
                )
            logger.info(f"Rejected {len(rejected)} competing quote(s) on request #{request_id}")

    # 6. Assignment is authoritative for the request
    if request is None:
        request = store.get(MaintenanceRequest, request_id)
    if request is None:
        raise NotFoundError(
            f"Quote #{quote_id} approved but maintenance request #{request_id} not found"
        )
    try:
        request = store.update(
            request,
            contractor_id=contractor_id,
            quoted_amount=amount,
            status=qs.REQUEST_IN_PROGRESS,
            assigned_at=datetime.now(timezone.utc),
        )
    except StoreError as e:
        logger.error(f"Quote #{quote_id} approved but assigning request #{request_id} failed: {e}")
        raise StoreError(
            f"Quote #{quote_id} was approved but request #{request_id} could not be assigned: {e}"
        ) from e

    # 7. Tell the winner
    result.assignment_notice = await notify_contractor(
        store, gateway, contractor_id,
        build_assignment_message(request_id, details),
        email_kind="assigned", request=request, details=details, quote=quote,
    )
    if not result.assignment_notice.notified:
        result.warnings.append(f"Contractor {contractor_id} was not notified of the assignment")

    return result


async def _record_rejection(
    store: QuoteStore,
    gateway: NotificationGateway,
    sibling: Quote,
    msg,
    request: MaintenanceRequest | None,
    details,
) -> NotificationOutcome:
    """Audit + notify one rejected sibling. Never raises."""
    write_quote_log(store, sibling, qs.ACTION_REJECTED)
    return await notify_contractor(
        store, gateway, sibling.contractor_id, msg,
        email_kind="rejected", request=request, details=details,
    )


async def reject_quote(store: QuoteStore, gateway: NotificationGateway, quote_id: int) -> Quote:
    """Manager turns down a single pending quote without approving another."""
    quote = store.get(Quote, quote_id)
    if not quote:
        raise NotFoundError(f"Quote #{quote_id} not found")
    qs.check_transition(quote.id, quote.status, qs.REJECTED)

    quote = store.update(quote, status=qs.REJECTED)
    logger.info(f"Quote #{quote_id} rejected")
    write_quote_log(store, quote, qs.ACTION_REJECTED)

    request = None
    try:
        request = store.get(MaintenanceRequest, quote.request_id)
    except QuoteWorkflowError as e:
        logger.warning(f"Request #{quote.request_id} unavailable for rejection notice: {e}")
    details = fetch_property_details(store, request)
    await notify_contractor(
        store, gateway, quote.contractor_id,
        build_rejection_message(quote.request_id, details),
        email_kind="rejected", request=request, details=details,
    )
    return quote
