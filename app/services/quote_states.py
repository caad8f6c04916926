"""
quote_states.py — Quote status machine and audit-action rules.

Business Rules:
- requested → pending → {approved | rejected}
- A manager may re-request a quote that is requested, pending or rejected
- A contractor may resubmit after rejection (rejected → pending)
- approved is final; only a re-entrant approve (approved → approved) is allowed
- Submissions are logged as "resubmitted" when the prior status was pending or
  rejected, "updated" when it was requested, "created" when no quote existed
- Quotes are first written with a placeholder amount of 1 until a real bid exists
- Once a request has an approved quote, every other quote on it is closed
  to new requests, submissions and approvals (RequestClosedError)

Called by: quote_request_service, quote_submission_service, quote_approval_service
Depends on: quote_errors, models.quotes
"""

from decimal import Decimal

from ..models import Quote
from .quote_errors import InvalidTransitionError, RequestClosedError

REQUESTED = "requested"
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

QUOTE_STATUSES = (REQUESTED, PENDING, APPROVED, REJECTED)

PLACEHOLDER_AMOUNT = Decimal("1")
DEFAULT_REQUEST_NOTE = "Quote requested"

# Audit actions written to quote_logs
ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_RESUBMITTED = "resubmitted"
ACTION_QUOTE_REQUESTED = "quote_requested"
ACTION_REJECTED = "rejected"

# Request statuses touched by the workflow
REQUEST_IN_PROGRESS = "in-progress"

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    REQUESTED: frozenset({REQUESTED, PENDING}),
    PENDING: frozenset({REQUESTED, PENDING, APPROVED, REJECTED}),
    REJECTED: frozenset({REQUESTED, PENDING}),
    APPROVED: frozenset({APPROVED}),
}


def can_transition(current: str | None, target: str) -> bool:
    """True if a quote in ``current`` status may move to ``target``.

    ``None`` means no quote row exists yet; only requested/pending can be created.
    """
    if current is None:
        return target in (REQUESTED, PENDING)
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def check_transition(quote_id, current: str | None, target: str) -> None:
    """Raise InvalidTransitionError unless ``current`` → ``target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(quote_id, current or "none", target)


def submission_action(prior_status: str | None) -> str:
    """Audit action for a contractor submission given the quote's prior status."""
    if prior_status is None:
        return ACTION_CREATED
    if prior_status in (PENDING, REJECTED):
        return ACTION_RESUBMITTED
    return ACTION_UPDATED


def request_note(notes: str | None) -> str:
    """Description stored on a requested quote — the manager's notes or the default."""
    notes = (notes or "").strip()
    return notes or DEFAULT_REQUEST_NOTE


def ensure_request_open(store, request_id: int, quote_id: int | None = None) -> None:
    """Raise RequestClosedError if a quote other than ``quote_id`` is already approved."""
    criteria = [Quote.request_id == request_id, Quote.status == APPROVED]
    if quote_id is not None:
        criteria.append(Quote.id != quote_id)
    winners = store.find(Quote, *criteria)
    if winners:
        raise RequestClosedError(
            f"Request #{request_id} is already assigned through quote #{winners[0].id}"
        )
