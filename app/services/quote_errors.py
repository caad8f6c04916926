"""services/quote_errors.py — Exceptions raised by the quote workflow.

Routers map these to HTTP status codes in main.py:
    NotFoundError → 404, InvalidQuoteError → 400, TenantMismatchError → 403,
    InvalidTransitionError → 409, RequestClosedError → 409, StoreError → 500.
"""


class QuoteWorkflowError(Exception):
    """Base class for every failure the quote workflow reports to its caller."""

    status_code = 500


class NotFoundError(QuoteWorkflowError):
    """Referenced quote, request or contractor does not exist."""

    status_code = 404


class InvalidQuoteError(QuoteWorkflowError):
    """Caller supplied an unusable value (non-positive amount, missing recipient)."""

    status_code = 400


class TenantMismatchError(QuoteWorkflowError):
    """Rows from two different organizations were combined."""

    status_code = 403


class InvalidTransitionError(QuoteWorkflowError):
    """Quote status change not permitted by the state machine."""

    status_code = 409

    def __init__(self, quote_id, current: str, target: str):
        self.quote_id = quote_id
        self.current = current
        self.target = target
        super().__init__(f"Quote #{quote_id} cannot move from '{current}' to '{target}'")


class RequestClosedError(QuoteWorkflowError):
    """Maintenance request already has an approved quote from another contractor."""

    status_code = 409


class StoreError(QuoteWorkflowError):
    """A read or write against the data store failed."""

    status_code = 500
