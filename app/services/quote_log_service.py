"""Quote audit trail — append-only quote_logs writes and read-side history.

Log writes are decoupled from the transition they record: a failed insert is
logged and swallowed so it never blocks or undoes the quote change itself.
The table is append-only: no update or delete helper exists.
"""

from decimal import Decimal

from loguru import logger

from ..models import Quote, QuoteLog
from .quote_errors import NotFoundError, StoreError
from .quote_store import QuoteStore


def write_quote_log(
    store: QuoteStore,
    quote: Quote,
    action: str,
    *,
    old_amount: Decimal | None = None,
    new_amount: Decimal | None = None,
    old_description: str | None = None,
    new_description: str | None = None,
) -> QuoteLog | None:
    """Append one audit row for ``quote``. Returns None if the insert failed."""
    try:
        return store.insert(
            QuoteLog(
                quote_id=quote.id,
                contractor_id=quote.contractor_id,
                action=action,
                old_amount=old_amount,
                new_amount=new_amount,
                old_description=old_description,
                new_description=new_description,
                organization_id=quote.organization_id,
            )
        )
    except StoreError as e:
        logger.warning(f"Quote log '{action}' for quote #{quote.id} not written: {e}")
        return None


def quote_history(store: QuoteStore, quote_id: int) -> list[QuoteLog]:
    """All audit rows for a quote, oldest first."""
    if not store.get(Quote, quote_id):
        raise NotFoundError(f"Quote #{quote_id} not found")
    return store.find(QuoteLog, QuoteLog.quote_id == quote_id, order_by=QuoteLog.id)


def list_request_quotes(store: QuoteStore, request_id: int) -> list[Quote]:
    """Every quote on a maintenance request, newest first."""
    return store.find(Quote, Quote.request_id == request_id, order_by=Quote.id.desc())
