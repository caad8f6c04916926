"""
test_quote_log_service.py -- Unit tests for app/services/quote_log_service.py

Audit-row writes (non-fatal on failure) and the read-side helpers
quote_history / list_request_quotes.

Called by: pytest
Depends on: app/services/quote_log_service.py, conftest.py
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from app.models import QuoteLog
from app.services.quote_errors import NotFoundError, StoreError
from app.services.quote_log_service import list_request_quotes, quote_history, write_quote_log


class TestWriteQuoteLog:
    def test_copies_quote_identity(self, store, contractor_a, make_quote):
        q = make_quote(contractor_a)
        log = write_quote_log(store, q, "updated", old_amount=Decimal("1"), new_amount=Decimal("90"))
        assert log.quote_id == q.id
        assert log.contractor_id == contractor_a.id
        assert log.organization_id == q.organization_id
        assert log.new_amount == Decimal("90.00")

    def test_failure_returns_none(self, store, db_session, contractor_a, make_quote):
        q = make_quote(contractor_a)
        with patch.object(store, "insert", side_effect=StoreError("audit down")):
            assert write_quote_log(store, q, "rejected") is None
        assert db_session.query(QuoteLog).count() == 0


class TestQuoteHistory:
    def test_oldest_first(self, store, contractor_a, make_quote):
        q = make_quote(contractor_a)
        write_quote_log(store, q, "quote_requested")
        write_quote_log(store, q, "updated")
        write_quote_log(store, q, "resubmitted")
        assert [log.action for log in quote_history(store, q.id)] == [
            "quote_requested", "updated", "resubmitted",
        ]

    def test_missing_quote(self, store):
        with pytest.raises(NotFoundError):
            quote_history(store, 1234)


class TestListRequestQuotes:
    def test_newest_first(self, store, maintenance_request, contractor_a, contractor_b, make_quote):
        qa = make_quote(contractor_a)
        qb = make_quote(contractor_b)
        assert [q.id for q in list_request_quotes(store, maintenance_request.id)] == [qb.id, qa.id]

    def test_empty_request(self, store, maintenance_request):
        assert list_request_quotes(store, maintenance_request.id) == []
