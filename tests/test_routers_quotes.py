"""
test_routers_quotes.py -- HTTP tests for app/routers/quotes.py and main.py error rendering

Exercises every quote endpoint through FastAPI TestClient with auth
overridden (see conftest.client / current_user).

Called by: pytest
Depends on: app/routers/quotes.py, app/main.py, conftest.py
"""

from unittest.mock import AsyncMock, patch

from app.models import MaintenanceRequest, Quote

_PATCH_SEND = "app.services.notification_service.NotificationGateway.send_email"


def _as(current_user, user):
    current_user["user"] = user


# ── Quote requests ───────────────────────────────────────────────────


class TestCreateQuoteRequest:
    def test_manager_requests_quote(self, client, maintenance_request, contractor_a):
        resp = client.post(
            f"/api/requests/{maintenance_request.id}/quote-requests",
            json={"contractor_id": contractor_a.id, "notes": "urgent", "include_info": {"location": True}},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "requested"
        assert data["amount"] == 1.0
        assert data["description"] == "urgent"
        assert data["contractor_name"] == "Alpha Plumbing"

    def test_contractor_cannot_request(self, client, current_user, contractor_user_a, maintenance_request, contractor_a):
        _as(current_user, contractor_user_a)
        resp = client.post(
            f"/api/requests/{maintenance_request.id}/quote-requests",
            json={"contractor_id": contractor_a.id},
        )
        assert resp.status_code == 403
        assert resp.json()["status_code"] == 403

    def test_cross_tenant_contractor(self, client, maintenance_request, outside_contractor):
        resp = client.post(
            f"/api/requests/{maintenance_request.id}/quote-requests",
            json={"contractor_id": outside_contractor.id},
        )
        assert resp.status_code == 403
        assert "organization" in resp.json()["error"]

    def test_missing_request(self, client, contractor_a):
        resp = client.post("/api/requests/999/quote-requests", json={"contractor_id": contractor_a.id})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Maintenance request #999 not found"
        assert body["request_id"]

    def test_validation_error_shape(self, client, maintenance_request):
        resp = client.post(
            f"/api/requests/{maintenance_request.id}/quote-requests",
            json={"notes": "no contractor"},
            headers={"X-Request-ID": "req-abc"},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["error"] == "Validation error"
        assert body["request_id"] == "req-abc"
        assert body["detail"][0]["loc"][-1] == "contractor_id"


# ── Submissions ──────────────────────────────────────────────────────


class TestSubmitQuote:
    def test_contractor_submits(self, client, current_user, contractor_user_a, maintenance_request):
        _as(current_user, contractor_user_a)
        resp = client.post(
            f"/api/requests/{maintenance_request.id}/quotes",
            json={"amount": "450.00", "description": " parts+labor "},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "pending"
        assert data["amount"] == 450.0
        assert data["description"] == "parts+labor"

    def test_zero_amount_rejected(self, client, current_user, contractor_user_a, maintenance_request):
        _as(current_user, contractor_user_a)
        resp = client.post(f"/api/requests/{maintenance_request.id}/quotes", json={"amount": 0})
        assert resp.status_code == 422

    def test_manager_cannot_submit(self, client, maintenance_request):
        resp = client.post(f"/api/requests/{maintenance_request.id}/quotes", json={"amount": 10})
        assert resp.status_code == 403

    def test_approved_quote_conflict(self, client, current_user, contractor_user_a, contractor_a, make_quote, maintenance_request):
        make_quote(contractor_a, status="approved")
        _as(current_user, contractor_user_a)
        resp = client.post(f"/api/requests/{maintenance_request.id}/quotes", json={"amount": 99})
        assert resp.status_code == 409
        assert "cannot move from 'approved' to 'pending'" in resp.json()["error"]

    def test_assigned_request_rejects_other_bids(self, client, current_user, contractor_user_b, contractor_a, make_quote, maintenance_request):
        make_quote(contractor_a, status="approved")
        _as(current_user, contractor_user_b)
        resp = client.post(f"/api/requests/{maintenance_request.id}/quotes", json={"amount": 99})
        assert resp.status_code == 409
        assert "already assigned" in resp.json()["error"]


class TestListQuotes:
    def test_manager_sees_all(self, client, maintenance_request, contractor_a, contractor_b, make_quote):
        make_quote(contractor_a)
        make_quote(contractor_b)
        resp = client.get(f"/api/requests/{maintenance_request.id}/quotes")
        assert resp.status_code == 200
        assert len(resp.json()) == 2

    def test_contractor_sees_own(self, client, current_user, contractor_user_a, maintenance_request, contractor_a, contractor_b, make_quote):
        mine = make_quote(contractor_a)
        make_quote(contractor_b)
        _as(current_user, contractor_user_a)
        resp = client.get(f"/api/requests/{maintenance_request.id}/quotes")
        assert [q["id"] for q in resp.json()] == [mine.id]

    def test_resident_is_forbidden(self, client, current_user, resident_user, maintenance_request, contractor_a, make_quote):
        make_quote(contractor_a)
        _as(current_user, resident_user)
        resp = client.get(f"/api/requests/{maintenance_request.id}/quotes")
        assert resp.status_code == 403
        assert resp.json()["error"] == "Only managers and contractors can view quotes"


# ── Approval / rejection ─────────────────────────────────────────────


class TestApproveReject:
    def test_approve(self, client, db_session, maintenance_request, contractor_a, contractor_b, make_quote):
        q1 = make_quote(contractor_a, amount="500")
        q2 = make_quote(contractor_b, amount="700")
        resp = client.put(f"/api/quotes/{q1.id}/approve")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["quote"]["status"] == "approved"
        assert data["rejected_quote_ids"] == [q2.id]
        assert data["siblings_rejection_failed"] is False
        assert db_session.get(MaintenanceRequest, maintenance_request.id).status == "in-progress"

    def test_approve_requested_is_conflict(self, client, contractor_a, make_quote):
        q = make_quote(contractor_a, status="requested")
        resp = client.put(f"/api/quotes/{q.id}/approve")
        assert resp.status_code == 409

    def test_approve_missing(self, client):
        assert client.put("/api/quotes/31337/approve").status_code == 404

    def test_contractor_cannot_approve(self, client, current_user, contractor_user_a, contractor_a, make_quote):
        q = make_quote(contractor_a)
        _as(current_user, contractor_user_a)
        assert client.put(f"/api/quotes/{q.id}/approve").status_code == 403

    def test_store_failure_is_500(self, client, contractor_a, make_quote):
        from app.services.quote_errors import StoreError

        q = make_quote(contractor_a)
        with patch("app.services.quote_store.QuoteStore.update", side_effect=StoreError("db down")):
            resp = client.put(f"/api/quotes/{q.id}/approve")
        assert resp.status_code == 500
        assert resp.json()["error"] == "db down"

    def test_reject(self, client, db_session, contractor_a, make_quote):
        q = make_quote(contractor_a)
        resp = client.put(f"/api/quotes/{q.id}/reject")
        assert resp.status_code == 200
        assert db_session.get(Quote, q.id).status == "rejected"


# ── Audit trail ──────────────────────────────────────────────────────


class TestQuoteLogs:
    def test_history_after_request_and_submit(self, client, current_user, contractor_user_a, maintenance_request, contractor_a, manager_user):
        client.post(
            f"/api/requests/{maintenance_request.id}/quote-requests",
            json={"contractor_id": contractor_a.id},
        )
        _as(current_user, contractor_user_a)
        quote = client.post(
            f"/api/requests/{maintenance_request.id}/quotes", json={"amount": 450, "description": "parts+labor"}
        ).json()

        _as(current_user, manager_user)
        logs = client.get(f"/api/quotes/{quote['id']}/logs").json()
        assert [log["action"] for log in logs] == ["quote_requested", "updated"]
        assert logs[1]["old_amount"] == 1.0
        assert logs[1]["new_amount"] == 450.0

    def test_other_contractor_cannot_read(self, client, current_user, contractor_user_b, contractor_a, make_quote):
        q = make_quote(contractor_a)
        _as(current_user, contractor_user_b)
        assert client.get(f"/api/quotes/{q.id}/logs").status_code == 403


# ── Landlord report ──────────────────────────────────────────────────


class TestLandlordReport:
    def test_sends_report(self, client, maintenance_request):
        with patch(_PATCH_SEND, new_callable=AsyncMock, return_value=True) as send:
            resp = client.post(
                f"/api/requests/{maintenance_request.id}/landlord-report",
                json={"options": {"photos": True}},
            )
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "sent": True}
        assert send.await_args.args[0] == "landlord@maplecourt.test"

    def test_bad_address_is_400(self, client, maintenance_request):
        resp = client.post(
            f"/api/requests/{maintenance_request.id}/landlord-report",
            json={"landlord_email": "nope"},
        )
        assert resp.status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
