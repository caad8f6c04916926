"""
routers/quotes.py — Quote Lifecycle Routes

Manager asks contractors for quotes, contractors submit bids, manager
approves one (rejecting the rest and assigning the job) or rejects a
single bid. Also exposes the quote audit trail and the landlord report.

Business Rules:
- Quote requests, approvals, rejections and landlord reports are manager-only
- Quote submission is contractor-only; the contractor is resolved from the user
- Every request/quote must belong to the caller's organization (403 otherwise)
- Contractors listing a request's quotes only see their own; other roles get 403
- Workflow errors are raised as QuoteWorkflowError and rendered by main.py

Called by: main.py (router mount)
Depends on: services.quote_*, services.landlord_report, dependencies, schemas.quotes
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import is_manager, require_contractor, require_manager, require_user
from ..models import MaintenanceRequest, Quote, QuoteLog, User
from ..schemas.quotes import LandlordReportRequest, QuoteRequestCreate, QuoteSubmit
from ..services.landlord_report import send_landlord_report
from ..services.notification_service import NotificationGateway
from ..services.quote_approval_service import approve_quote, reject_quote
from ..services.quote_errors import NotFoundError, TenantMismatchError
from ..services.quote_log_service import list_request_quotes, quote_history
from ..services.quote_request_service import request_quote
from ..services.quote_store import QuoteStore
from ..services.quote_submission_service import contractor_for_user, submit_quote

router = APIRouter(tags=["quotes"])


def quote_to_dict(q: Quote) -> dict:
    return {
        "id": q.id,
        "request_id": q.request_id,
        "contractor_id": q.contractor_id,
        "contractor_name": q.contractor.company_name if q.contractor else None,
        "amount": float(q.amount) if q.amount is not None else None,
        "description": q.description,
        "status": q.status,
        "submitted_at": q.submitted_at.isoformat() if q.submitted_at else None,
        "approved_at": q.approved_at.isoformat() if q.approved_at else None,
        "organization_id": q.organization_id,
    }


def _log_to_dict(log: QuoteLog) -> dict:
    return {
        "id": log.id,
        "quote_id": log.quote_id,
        "contractor_id": log.contractor_id,
        "action": log.action,
        "old_amount": float(log.old_amount) if log.old_amount is not None else None,
        "new_amount": float(log.new_amount) if log.new_amount is not None else None,
        "old_description": log.old_description,
        "new_description": log.new_description,
        "created_at": log.created_at.isoformat() if log.created_at else None,
    }


def _services(db: Session) -> tuple[QuoteStore, NotificationGateway]:
    store = QuoteStore(db)
    return store, NotificationGateway(store)


def _check_org(user: User, organization_id: int | None, what: str) -> None:
    if organization_id != user.organization_id:
        raise TenantMismatchError(f"{what} belongs to another organization")


def _request_for(store: QuoteStore, user: User, request_id: int) -> MaintenanceRequest:
    req = store.get(MaintenanceRequest, request_id)
    if not req:
        raise NotFoundError(f"Maintenance request #{request_id} not found")
    _check_org(user, req.organization_id, f"Maintenance request #{request_id}")
    return req


def _quote_for(store: QuoteStore, user: User, quote_id: int) -> Quote:
    quote = store.get(Quote, quote_id)
    if not quote:
        raise NotFoundError(f"Quote #{quote_id} not found")
    _check_org(user, quote.organization_id, f"Quote #{quote_id}")
    return quote


# ── Quote requests ────────────────────────────────────────────────────


@router.post("/api/requests/{request_id}/quote-requests")
async def create_quote_request(
    request_id: int,
    body: QuoteRequestCreate,
    user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Ask a contractor to quote on a maintenance request."""
    store, gateway = _services(db)
    _request_for(store, user, request_id)
    quote = await request_quote(
        store, gateway, request_id, body.contractor_id,
        include_info=body.include_info.to_include_info(),
        notes=body.notes,
    )
    return quote_to_dict(quote)


# ── Submissions ───────────────────────────────────────────────────────


@router.post("/api/requests/{request_id}/quotes")
async def submit_request_quote(
    request_id: int,
    body: QuoteSubmit,
    user: User = Depends(require_contractor),
    db: Session = Depends(get_db),
):
    """Contractor submits or revises their bid."""
    store, gateway = _services(db)
    quote = await submit_quote(store, gateway, user, request_id, body.amount, body.description)
    return quote_to_dict(quote)


@router.get("/api/requests/{request_id}/quotes")
async def get_request_quotes(
    request_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    store, _ = _services(db)
    _request_for(store, user, request_id)
    if not is_manager(user) and user.role != "contractor":
        raise HTTPException(403, "Only managers and contractors can view quotes")
    quotes = list_request_quotes(store, request_id)
    if not is_manager(user):
        contractor = contractor_for_user(store, user)
        quotes = [q for q in quotes if q.contractor_id == contractor.id]
    return [quote_to_dict(q) for q in quotes]


# ── Approval / rejection ──────────────────────────────────────────────


@router.put("/api/quotes/{quote_id}/approve")
async def approve_request_quote(
    quote_id: int,
    user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Approve a quote: reject competing bids and assign the contractor."""
    store, gateway = _services(db)
    _quote_for(store, user, quote_id)
    result = await approve_quote(store, gateway, quote_id)
    return {"ok": True, "quote": quote_to_dict(result.quote), **result.to_dict()}


@router.put("/api/quotes/{quote_id}/reject")
async def reject_request_quote(
    quote_id: int,
    user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    store, gateway = _services(db)
    _quote_for(store, user, quote_id)
    quote = await reject_quote(store, gateway, quote_id)
    return {"ok": True, "quote": quote_to_dict(quote)}


@router.get("/api/quotes/{quote_id}/logs")
async def get_quote_logs(
    quote_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Audit trail for one quote, oldest first."""
    store, _ = _services(db)
    quote = _quote_for(store, user, quote_id)
    if not is_manager(user) and contractor_for_user(store, user).id != quote.contractor_id:
        raise TenantMismatchError(f"Quote #{quote_id} belongs to another contractor")
    return [_log_to_dict(log) for log in quote_history(store, quote_id)]


# ── Landlord report ───────────────────────────────────────────────────


@router.post("/api/requests/{request_id}/landlord-report")
async def post_landlord_report(
    request_id: int,
    body: LandlordReportRequest,
    user: User = Depends(require_manager),
    db: Session = Depends(get_db),
):
    store, gateway = _services(db)
    _request_for(store, user, request_id)
    sent = await send_landlord_report(
        store, gateway, request_id,
        landlord_email=body.landlord_email,
        options=body.options.to_options(),
    )
    return {"ok": sent, "sent": sent}
