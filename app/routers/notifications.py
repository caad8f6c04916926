"""
routers/notifications.py — In-app Notification Inbox

Business Rules:
- Users only ever see and update their own notifications
- Marking someone else's (or a missing) notification read returns 404

Called by: main.py (router mount)
Depends on: services.notification_service, dependencies
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import Notification, User
from ..services.notification_service import list_notifications, mark_notification_read
from ..services.quote_store import QuoteStore

router = APIRouter(tags=["notifications"])


def _notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "link": n.link,
        "is_read": bool(n.is_read),
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@router.get("/api/notifications")
async def get_notifications(
    unread_only: bool = False,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    rows = list_notifications(QuoteStore(db), user.id, unread_only=unread_only)
    return {
        "items": [_notification_to_dict(n) for n in rows],
        "unread": sum(1 for n in rows if not n.is_read),
    }


@router.put("/api/notifications/{notification_id}/read")
async def read_notification(
    notification_id: int,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    row = mark_notification_read(QuoteStore(db), user.id, notification_id)
    if not row:
        raise HTTPException(404, "Notification not found")
    return _notification_to_dict(row)
