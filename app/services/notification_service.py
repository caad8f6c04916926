"""
notification_service.py — In-app notifications and outbound email.

NotificationGateway is the only way the quote workflow talks to users:
- notify()     → inserts a row in the notifications table (per-user inbox)
- send_email() → posts an HTML email to the Resend API

Business Rules:
- Both operations are best-effort from the workflow's point of view — a
  failure must never undo a quote transition that already committed
- notify() raises StoreError so callers can log and isolate it per recipient
- send_email() never raises; it logs and returns False
- Without RESEND_API_KEY emails are skipped (debug log)

Called by: quote_notifications, landlord_report, routers/notifications.py
Depends on: http_client, config, models.Notification, quote_store
"""

from loguru import logger

from ..config import settings
from ..http_client import http
from ..models import Notification
from .quote_store import QuoteStore


class NotificationGateway:
    def __init__(self, store: QuoteStore):
        self.store = store

    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        link: str | None = None,
        type: str = "info",
        organization_id: int | None = None,
    ) -> Notification:
        """Create an in-app notification row for one user."""
        row = self.store.insert(
            Notification(
                user_id=user_id,
                title=title,
                message=message,
                link=link,
                type=type,
                organization_id=organization_id,
            )
        )
        logger.info(f"Notification '{title}' created for user {user_id}")
        return row

    async def send_email(self, to_address: str, subject: str, html_body: str) -> bool:
        """Send an HTML email via Resend. Returns True if the API accepted it."""
        if not settings.resend_api_key:
            logger.debug(f"Resend not configured — skipping email to {to_address}")
            return False
        if not to_address:
            logger.warning(f"No recipient for email '{subject}' — skipping")
            return False
        try:
            resp = await http.post(
                settings.resend_api_url,
                headers={
                    "Authorization": f"Bearer {settings.resend_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "from": settings.email_from,
                    "to": [to_address],
                    "subject": subject,
                    "html": html_body,
                },
                timeout=settings.email_timeout_seconds,
            )
            if resp.status_code not in (200, 201, 202):
                logger.warning(
                    f"Resend returned {resp.status_code} for {to_address}: {resp.text[:200]}"
                )
                return False
            logger.info(f"Email '{subject}' sent to {to_address}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {to_address}: {e}")
            return False


# ── Inbox reads ─────────────────────────────────────────────────────────


def list_notifications(store: QuoteStore, user_id: int, unread_only: bool = False) -> list[Notification]:
    """A user's notifications, newest first."""
    criteria = [Notification.user_id == user_id]
    if unread_only:
        criteria.append(Notification.is_read.is_(False))
    return store.find(Notification, *criteria, order_by=Notification.id.desc())


def mark_notification_read(store: QuoteStore, user_id: int, notification_id: int) -> Notification | None:
    """Mark one of the user's notifications read. None if it isn't theirs or doesn't exist."""
    row = store.get(Notification, notification_id)
    if not row or row.user_id != user_id:
        return None
    if row.is_read:
        return row
    return store.update(row, is_read=True)
