"""
dependencies.py — Shared FastAPI Dependencies

Reusable dependency functions for authentication and authorization.
All routers import from here instead of defining their own auth logic.

Business Rules:
- get_user returns None if not logged in (non-throwing)
- require_user raises 401 if not logged in, 403 if deactivated
- require_manager raises 403 if user is not manager/admin
- require_contractor raises 403 if user.role != "contractor"

Called by: all routers
Depends on: models, database
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import get_db
from .models import User

log = logging.getLogger(__name__)


# ── Authentication ────────────────────────────────────────────────────


def get_user(request: Request, db: Session) -> User | None:
    """Return current user from session, or None if not logged in."""
    uid = request.session.get("user_id")
    if not uid:
        return None
    try:
        return db.get(User, uid)
    except SQLAlchemyError as e:
        log.warning("Session user %s could not be loaded: %s", uid, e)
        request.session.clear()
        return None


def require_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency: raises 401 if no authenticated user, 403 if deactivated."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Not authenticated")
    if not getattr(user, "is_active", True):
        request.session.clear()
        raise HTTPException(403, "Account deactivated, contact your manager")
    return user


# ── Role checks ───────────────────────────────────────────────────────


def is_manager(user: User) -> bool:
    return user.role in ("manager", "admin")


def require_manager(user: User = Depends(require_user)) -> User:
    """Dependency: quote requests, approvals and reports are manager-only."""
    if not is_manager(user):
        raise HTTPException(403, "Manager role required for this action")
    return user


def require_contractor(user: User = Depends(require_user)) -> User:
    """Dependency: only contractors submit quotes."""
    if user.role != "contractor":
        raise HTTPException(403, "Contractor role required for this action")
    return user
