"""
quote_store.py — Data-store interface for the quote workflow.

Thin wrapper over a SQLAlchemy Session exposing the five operations the
workflow needs: get-by-id, get-by-filter (equality / IN), insert,
update-by-id and update-by-filter (batch).

Business Rules:
- Every write commits on its own — multi-step operations are a sequence of
  independent round trips, not one transaction
- Any SQLAlchemy failure rolls the session back and surfaces as StoreError,
  so callers can classify it as fatal or non-fatal
- Tenant isolation is left to the database (organization_id on every row)

Called by: all quote services, routers/quotes.py, routers/notifications.py
Depends on: models, quote_errors
"""

from typing import Any

from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .quote_errors import StoreError


class QuoteStore:
    """Row-level CRUD against the shared relational store."""

    def __init__(self, db: Session):
        self.db = db

    # ── Reads ──────────────────────────────────────────────────────────

    def get(self, model, row_id) -> Any | None:
        """Fetch one row by primary key, or None."""
        if row_id is None:
            return None
        try:
            return self.db.get(model, row_id)
        except SQLAlchemyError as e:
            self._fail(f"get {model.__tablename__}#{row_id}", e)

    def find_one(self, model, **equals) -> Any | None:
        """First row matching all equality filters, or None."""
        try:
            return self.db.query(model).filter_by(**equals).first()
        except SQLAlchemyError as e:
            self._fail(f"find_one {model.__tablename__} {equals}", e)

    def find(self, model, *criteria, order_by=None, **equals) -> list:
        """All rows matching SQLAlchemy criteria (e.g. Quote.id.in_(ids)) and equality filters."""
        try:
            query = self.db.query(model)
            if criteria:
                query = query.filter(*criteria)
            if equals:
                query = query.filter_by(**equals)
            if order_by is not None:
                query = query.order_by(order_by)
            return query.all()
        except SQLAlchemyError as e:
            self._fail(f"find {model.__tablename__}", e)

    # ── Writes ─────────────────────────────────────────────────────────

    def insert(self, row):
        """Insert a new row and commit. Returns the refreshed row."""
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return row
        except SQLAlchemyError as e:
            self._fail(f"insert {row.__tablename__}", e)

    def update(self, row, **values):
        """Update one loaded row by id and commit."""
        try:
            for key, value in values.items():
                setattr(row, key, value)
            self.db.commit()
            self.db.refresh(row)
            return row
        except SQLAlchemyError as e:
            self._fail(f"update {row.__tablename__}#{getattr(row, 'id', '?')}", e)

    def update_where(self, model, criteria: list, values: dict) -> int:
        """Batch-update all rows matching criteria in one statement. Returns rows affected."""
        try:
            result = self.db.execute(
                update(model)
                .where(*criteria)
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
            self.db.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            self._fail(f"update_where {model.__tablename__}", e)

    # ── Internals ──────────────────────────────────────────────────────

    def _fail(self, operation: str, exc: Exception):
        self.db.rollback()
        logger.error(f"Store operation failed: {operation}: {exc}")
        raise StoreError(f"{operation} failed: {exc}") from exc
