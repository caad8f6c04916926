"""initial schema - tenants, properties, contractors, requests, quotes, notifications

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

For EXISTING databases: run `alembic stamp 001_initial` (skip DDL, just mark as current).
For NEW databases: run `alembic upgrade head`.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(), server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        _timestamp(),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255)),
        sa.Column("role", sa.String(20), nullable=False, server_default="resident"),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        _timestamp(),
    )
    op.create_index("ix_users_org_role", "users", ["organization_id", "role"])

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("contact_number", sa.String(50)),
        sa.Column("email", sa.String(255)),
        sa.Column("practice_leader", sa.String(255)),
        sa.Column("practice_leader_email", sa.String(255)),
        sa.Column("practice_leader_phone", sa.String(50)),
        sa.Column("landlord_name", sa.String(255)),
        sa.Column("landlord_email", sa.String(255)),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        _timestamp(),
    )
    op.create_index("ix_properties_org", "properties", ["organization_id"])

    op.create_table(
        "contractors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("contact_name", sa.String(255)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("address", sa.String(500)),
        sa.Column("specialties", sa.JSON()),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        _timestamp(),
    )
    op.create_index("ix_contractors_user", "contractors", ["user_id"])
    op.create_index("ix_contractors_org", "contractors", ["organization_id"])

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("location", sa.String(255)),
        sa.Column("priority", sa.String(20), server_default="medium"),
        sa.Column("status", sa.String(20), server_default="pending"),
        sa.Column("attachments", sa.JSON()),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id")),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id")),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("quote_requested", sa.Boolean(), server_default=sa.false()),
        sa.Column("quoted_amount", sa.Numeric(12, 2)),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        sa.Column("assigned_at", sa.DateTime()),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_requests_org_status", "maintenance_requests", ["organization_id", "status"])
    op.create_index("ix_requests_property", "maintenance_requests", ["property_id"])
    op.create_index("ix_requests_contractor", "maintenance_requests", ["contractor_id"])

    op.create_table(
        "quotes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "request_id", sa.Integer(),
            sa.ForeignKey("maintenance_requests.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(20), server_default="requested"),
        sa.Column("submitted_at", sa.DateTime()),
        sa.Column("approved_at", sa.DateTime()),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        _timestamp(),
        _timestamp("updated_at"),
        sa.UniqueConstraint("request_id", "contractor_id", name="uq_quotes_request_contractor"),
    )
    op.create_index("ix_quotes_request_status", "quotes", ["request_id", "status"])
    op.create_index("ix_quotes_contractor", "quotes", ["contractor_id"])

    op.create_table(
        "quote_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "quote_id", sa.Integer(),
            sa.ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("contractor_id", sa.Integer(), sa.ForeignKey("contractors.id"), nullable=False),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("old_amount", sa.Numeric(12, 2)),
        sa.Column("new_amount", sa.Numeric(12, 2)),
        sa.Column("old_description", sa.Text()),
        sa.Column("new_description", sa.Text()),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        _timestamp(),
    )
    op.create_index("ix_quote_logs_quote", "quote_logs", ["quote_id"])
    op.create_index("ix_quote_logs_quote_action", "quote_logs", ["quote_id", "action"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), server_default="info"),
        sa.Column("link", sa.String(500)),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false()),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id")),
        _timestamp(),
    )
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])


def downgrade() -> None:
    """Drop all tables. ⚠️ DESTRUCTIVE — only for dev/test environments."""
    for table in (
        "notifications",
        "quote_logs",
        "quotes",
        "maintenance_requests",
        "contractors",
        "properties",
        "users",
        "organizations",
    ):
        op.drop_table(table)
