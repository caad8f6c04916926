"""
conftest.py — Shared Test Fixtures for HousingHub

Provides an in-memory SQLite database, FastAPI TestClient with auth
overrides, and factory fixtures for the quote workflow (organization,
manager, contractors, property, maintenance request).

Business Rules:
- All tests run against isolated in-memory DB (no prod data risk)
- Auth is overridden so tests don't need a session cookie
- Each test function gets a fresh DB (tables created and dropped)

Called by: all test files via pytest autodiscovery
Depends on: app.models (Base), app.database (get_db), app.dependencies
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("RESEND_API_KEY", "")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import (
    Base,
    Contractor,
    MaintenanceRequest,
    Organization,
    Property,
    Quote,
    User,
)
from app.services.notification_service import NotificationGateway
from app.services.quote_store import QuoteStore

# ── In-memory SQLite engine ──────────────────────────────────────────

TEST_DB_URL = "sqlite://"  # in-memory, fresh per session

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs by default — turn them on."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _save(db: Session, row):
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture()
def organization(db_session: Session) -> Organization:
    return _save(db_session, Organization(name="Northside Housing"))


@pytest.fixture()
def other_organization(db_session: Session) -> Organization:
    return _save(db_session, Organization(name="Southbank Lettings"))


@pytest.fixture()
def manager_user(db_session: Session, organization: Organization) -> User:
    """A manager-role user for quote requests and approvals."""
    return _save(db_session, User(
        email="manager@northside.test",
        name="Morgan Manager",
        role="manager",
        organization_id=organization.id,
        created_at=datetime.now(timezone.utc),
    ))


@pytest.fixture()
def resident_user(db_session: Session, organization: Organization) -> User:
    return _save(db_session, User(
        email="resident@northside.test",
        name="Riley Resident",
        role="resident",
        organization_id=organization.id,
    ))


def _make_contractor(db: Session, org: Organization, slug: str, company: str) -> Contractor:
    user = _save(db, User(
        email=f"{slug}@contractors.test",
        name=f"{company} Owner",
        role="contractor",
        organization_id=org.id,
    ))
    return _save(db, Contractor(
        user_id=user.id,
        company_name=company,
        contact_name=f"{company} Owner",
        email=f"{slug}@contractors.test",
        phone="+44 20 7946 0000",
        specialties=["plumbing"],
        organization_id=org.id,
    ))


@pytest.fixture()
def contractor_a(db_session: Session, organization: Organization) -> Contractor:
    return _make_contractor(db_session, organization, "alpha", "Alpha Plumbing")


@pytest.fixture()
def contractor_b(db_session: Session, organization: Organization) -> Contractor:
    return _make_contractor(db_session, organization, "bravo", "Bravo Builders")


@pytest.fixture()
def contractor_c(db_session: Session, organization: Organization) -> Contractor:
    return _make_contractor(db_session, organization, "charlie", "Charlie Electrical")


@pytest.fixture()
def outside_contractor(db_session: Session, other_organization: Organization) -> Contractor:
    """A contractor from a different tenant."""
    return _make_contractor(db_session, other_organization, "outsider", "Outsider Ltd")


@pytest.fixture()
def contractor_user_a(db_session: Session, contractor_a: Contractor) -> User:
    return db_session.get(User, contractor_a.user_id)


@pytest.fixture()
def contractor_user_b(db_session: Session, contractor_b: Contractor) -> User:
    return db_session.get(User, contractor_b.user_id)


@pytest.fixture()
def test_property(db_session: Session, organization: Organization) -> Property:
    return _save(db_session, Property(
        name="Maple Court",
        address="12 Maple Court, Leeds LS1 4AB",
        contact_number="0113 496 0000",
        email="site@maplecourt.test",
        practice_leader="Pat Leader",
        practice_leader_email="pat@northside.test",
        practice_leader_phone="0113 496 0001",
        landlord_name="Lee Landlord",
        landlord_email="landlord@maplecourt.test",
        organization_id=organization.id,
    ))


@pytest.fixture()
def maintenance_request(
    db_session: Session, organization: Organization, test_property: Property, resident_user: User
) -> MaintenanceRequest:
    """An open request with no quotes yet."""
    return _save(db_session, MaintenanceRequest(
        title="Leaking kitchen tap",
        description="Tap drips constantly, cabinet base is wet",
        location="Flat 3, kitchen",
        priority="high",
        status="pending",
        attachments=["https://files.test/tap-1.jpg", "https://files.test/tap-2.jpg"],
        property_id=test_property.id,
        user_id=resident_user.id,
        organization_id=organization.id,
        created_at=datetime.now(timezone.utc),
    ))


@pytest.fixture()
def make_quote(db_session: Session, maintenance_request: MaintenanceRequest):
    """Factory: insert a quote row directly in a given state."""

    def _make(contractor: Contractor, status: str = "pending", amount="250.00", request=None):
        req = request or maintenance_request
        return _save(db_session, Quote(
            request_id=req.id,
            contractor_id=contractor.id,
            amount=Decimal(str(amount)),
            description=f"{contractor.company_name} bid",
            status=status,
            submitted_at=datetime.now(timezone.utc),
            organization_id=req.organization_id,
        ))

    return _make


@pytest.fixture()
def store(db_session: Session) -> QuoteStore:
    return QuoteStore(db_session)


@pytest.fixture()
def gateway(store: QuoteStore) -> NotificationGateway:
    return NotificationGateway(store)


@pytest.fixture()
def current_user(manager_user: User) -> dict:
    """Mutable holder for the logged-in user; tests swap it to act as a contractor."""
    return {"user": manager_user}


@pytest.fixture()
def client(db_session: Session, current_user: dict) -> TestClient:
    """FastAPI TestClient with auth overridden to return current_user["user"].

    Overrides get_db to use the test session and require_user to
    skip the session cookie entirely.
    """
    from app.database import get_db
    from app.dependencies import require_user
    from app.main import app

    def _override_db():
        yield db_session

    def _override_user():
        return current_user["user"]

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[require_user] = _override_user

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
