# backend/tests/conftest.py
"""
Shared fixtures for the Digital Offices test-suite.

Tests run against in-memory SQLite: tables are created before and dropped
after every test. The Redis provider mutex is switched off so no Redis
server is needed; tests for the mutex turn it back on and fake the client.
"""

import os

# Must be set before anything from digital_offices is imported
os.environ["IS_TESTING"] = "true"
os.environ["PROVIDER_LOCK_ENABLED"] = "false"

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, Optional
import uuid

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from digital_offices.api.dependencies.database import get_db
from digital_offices.core.enums import RoleName
from digital_offices.database import Base, SessionLocal, engine
from digital_offices.domain.owner import ExpertOwner, OrganizationOwner
from digital_offices.main import app
from digital_offices.models import (
    Availability,
    Booking,
    BookingStatus,
    Expert,
    Organization,
    Service,
    User,
)
from tests.utils.builders import MONDAY_DOW, make_auth_headers


@pytest.fixture(scope="function")
def db():
    """Fresh schema and session for each test."""
    Base.metadata.create_all(bind=engine)
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session):
    """Create a test client bound to the test session."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Don't use context manager - create directly
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


def _email(prefix: str) -> str:
    return f"{prefix}.{uuid.uuid4().hex[:8]}@example.com"


@pytest.fixture
def test_user(db: Session) -> User:
    user = User(email=_email("client"), name="Casey Client")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def other_user(db: Session) -> User:
    user = User(email=_email("other"), name="Olive Other")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def test_expert(db: Session) -> Expert:
    expert = Expert(email=_email("expert"), name="Erin Expert")
    db.add(expert)
    db.commit()
    return expert


@pytest.fixture
def other_expert(db: Session) -> Expert:
    expert = Expert(email=_email("expert2"), name="Evan Expert")
    db.add(expert)
    db.commit()
    return expert


@pytest.fixture
def test_organization(db: Session) -> Organization:
    organization = Organization(
        email=_email("org"), name="Oscar Org", company_name="Acme Consulting"
    )
    db.add(organization)
    db.commit()
    return organization


@pytest.fixture
def expert_service(db: Session, test_expert: Expert) -> Service:
    """60 minute, 100.00 service owned by the test expert."""
    service = Service(
        owner=ExpertOwner(test_expert.id),
        title="Strategy Session",
        price=Decimal("100.00"),
        duration_min=60,
    )
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def organization_service(db: Session, test_organization: Organization) -> Service:
    service = Service(
        owner=OrganizationOwner(test_organization.id),
        title="Team Workshop",
        price=Decimal("250.00"),
        duration_min=30,
    )
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def monday_hours(db: Session, test_expert: Expert) -> Availability:
    """The test expert works Mondays 09:00-17:00 UTC."""
    slot = Availability(
        expert_id=test_expert.id, day_of_week=MONDAY_DOW, start_time="09:00", end_time="17:00"
    )
    db.add(slot)
    db.commit()
    return slot


@pytest.fixture
def make_booking(db: Session, test_user: User) -> Callable[..., Booking]:
    """Insert a booking directly, bypassing the booking rules."""

    def _make(
        service: Service,
        start: datetime,
        status: BookingStatus = BookingStatus.PENDING,
        user_id: Optional[str] = None,
    ) -> Booking:
        booking = Booking(
            owner=service.owner,
            user_id=user_id or test_user.id,
            service_id=service.id,
            start_time=start,
            end_time=start + timedelta(minutes=service.duration_min),
            status=status.value,
            total_price=service.price,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def auth_headers_user(test_user: User) -> Dict[str, str]:
    return make_auth_headers(test_user.id, RoleName.USER)


@pytest.fixture
def auth_headers_other_user(other_user: User) -> Dict[str, str]:
    return make_auth_headers(other_user.id, RoleName.USER)


@pytest.fixture
def auth_headers_expert(test_expert: Expert) -> Dict[str, str]:
    return make_auth_headers(test_expert.id, RoleName.EXPERT)


@pytest.fixture
def auth_headers_other_expert(other_expert: Expert) -> Dict[str, str]:
    return make_auth_headers(other_expert.id, RoleName.EXPERT)


@pytest.fixture
def auth_headers_organization(test_organization: Organization) -> Dict[str, str]:
    return make_auth_headers(test_organization.id, RoleName.ORGANIZATION)
