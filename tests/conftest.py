"""
Shared test fixtures.

The application is pointed at an in-memory SQLite database before it is
imported; every test gets fresh tables. ``client`` is a TestClient whose
``get_db`` dependency yields the same session the test uses, without
running the app lifespan (no Postgres bootstrap, no background sweep).
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_SECRET_KEY"] = "test-admin-key"
os.environ["CLUB_TIMEZONE"] = "UTC"
os.environ["COMPLETION_CHECK_INTERVAL_SECONDS"] = "0"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courtbooking.db.base import Base
from courtbooking.db.session import build_engine, get_db
from courtbooking.main import app
from courtbooking.models.booking import Booking
from courtbooking.models.court import Court, CourtPeakWindow, CourtSurface, CourtType
from courtbooking.models.user import User
from courtbooking.services import events

engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def captured_events():
    """Record every booking event emitted during the test."""
    seen = []
    types = (events.BOOKING_CONFIRMED, events.BOOKING_CANCELLED, events.BOOKING_COMPLETED)
    for event_type in types:
        events.subscribe(event_type, seen.append)
    yield seen
    for event_type in types:
        events.unsubscribe(event_type, seen.append)


@pytest.fixture()
def make_user(db):
    counter = iter(range(1, 1000))

    def _make(**overrides) -> User:
        n = next(counter)
        user = User(
            email=overrides.pop("email", f"player{n}@club.test"),
            full_name=overrides.pop("full_name", f"Player {n}"),
            **overrides,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_court(db):
    counter = iter(range(1, 1000))

    def _make(peak_windows=(), **overrides) -> Court:
        n = next(counter)
        fields = {
            "name": f"Court {n}",
            "type": CourtType.OUTDOOR,
            "surface": CourtSurface.CLAY,
            "slot_increment_minutes": 60,
            "min_duration_minutes": 60,
            "max_duration_minutes": 120,
            "base_price_per_hour": Decimal("20.00"),
            "peak_hour_multiplier": Decimal("1.50"),
        }
        fields.update(overrides)
        court = Court(**fields)
        court.peak_windows = [
            CourtPeakWindow(weekday=d, start_time=s, end_time=e) for d, s, e in peak_windows
        ]
        db.add(court)
        db.commit()
        db.refresh(court)
        return court

    return _make


@pytest.fixture()
def add_booking(db):
    """Insert a booking row directly, bypassing validation."""
    counter = iter(range(1, 1000))

    def _add(court, user, day, start, end, status="confirmed") -> Booking:
        booking = Booking(
            booking_number=f"TCB-T{next(counter):07d}",
            court_id=court.id,
            user_id=user.id,
            booking_date=day,
            start_time=start,
            end_time=end,
            status=status,
            total_price=Decimal("0"),
            payment_status="free",
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _add


@pytest.fixture()
def admin_headers():
    return {"X-Admin-Key": "test-admin-key"}


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def court(make_court):
    return make_court()


@pytest.fixture()
def tomorrow():
    return datetime.now(timezone.utc).date() + timedelta(days=1)

