"""Create the tables and a starter set of courts plus an admin user. Safe to re-run."""
from datetime import time
from decimal import Decimal

from courtbooking.db.base import Base
from courtbooking.db.init_db import create_database
from courtbooking.db.session import engine, SessionLocal
from courtbooking.models.court import Court, CourtPeakWindow, CourtSurface, CourtType
from courtbooking.models.user import User, UserRole

EVENING_PEAK = [
    (day, time(17, 0), time(20, 0))
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
]

COURTS = [
    {
        "name": "Center Court",
        "description": "Our main court with stadium seating",
        "type": CourtType.OUTDOOR,
        "surface": CourtSurface.CLAY,
        "min_duration_minutes": 60,
        "slot_increment_minutes": 60,
        "base_price_per_hour": Decimal("30"),
        "peak_hour_multiplier": Decimal("1.5"),
        "peak": EVENING_PEAK,
    },
    {
        "name": "Court 2",
        "description": "Standard clay court",
        "type": CourtType.OUTDOOR,
        "surface": CourtSurface.CLAY,
        "base_price_per_hour": Decimal("25"),
        "peak_hour_multiplier": Decimal("1.5"),
        "peak": [],
    },
    {
        "name": "Indoor Court 1",
        "description": "Climate-controlled hard court",
        "type": CourtType.INDOOR,
        "surface": CourtSurface.HARD,
        "base_price_per_hour": Decimal("40"),
        "peak_hour_multiplier": Decimal("1.25"),
        "peak": [],
    },
]


def seed():
    create_database()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if not db.query(User).filter(User.email == "admin@club.local").first():
            db.add(User(email="admin@club.local", full_name="Club Admin", role=UserRole.ADMIN))
            print("Admin user created.")

        for data in COURTS:
            data = dict(data)
            peak = data.pop("peak")
            if db.query(Court).filter(Court.name == data["name"]).first():
                print(f"Court exists: {data['name']}")
                continue
            court = Court(**data)
            court.peak_windows = [CourtPeakWindow(weekday=d, start_time=s, end_time=e) for d, s, e in peak]
            db.add(court)
            print(f"Court created: {data['name']}")

        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
