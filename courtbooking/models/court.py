import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Time, func, Text, DECIMAL, Integer,
    ForeignKey, JSON, Uuid, Enum as SAEnum,
)
from sqlalchemy.orm import relationship
from courtbooking.db.session import Base
from courtbooking.utils.timeslots import WEEKDAYS


class CourtType(str, enum.Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    COVERED = "covered"


class CourtSurface(str, enum.Enum):
    HARD = "hard"
    CLAY = "clay"
    GRASS = "grass"
    SYNTHETIC = "synthetic"


class BlockReason(str, enum.Enum):
    MAINTENANCE = "maintenance"
    EVENT = "event"
    WEATHER = "weather"
    OTHER = "other"


class RecurringPattern(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


DEFAULT_OPERATING_HOURS = {
    day: {"open": "08:00", "close": "22:00" if day not in ("saturday", "sunday") else "20:00"}
    for day in WEEKDAYS
}


def _default_operating_hours():
    return {day: dict(window) for day, window in DEFAULT_OPERATING_HOURS.items()}


class Court(Base):
    __tablename__ = "courts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(SAEnum(CourtType, native_enum=False), nullable=False)
    surface = Column(SAEnum(CourtSurface, native_enum=False), nullable=False)
    is_active = Column(Boolean, default=True, index=True)
    maintenance_mode = Column(Boolean, default=False)

    # {"monday": {"open": "08:00", "close": "22:00"}, ...}; a missing day means closed
    operating_hours = Column(JSON, nullable=False, default=_default_operating_hours)

    # Booking rules
    min_duration_minutes = Column(Integer, nullable=False, default=30)
    max_duration_minutes = Column(Integer, nullable=False, default=120)
    advance_booking_days = Column(Integer, nullable=False, default=7)
    cancellation_deadline_hours = Column(Integer, nullable=False, default=2)
    slot_increment_minutes = Column(Integer, nullable=False, default=30)

    # Pricing
    base_price_per_hour = Column(DECIMAL(10, 2), nullable=True, default=0)
    peak_hour_multiplier = Column(DECIMAL(4, 2), nullable=True, default=1.5)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    peak_windows = relationship("CourtPeakWindow", back_populates="court", cascade="all, delete-orphan")
    blocks = relationship("CourtBlock", back_populates="court", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="court")

    @property
    def bookable(self) -> bool:
        return bool(self.is_active) and not self.maintenance_mode


class CourtPeakWindow(Base):
    __tablename__ = "court_peak_windows"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    court_id = Column(Uuid(as_uuid=True), ForeignKey("courts.id"), nullable=False, index=True)
    weekday = Column(String(10), nullable=False)  # monday .. sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    court = relationship("Court", back_populates="peak_windows")


class CourtBlock(Base):
    __tablename__ = "court_blocks"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    court_id = Column(Uuid(as_uuid=True), ForeignKey("courts.id"), nullable=False, index=True)
    reason = Column(SAEnum(BlockReason, native_enum=False), nullable=False)
    description = Column(Text, nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    is_recurring = Column(Boolean, default=False)
    recurring_pattern = Column(SAEnum(RecurringPattern, native_enum=False), nullable=True)
    recurring_end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    court = relationship("Court", back_populates="blocks")
