"""
Plain value objects the booking core works on.

The ORM models are converted into these once per request, so the
availability, validation and pricing functions never touch the database.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Mapping, Optional, Tuple
from uuid import UUID


from courtbooking.utils.timeslots import (
    WEEKDAYS,
    ensure_aware,
    parse_time,
    to_minutes,
    weekday_name,
)

ACTIVE_STATUSES = frozenset({"pending", "confirmed"})


@dataclass(frozen=True)
class OperatingWindow:
    open: time
    close: time


@dataclass(frozen=True)
class BookingRules:
    min_duration_minutes: int = 30
    max_duration_minutes: int = 120
    advance_booking_days: int = 7
    cancellation_deadline_hours: int = 2
    slot_increment_minutes: int = 30


@dataclass(frozen=True)
class PeakWindow:
    weekday: str
    start: time
    end: time

    def contains(self, day: date, t: time) -> bool:
        return self.weekday == weekday_name(day) and self.start <= t < self.end


@dataclass(frozen=True)
class PricingPolicy:
    base_price_per_hour: Optional[Decimal] = None
    peak_hour_multiplier: Optional[Decimal] = None
    peak_windows: Tuple[PeakWindow, ...] = ()


@dataclass(frozen=True)
class BlockInterval:
    start_at: datetime
    end_at: datetime
    reason: str = "maintenance"
    is_recurring: bool = False
    recurring_pattern: Optional[str] = None
    recurring_end_date: Optional[date] = None
    block_id: Optional[UUID] = None


@dataclass(frozen=True)
class CourtConfig:
    operating_hours: Mapping[str, OperatingWindow]
    rules: BookingRules = field(default_factory=BookingRules)
    pricing: PricingPolicy = field(default_factory=PricingPolicy)
    is_active: bool = True
    blocks: Tuple[BlockInterval, ...] = ()
    court_id: Optional[UUID] = None

    def hours_for(self, day: date) -> Optional[OperatingWindow]:
        return self.operating_hours.get(weekday_name(day))


@dataclass(frozen=True)
class BookedInterval:
    start_time: time
    end_time: time
    status: str = "confirmed"
    court_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    booking_id: Optional[UUID] = None

    @property
    def occupies(self) -> bool:
        return self.status in ACTIVE_STATUSES


@dataclass(frozen=True)
class BookingRequest:
    court_id: Optional[UUID]
    user_id: Optional[UUID]
    day: date
    start_time: time
    end_time: time

    @property
    def duration_minutes(self) -> int:
        return to_minutes(self.end_time) - to_minutes(self.start_time)


@dataclass(frozen=True)
class Slot:
    start_time: time
    end_time: time
    available: bool = True


# ---------------------------------------------------------------------------
# ORM adapters
# ---------------------------------------------------------------------------


def operating_hours_from_json(raw: Optional[Mapping]) -> dict:
    hours = {}
    for day in WEEKDAYS:
        window = (raw or {}).get(day)
        if window:
            hours[day] = OperatingWindow(parse_time(window["open"]), parse_time(window["close"]))
    return hours


def block_from_model(block) -> BlockInterval:
    return BlockInterval(
        start_at=ensure_aware(block.start_at),
        end_at=ensure_aware(block.end_at),
        reason=getattr(block.reason, "value", block.reason),
        is_recurring=bool(block.is_recurring),
        recurring_pattern=getattr(block.recurring_pattern, "value", block.recurring_pattern),
        recurring_end_date=block.recurring_end_date,
        block_id=block.id,
    )


def court_config_from_model(court) -> CourtConfig:
    """Snapshot a ``Court`` row (with peak windows and blocks loaded)."""
    multiplier = court.peak_hour_multiplier
    return CourtConfig(
        court_id=court.id,
        operating_hours=operating_hours_from_json(court.operating_hours),
        rules=BookingRules(
            min_duration_minutes=court.min_duration_minutes,
            max_duration_minutes=court.max_duration_minutes,
            advance_booking_days=court.advance_booking_days,
            cancellation_deadline_hours=court.cancellation_deadline_hours,
            slot_increment_minutes=court.slot_increment_minutes,
        ),
        pricing=PricingPolicy(
            base_price_per_hour=Decimal(court.base_price_per_hour) if court.base_price_per_hour is not None else None,
            peak_hour_multiplier=Decimal(multiplier) if multiplier is not None else None,
            peak_windows=tuple(
                PeakWindow(pw.weekday, pw.start_time, pw.end_time) for pw in court.peak_windows
            ),
        ),
        is_active=court.bookable,
        blocks=tuple(block_from_model(b) for b in court.blocks),
    )


def booked_interval_from_model(booking) -> BookedInterval:
    return BookedInterval(
        start_time=booking.start_time,
        end_time=booking.end_time,
        status=booking.status,
        court_id=booking.court_id,
        user_id=booking.user_id,
        booking_id=booking.id,
    )

