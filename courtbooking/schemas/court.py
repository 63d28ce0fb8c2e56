from datetime import date, datetime, time
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, UUID4, model_validator

from courtbooking.models.court import BlockReason, CourtSurface, CourtType, RecurringPattern

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
SlotIncrement = Literal[15, 30, 60]


class OperatingHoursWindow(BaseModel):
    open: time
    close: time

    @model_validator(mode="after")
    def check_order(self):
        if self.open >= self.close:
            raise ValueError("open must be before close")
        return self


class PeakWindow(BaseModel):
    weekday: Weekday
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    class Config:
        from_attributes = True


def _default_hours() -> Dict[str, OperatingHoursWindow]:
    weekday = OperatingHoursWindow(open=time(8, 0), close=time(22, 0))
    weekend = OperatingHoursWindow(open=time(8, 0), close=time(20, 0))
    return {
        "monday": weekday, "tuesday": weekday, "wednesday": weekday,
        "thursday": weekday, "friday": weekday,
        "saturday": weekend, "sunday": weekend,
    }


# Court: Create (POST /admin/courts)
class CourtCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    type: CourtType
    surface: CourtSurface
    is_active: bool = True
    maintenance_mode: bool = False
    operating_hours: Dict[Weekday, OperatingHoursWindow] = Field(default_factory=_default_hours)

    min_duration_minutes: int = Field(default=30, ge=15)
    max_duration_minutes: int = Field(default=120, le=240)
    advance_booking_days: int = Field(default=7, ge=1, le=30)
    cancellation_deadline_hours: int = Field(default=2, ge=0)
    slot_increment_minutes: SlotIncrement = 30

    base_price_per_hour: Decimal = Field(default=Decimal("0"), ge=0)
    peak_hour_multiplier: Decimal = Field(default=Decimal("1.5"), ge=1)
    peak_windows: List[PeakWindow] = []

    @model_validator(mode="after")
    def check_durations(self):
        if self.min_duration_minutes > self.max_duration_minutes:
            raise ValueError("min_duration_minutes must not exceed max_duration_minutes")
        return self


# Court: Update (PATCH /admin/courts/{id}); duration bounds are re-checked against the row
class CourtUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    type: Optional[CourtType] = None
    surface: Optional[CourtSurface] = None
    is_active: Optional[bool] = None
    maintenance_mode: Optional[bool] = None
    operating_hours: Optional[Dict[Weekday, OperatingHoursWindow]] = None
    min_duration_minutes: Optional[int] = Field(default=None, ge=15)
    max_duration_minutes: Optional[int] = Field(default=None, le=240)
    advance_booking_days: Optional[int] = Field(default=None, ge=1, le=30)
    cancellation_deadline_hours: Optional[int] = Field(default=None, ge=0)
    slot_increment_minutes: Optional[SlotIncrement] = None
    base_price_per_hour: Optional[Decimal] = Field(default=None, ge=0)
    peak_hour_multiplier: Optional[Decimal] = Field(default=None, ge=1)
    peak_windows: Optional[List[PeakWindow]] = None


# Court block
class CourtBlockCreate(BaseModel):
    reason: BlockReason
    description: Optional[str] = Field(default=None, max_length=500)
    start_at: datetime
    end_at: datetime
    created_by: Optional[UUID4] = None
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_interval(self):
        if self.start_at >= self.end_at:
            raise ValueError("start_at must be before end_at")
        if self.is_recurring:
            if not self.recurring_pattern or not self.recurring_end_date:
                raise ValueError("recurring blocks need recurring_pattern and recurring_end_date")
            if self.recurring_end_date < self.end_at.date():
                raise ValueError("recurring_end_date must not be before the block ends")
        return self


class CourtBlock(BaseModel):
    id: UUID4
    court_id: UUID4
    reason: BlockReason
    description: Optional[str] = None
    start_at: datetime
    end_at: datetime
    created_by: Optional[UUID4] = None
    is_recurring: bool
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[date] = None

    class Config:
        from_attributes = True


class CourtBlockCreateResponse(BaseModel):
    block: CourtBlock
    cancelled_bookings: int


# Court: Full response
class Court(BaseModel):
    id: UUID4
    name: str
    description: Optional[str] = None
    type: CourtType
    surface: CourtSurface
    is_active: bool
    maintenance_mode: bool
    operating_hours: Dict[str, OperatingHoursWindow]
    min_duration_minutes: int
    max_duration_minutes: int
    advance_booking_days: int
    cancellation_deadline_hours: int
    slot_increment_minutes: int
    base_price_per_hour: Optional[Decimal] = None
    peak_hour_multiplier: Optional[Decimal] = None
    peak_windows: List[PeakWindow] = []
    blocks: List[CourtBlock] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Compact court for nested responses (bookings)
class CourtSummary(BaseModel):
    id: UUID4
    name: str
    type: CourtType
    surface: CourtSurface

    class Config:
        from_attributes = True
