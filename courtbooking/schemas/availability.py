from datetime import date, time
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, UUID4

from courtbooking.schemas.court import CourtSummary


class Slot(BaseModel):
    start_time: time
    end_time: time
    available: bool = True

    class Config:
        from_attributes = True


# GET /courts/{id}/availability
class AvailabilityResponse(BaseModel):
    court_id: UUID4
    date: date
    duration_minutes: int
    slots: List[Slot]
    reason: Optional[str] = None


# GET /courts/availability: one entry per active court
class CourtAvailability(BaseModel):
    court: CourtSummary
    duration_minutes: int
    slots: List[Slot]
    reason: Optional[str] = None


class AllCourtsAvailabilityResponse(BaseModel):
    date: date
    courts: List[CourtAvailability]


# GET /courts/{id}/price
class PriceQuote(BaseModel):
    court_id: UUID4
    date: date
    start_time: time
    duration_minutes: int
    is_peak: bool
    total_price: Decimal
