from typing import Annotated, Optional, List
from pydantic import BaseModel, EmailStr, Field, UUID4
from decimal import Decimal
from datetime import date, datetime, time

from courtbooking.models.booking import BookingStatus, PaymentStatus
from courtbooking.schemas.court import CourtSummary


class BookingPlayer(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    is_guest: bool = False

    class Config:
        from_attributes = True


# Booking: Create (POST /bookings)
class BookingCreate(BaseModel):
    court_id: UUID4
    user_id: UUID4
    date: date
    start_time: time
    end_time: time
    players: Annotated[List[BookingPlayer], Field(max_length=3)] = []
    notes: Optional[str] = Field(default=None, max_length=500)


# Booking: Full response (POST /bookings, GET /bookings/{id})
class Booking(BaseModel):
    id: UUID4
    booking_number: str
    court_id: UUID4
    user_id: UUID4
    booking_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    status: str
    payment_status: str
    total_price: Decimal
    notes: Optional[str] = None
    players: List[BookingPlayer] = []
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    court: Optional[CourtSummary] = None

    class Config:
        from_attributes = True


# Booking: Cancel (PATCH /bookings/{id}/cancel)
class BookingCancelRequest(BaseModel):
    user_id: Optional[UUID4] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class BookingCancelResponse(BaseModel):
    id: UUID4
    booking_number: str
    status: str
    cancelled_at: Optional[datetime] = None


# Booking: Admin update (PATCH /admin/bookings/{id})
class AdminBookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)
