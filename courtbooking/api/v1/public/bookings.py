from uuid import UUID
from typing import Optional
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload, selectinload

from courtbooking.db.session import get_db
from courtbooking.api.deps import (
    get_court_or_404,
    get_user_or_404,
    is_admin_request,
    rejection_error,
)
from courtbooking.models.booking import Booking, BookingStatus
from courtbooking.schemas.booking import (
    BookingCreate,
    Booking as BookingSchema,
    BookingCancelRequest,
    BookingCancelResponse,
)
from courtbooking.schemas.common import PaginatedResponse
from courtbooking.services import bookings as booking_service

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def load_booking(db: Session, booking_id: UUID) -> Optional[Booking]:
    """Load a booking with its court and players eager-loaded."""
    return (
        db.query(Booking)
        .options(joinedload(Booking.court), selectinload(Booking.players))
        .filter(Booking.id == booking_id)
        .first()
    )


# ---------------------------------------------------------------------------
# POST /bookings: create a booking
# ---------------------------------------------------------------------------


@router.post("/", response_model=BookingSchema, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, db: Session = Depends(get_db)):
    """
    Book ``[start_time, end_time)`` on a court for a user.

    The request is re-validated against the court's rules, blocks and every
    overlapping booking inside the commit transaction. Rejections come back
    as ``{"error": <reason>, "message": ...}``: 409 when another booking or a
    block is in the way, 400 for policy violations.
    """
    get_user_or_404(db, data.user_id)
    get_court_or_404(db, data.court_id)

    outcome = booking_service.create_booking(
        db,
        court_id=data.court_id,
        user_id=data.user_id,
        day=data.date,
        start_time=data.start_time,
        end_time=data.end_time,
        players=data.players,
        notes=data.notes,
    )
    if not outcome.result.ok:
        raise rejection_error(outcome.result)

    return load_booking(db, outcome.booking.id)


# ---------------------------------------------------------------------------
# GET /bookings: a user's bookings
# ---------------------------------------------------------------------------


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_bookings(
    user_id: UUID = Query(...),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Return a user's bookings, latest date first."""
    query = db.query(Booking).filter(Booking.user_id == user_id)
    if status_filter:
        query = query.filter(Booking.status == status_filter.value)
    if date_from:
        query = query.filter(Booking.booking_date >= date_from)
    if date_to:
        query = query.filter(Booking.booking_date <= date_to)

    total = query.count()
    bookings = (
        query.options(joinedload(Booking.court), selectinload(Booking.players))
        .order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PaginatedResponse(
        data=bookings,
        total=total,
        page=page,
        limit=limit,
        total_pages=-(-total // limit) if total else 0,
    )


@router.get("/{booking_id}", response_model=BookingSchema)
def get_booking(booking_id: UUID, db: Session = Depends(get_db)):
    booking = load_booking(db, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


# ---------------------------------------------------------------------------
# PATCH /bookings/{id}/cancel
# ---------------------------------------------------------------------------


@router.patch("/{booking_id}/cancel", response_model=BookingCancelResponse)
def cancel_booking(
    booking_id: UUID,
    data: BookingCancelRequest,
    db: Session = Depends(get_db),
    is_admin: bool = Depends(is_admin_request),
):
    """
    Cancel a booking.

    The owner (``user_id`` in the body) may cancel until the court's
    cancellation deadline. A request carrying a valid admin key may cancel
    any active booking at any time.
    """
    booking = load_booking(db, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    result = booking_service.cancel_booking(
        db, booking, actor_id=data.user_id, is_admin=is_admin, reason=data.reason
    )
    if not result.ok:
        raise rejection_error(result)

    return BookingCancelResponse(
        id=booking.id,
        booking_number=booking.booking_number,
        status=booking.status,
        cancelled_at=booking.cancelled_at,
    )
