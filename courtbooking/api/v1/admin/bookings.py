from uuid import UUID
from typing import Optional
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload, selectinload

from courtbooking.db.session import get_db
from courtbooking.api.deps import rejection_error, require_admin
from courtbooking.api.v1.public.bookings import load_booking
from courtbooking.models.booking import Booking, BookingStatus
from courtbooking.schemas.booking import AdminBookingUpdate, Booking as BookingSchema
from courtbooking.schemas.common import PaginatedResponse
from courtbooking.services import bookings as booking_service

router = APIRouter(
    prefix="/admin/bookings",
    tags=["Admin - Bookings"],
    dependencies=[Depends(require_admin)],
)


@router.get("/", response_model=PaginatedResponse[BookingSchema])
def list_bookings(
    court_id: Optional[UUID] = Query(None),
    user_id: Optional[UUID] = Query(None),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    query = db.query(Booking)
    if court_id:
        query = query.filter(Booking.court_id == court_id)
    if user_id:
        query = query.filter(Booking.user_id == user_id)
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


@router.patch("/{booking_id}", response_model=BookingSchema)
def update_booking(booking_id: UUID, data: AdminBookingUpdate, db: Session = Depends(get_db)):
    """
    Update status, payment status or notes.

    Cancelling goes through the normal cancellation path without the
    deadline. A cancelled booking cannot be reactivated; a completed or
    no-show one can, provided its slot is still free.
    """
    booking = load_booking(db, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    if data.status == BookingStatus.CANCELLED:
        result = booking_service.cancel_booking(
            db, booking, actor_id=None, is_admin=True, reason=data.cancellation_reason
        )
        if not result.ok:
            raise rejection_error(result)
    elif data.status is not None and data.status.value != booking.status:
        if booking.status == BookingStatus.CANCELLED.value:
            raise HTTPException(status_code=400, detail="Cancelled bookings cannot be reactivated")
        if data.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            outcome = booking_service.set_active_status(db, booking, data.status)
            if not outcome.result.ok:
                raise rejection_error(outcome.result)
            booking = outcome.booking
        else:
            booking.status = data.status.value

    if data.payment_status is not None:
        booking.payment_status = data.payment_status.value
    if "notes" in data.model_fields_set:
        booking.notes = data.notes

    db.commit()
    return load_booking(db, booking.id)
