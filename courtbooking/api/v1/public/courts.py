from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, selectinload

from courtbooking.api.deps import get_court_or_404
from courtbooking.db.session import get_db
from courtbooking.models.court import Court, CourtSurface, CourtType
from courtbooking.schemas.availability import (
    AllCourtsAvailabilityResponse,
    AvailabilityResponse,
    CourtAvailability,
    PriceQuote,
    Slot as SlotSchema,
)
from courtbooking.schemas.common import ErrorResponse
from courtbooking.schemas.court import Court as CourtSchema, CourtSummary
from courtbooking.services.bookings import court_availability
from courtbooking.utils.booking_rules import RejectionReason
from courtbooking.utils.policy import court_config_from_model
from courtbooking.utils.pricing import is_peak, price
from courtbooking.utils.timeslots import parse_time

router = APIRouter(prefix="/courts", tags=["Courts"])


def _slots_out(slots) -> List[SlotSchema]:
    return [SlotSchema.model_validate(s) for s in slots]


def _duration_in_range(court: Court, duration: int) -> bool:
    return court.min_duration_minutes <= duration <= court.max_duration_minutes


def _closed_reason(court: Court, day: date, duration: int) -> Optional[str]:
    """Why ``court`` offers no slots at all on ``day``, if it doesn't."""
    if not court.bookable:
        return "Court is not active or in maintenance."
    if not _duration_in_range(court, duration):
        return (
            f"Duration must be between {court.min_duration_minutes} "
            f"and {court.max_duration_minutes} minutes."
        )
    if court_config_from_model(court).hours_for(day) is None:
        return "Operating hours not defined for this day."
    return None



# ---------------------------------------------------------------------------
# GET /courts
# ---------------------------------------------------------------------------


@router.get("/", response_model=List[CourtSchema])
def list_courts(
    type: Optional[CourtType] = Query(None),
    surface: Optional[CourtSurface] = Query(None),
    include_inactive: bool = Query(False),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or description"),
    db: Session = Depends(get_db),
):
    query = db.query(Court).options(selectinload(Court.peak_windows), selectinload(Court.blocks))
    if not include_inactive:
        query = query.filter(Court.is_active == True)  # noqa: E712
    if type:
        query = query.filter(Court.type == type)
    if surface:
        query = query.filter(Court.surface == surface)
    if search:
        pattern = f"%{search}%"
        query = query.filter(Court.name.ilike(pattern) | Court.description.ilike(pattern))
    return query.order_by(Court.name).all()


# ---------------------------------------------------------------------------
# GET /courts/availability: every active court at once
# ---------------------------------------------------------------------------


@router.get("/availability", response_model=AllCourtsAvailabilityResponse)
def all_courts_availability(
    day: date = Query(..., alias="date"),
    duration_minutes: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    """
    Free slots for every active court on a date.

    Without ``duration_minutes`` each court uses its own minimum duration. A
    court whose duration range excludes the requested duration is listed with
    no slots and a ``reason``.
    """
    courts = (
        db.query(Court)
        .options(selectinload(Court.peak_windows), selectinload(Court.blocks))
        .filter(Court.is_active == True)  # noqa: E712
        .order_by(Court.name)
        .all()
    )

    entries = []
    for court in courts:
        duration = duration_minutes or court.min_duration_minutes
        reason = _closed_reason(court, day, duration)
        slots = []
        if reason is None:
            slots = _slots_out(court_availability(db, court, day, duration))
        entries.append(CourtAvailability(
            court=CourtSummary.model_validate(court),
            duration_minutes=duration,
            slots=slots,
            reason=reason,
        ))
    return AllCourtsAvailabilityResponse(date=day, courts=entries)


# ---------------------------------------------------------------------------
# GET /courts/{court_id}
# ---------------------------------------------------------------------------


@router.get("/{court_id}", response_model=CourtSchema)
def get_court(court_id: UUID, db: Session = Depends(get_db)):
    return get_court_or_404(db, court_id)


@router.get("/{court_id}/availability", response_model=AvailabilityResponse)
def get_court_availability(
    court_id: UUID,
    day: date = Query(..., alias="date"),
    duration_minutes: Optional[int] = Query(None, gt=0, description="Defaults to the court's minimum"),
    db: Session = Depends(get_db),
):
    court = get_court_or_404(db, court_id)
    duration = duration_minutes or court.min_duration_minutes

    if not _duration_in_range(court, duration):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ErrorResponse(
                error=RejectionReason.DURATION_OUT_OF_RANGE.value,
                message=(
                    f"Duration must be between {court.min_duration_minutes} "
                    f"and {court.max_duration_minutes} minutes"
                ),
            ).model_dump(),
        )

    return AvailabilityResponse(
        court_id=court.id,
        date=day,
        duration_minutes=duration,
        slots=_slots_out(court_availability(db, court, day, duration)),
        reason=_closed_reason(court, day, duration),
    )


@router.get("/{court_id}/price", response_model=PriceQuote)
def get_price_quote(
    court_id: UUID,
    day: date = Query(..., alias="date"),
    start_time: str = Query(..., pattern=r"^\d{2}:\d{2}$", description="HH:MM"),
    duration_minutes: int = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    court = get_court_or_404(db, court_id)
    config = court_config_from_model(court)
    start = parse_time(start_time)
    return PriceQuote(
        court_id=court.id,
        date=day,
        start_time=start,
        duration_minutes=duration_minutes,
        is_peak=is_peak(config, day, start),
        total_price=price(config, day, start, duration_minutes),
    )
