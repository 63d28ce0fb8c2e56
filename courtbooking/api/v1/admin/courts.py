from datetime import datetime
from uuid import UUID

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from courtbooking.db.session import get_db
from courtbooking.api.deps import get_court_or_404, require_admin
from courtbooking.models.booking import ACTIVE_STATUSES, Booking
from courtbooking.models.court import Court, CourtBlock, CourtPeakWindow
from courtbooking.schemas.court import (
    Court as CourtSchema,
    CourtBlock as CourtBlockSchema,
    CourtBlockCreate,
    CourtBlockCreateResponse,
    CourtCreate,
    CourtUpdate,
)
from courtbooking.services.bookings import apply_block, club_timezone
from courtbooking.utils.timeslots import ensure_aware, local_today

router = APIRouter(
    prefix="/admin/courts",
    tags=["Admin - Courts"],
    dependencies=[Depends(require_admin)],
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _hours_to_json(hours) -> dict:
    return {
        day: {"open": window.open.strftime("%H:%M"), "close": window.close.strftime("%H:%M")}
        for day, window in hours.items()
    }


def _peak_windows(windows) -> list:
    return [CourtPeakWindow(**w.model_dump()) for w in windows]


def _to_utc(value: datetime) -> datetime:
    """Naive input is read as club-local time; everything is stored in UTC."""
    return ensure_aware(value, club_timezone()).astimezone(pytz.utc)


# ---------------------------------------------------------------------------
# Court CRUD
# ---------------------------------------------------------------------------


@router.post("/", response_model=CourtSchema, status_code=status.HTTP_201_CREATED)
def create_court(data: CourtCreate, db: Session = Depends(get_db)):
    if db.query(Court).filter(Court.name == data.name).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A court with this name already exists",
        )

    court = Court(**data.model_dump(exclude={"operating_hours", "peak_windows"}))
    court.operating_hours = _hours_to_json(data.operating_hours)
    court.peak_windows = _peak_windows(data.peak_windows)
    db.add(court)
    db.commit()
    return get_court_or_404(db, court.id)


@router.patch("/{court_id}", response_model=CourtSchema)
def update_court(court_id: UUID, data: CourtUpdate, db: Session = Depends(get_db)):
    court = get_court_or_404(db, court_id)

    updates = data.model_dump(exclude_unset=True, exclude={"operating_hours", "peak_windows"})
    for field, value in updates.items():
        setattr(court, field, value)
    if data.operating_hours is not None:
        court.operating_hours = _hours_to_json(data.operating_hours)
    if data.peak_windows is not None:
        court.peak_windows = _peak_windows(data.peak_windows)

    if court.min_duration_minutes > court.max_duration_minutes:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="min_duration_minutes must not exceed max_duration_minutes",
        )

    db.commit()
    return get_court_or_404(db, court.id)


@router.delete("/{court_id}", status_code=status.HTTP_200_OK)
def delete_court(court_id: UUID, db: Session = Depends(get_db)):
    """Soft-delete a court; refused while it still has upcoming active bookings."""
    court = get_court_or_404(db, court_id)
    today = local_today(club_timezone())

    upcoming = db.query(Booking).filter(
        Booking.court_id == court.id,
        Booking.booking_date >= today,
        Booking.status.in_(ACTIVE_STATUSES),
    ).count()
    if upcoming:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete court with {upcoming} upcoming booking(s)",
        )

    court.is_active = False
    db.commit()
    return {"id": str(court_id), "is_active": False}


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


@router.post(
    "/{court_id}/blocks",
    response_model=CourtBlockCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_block(court_id: UUID, data: CourtBlockCreate, db: Session = Depends(get_db)):
    """Block a court; overlapping future bookings are cancelled and their owners notified."""
    court = get_court_or_404(db, court_id)

    block = CourtBlock(
        **data.model_dump(exclude={"start_at", "end_at"}),
        start_at=_to_utc(data.start_at),
        end_at=_to_utc(data.end_at),
    )
    cancelled = apply_block(db, court, block)
    return CourtBlockCreateResponse(
        block=CourtBlockSchema.model_validate(block),
        cancelled_bookings=len(cancelled),
    )


@router.delete("/{court_id}/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_block(court_id: UUID, block_id: UUID, db: Session = Depends(get_db)):
    block = db.query(CourtBlock).filter(
        CourtBlock.id == block_id,
        CourtBlock.court_id == court_id,
    ).first()
    if not block:
        raise HTTPException(status_code=404, detail="Block not found")

    db.delete(block)
    db.commit()
