"""
Transactional booking operations.

Everything here works on an open ``Session`` and commits it. Policy
decisions are delegated to ``courtbooking.utils``; this module owns locking,
persistence, notifications and event emission.
"""

import random
import string
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from courtbooking.core.config import settings
from courtbooking.models.booking import (
    ACTIVE_STATUSES,
    Booking,
    BookingPlayer,
    BookingStatus,
    PaymentStatus,
)
from courtbooking.models.court import Court, CourtBlock
from courtbooking.models.notification import Notification
from courtbooking.models.user import User
from courtbooking.services.events import (
    BOOKING_CANCELLED,
    BOOKING_COMPLETED,
    BOOKING_CONFIRMED,
    emit_event,
)
from courtbooking.utils.availability import compute_available_slots
from courtbooking.utils.blocks import blocks_overlap
from courtbooking.utils.booking_rules import (
    OK,
    RejectionReason,
    ValidationResult,
    check_cancellation,
    check_overlaps,
    validate_booking,
)
from courtbooking.utils.policy import (
    BookingRequest,
    Slot,
    block_from_model,
    booked_interval_from_model,
    court_config_from_model,
)
from courtbooking.utils.pricing import price
from courtbooking.utils.timeslots import anchor, get_timezone, local_now, local_today

logger = logging.getLogger(__name__)

# Postgres serialization_failure / deadlock_detected
_RETRYABLE_PGCODES = {"40001", "40P01"}


@dataclass
class BookingOutcome:
    booking: Optional[Booking]
    result: ValidationResult


def club_timezone():
    return get_timezone(settings.CLUB_TIMEZONE)


def generate_booking_number(db: Session) -> str:
    """Generate a unique 'TCB-XXXXXXXX' booking reference."""
    chars = string.ascii_uppercase + string.digits
    while True:
        number = "TCB-" + "".join(random.choices(chars, k=8))
        if not db.query(Booking).filter(Booking.booking_number == number).first():
            return number


def active_bookings_for_court(db: Session, court_id: UUID, day: date) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(
            Booking.court_id == court_id,
            Booking.booking_date == day,
            Booking.status.in_(ACTIVE_STATUSES),
        )
        .order_by(Booking.start_time)
        .all()
    )


def active_bookings_for_user(db: Session, user_id: UUID, day: date) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(
            Booking.user_id == user_id,
            Booking.booking_date == day,
            Booking.status.in_(ACTIVE_STATUSES),
        )
        .all()
    )


def court_availability(db: Session, court: Court, day: date, duration_minutes: int) -> List[Slot]:
    """Free slots for ``court`` on ``day``; read-only, no locking."""
    config = court_config_from_model(court)
    booked = [booked_interval_from_model(b) for b in active_bookings_for_court(db, court.id, day)]
    return compute_available_slots(config, day, duration_minutes, booked, config.blocks, club_timezone())


def _notify(db: Session, booking: Booking, type_: str, title: str, message: str) -> None:
    db.add(Notification(
        user_id=booking.user_id,
        title=title,
        message=message,
        type=type_,
        reference_id=booking.id,
    ))


def _event_payload(booking: Booking) -> dict:
    return {
        "booking_id": str(booking.id),
        "booking_number": booking.booking_number,
        "court_id": str(booking.court_id),
        "user_id": str(booking.user_id),
        "date": booking.booking_date.isoformat(),
        "start_time": booking.start_time.strftime("%H:%M"),
        "end_time": booking.end_time.strftime("%H:%M"),
        "status": booking.status,
    }


def _is_serialization_failure(exc: OperationalError) -> bool:
    return getattr(exc.orig, "pgcode", None) in _RETRYABLE_PGCODES


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def create_booking(
    db: Session,
    court_id: UUID,
    user_id: UUID,
    day: date,
    start_time,
    end_time,
    players=(),
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BookingOutcome:
    """
    Validate and insert a booking in one transaction.

    The user row and then the court row are locked so that concurrent
    requests touching either are serialized; bookings are re-read under the
    lock before validation. The partial unique index on active bookings
    catches anything that slips past, and is reported as ``SlotTaken``.
    """
    tz = club_timezone()
    today = local_today(tz, now)

    # Drop anything cached by the caller; we want rows as of the lock
    db.expire_all()
    user = db.query(User).filter(User.id == user_id).with_for_update().one()
    court = db.query(Court).filter(Court.id == court_id).with_for_update().one()

    config = court_config_from_model(court)
    request = BookingRequest(court.id, user.id, day, start_time, end_time)
    result = validate_booking(
        request,
        config,
        [booked_interval_from_model(b) for b in active_bookings_for_court(db, court.id, day)],
        [booked_interval_from_model(b) for b in active_bookings_for_user(db, user.id, day)],
        today=today,
        tz=tz,
    )
    if not result.ok:
        db.rollback()
        logger.info(
            "Booking rejected (%s): court=%s user=%s %s %s-%s",
            result.reason.value, court_id, user_id, day, start_time, end_time,
        )
        return BookingOutcome(None, result)

    total = price(config, day, start_time, request.duration_minutes)
    if total > 0:
        payment_status = PaymentStatus.PENDING
        status = BookingStatus.PENDING if settings.BOOKING_PAYMENT_REQUIRED else BookingStatus.CONFIRMED
    else:
        payment_status = PaymentStatus.FREE
        status = BookingStatus.CONFIRMED

    booking = Booking(
        booking_number=generate_booking_number(db),
        court_id=court.id,
        user_id=user.id,
        booking_date=day,
        start_time=start_time,
        end_time=end_time,
        status=status.value,
        total_price=total,
        payment_status=payment_status.value,
        notes=notes,
        players=[
            BookingPlayer(name=p.name, email=p.email, is_guest=p.is_guest)
            for p in players
        ],
    )
    db.add(booking)

    try:
        db.flush()
        _notify(
            db, booking, BOOKING_CONFIRMED,
            "Booking confirmed",
            f"{court.name} on {day:%Y-%m-%d} from {start_time:%H:%M} to {end_time:%H:%M}",
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Booking lost a race for court=%s %s %s", court_id, day, start_time)
        return BookingOutcome(
            None, ValidationResult.reject(RejectionReason.SLOT_TAKEN, "Time slot is already booked")
        )
    except OperationalError as exc:
        db.rollback()
        if not _is_serialization_failure(exc):
            raise
        logger.warning("Serialization failure booking court=%s %s %s", court_id, day, start_time)
        return BookingOutcome(
            None, ValidationResult.reject(RejectionReason.SLOT_TAKEN, "Time slot is already booked")
        )

    db.refresh(booking)
    logger.info(
        "Booking %s created: court=%s user=%s %s %s-%s price=%s",
        booking.booking_number, court_id, user_id, day, start_time, end_time, total,
    )
    emit_event(BOOKING_CONFIRMED, _event_payload(booking))
    return BookingOutcome(booking, OK)


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


def mark_cancelled(
    booking: Booking,
    reason: Optional[str],
    cancelled_by: Optional[UUID],
    now: datetime,
) -> None:
    booking.status = BookingStatus.CANCELLED.value
    booking.cancellation_reason = reason
    booking.cancelled_by = cancelled_by
    booking.cancelled_at = now
    if booking.payment_status == PaymentStatus.PAID.value:
        booking.payment_status = PaymentStatus.REFUNDED.value


def cancel_booking(
    db: Session,
    booking: Booking,
    actor_id: Optional[UUID],
    is_admin: bool = False,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ValidationResult:
    """Cancel on behalf of the owner (deadline applies) or an admin (it doesn't)."""
    tz = club_timezone()
    now = local_now(tz, now)
    result = check_cancellation(
        booking.status,
        anchor(booking.booking_date, booking.start_time, tz),
        booking.court.cancellation_deadline_hours,
        now,
        is_owner=actor_id is not None and actor_id == booking.user_id,
        is_admin=is_admin,
    )
    if not result.ok:
        return result

    mark_cancelled(booking, reason, actor_id, now)
    _notify(
        db, booking, BOOKING_CANCELLED,
        "Booking cancelled",
        f"Booking {booking.booking_number} was cancelled",
    )
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s cancelled by %s", booking.booking_number, "admin" if is_admin else actor_id)
    emit_event(BOOKING_CANCELLED, _event_payload(booking))
    return OK


def set_active_status(db: Session, booking: Booking, status: BookingStatus) -> BookingOutcome:
    """
    Move ``booking`` to ``pending`` or ``confirmed``.

    Coming back from ``completed`` or ``no-show`` the booking re-occupies its
    slot, so it is re-checked against blocks and the court's and user's
    active bookings under the same locks as ``create_booking``.
    """
    tz = club_timezone()
    booking_id, user_id, court_id = booking.id, booking.user_id, booking.court_id

    db.expire_all()
    db.query(User).filter(User.id == user_id).with_for_update().one()
    court = db.query(Court).filter(Court.id == court_id).with_for_update().one()
    booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().one()

    if booking.status not in ACTIVE_STATUSES:
        config = court_config_from_model(court)
        day = booking.booking_date
        request = BookingRequest(court.id, booking.user_id, day, booking.start_time, booking.end_time)
        starts_at = anchor(day, booking.start_time, tz)
        ends_at = anchor(day, booking.end_time, tz)
        if blocks_overlap(config.blocks, starts_at, ends_at, tz):
            result = ValidationResult.reject(RejectionReason.COURT_BLOCKED, "Court is blocked during this time")
        else:
            result = check_overlaps(
                request,
                [booked_interval_from_model(b) for b in active_bookings_for_court(db, court.id, day)],
                [booked_interval_from_model(b) for b in active_bookings_for_user(db, booking.user_id, day)],
            )
        if not result.ok:
            db.rollback()
            logger.info("Reactivation of %s rejected (%s)", booking.booking_number, result.reason.value)
            return BookingOutcome(None, result)

    booking.status = status.value
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Reactivation of booking %s lost a race", booking_id)
        return BookingOutcome(
            None, ValidationResult.reject(RejectionReason.SLOT_TAKEN, "Time slot is already booked")
        )
    db.refresh(booking)
    logger.info("Booking %s set to %s", booking.booking_number, booking.status)
    return BookingOutcome(booking, OK)


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def apply_block(db: Session, court: Court, block: CourtBlock, now: Optional[datetime] = None) -> List[Booking]:
    """
    Persist ``block`` and cancel the court's future confirmed bookings it overlaps.

    The court row is locked first so the block serializes with
    ``create_booking`` on the same court. Pending bookings are left alone.
    Returns the bookings that were cancelled.
    """
    tz = club_timezone()
    now = local_now(tz, now)

    db.query(Court).filter(Court.id == court.id).with_for_update().one()

    block.court_id = court.id
    db.add(block)
    db.flush()

    interval = block_from_model(block)
    first_day = max(interval.start_at.astimezone(tz).date(), now.date())
    span_days = (interval.end_at - interval.start_at).days + 1
    if interval.is_recurring and interval.recurring_end_date:
        last_day = interval.recurring_end_date + timedelta(days=span_days)
    else:
        last_day = interval.end_at.astimezone(tz).date()

    candidates = (
        db.query(Booking)
        .filter(
            Booking.court_id == court.id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.booking_date >= first_day,
            Booking.booking_date <= last_day,
        )
        .with_for_update()
        .all()
    )

    reason_value = getattr(block.reason, "value", block.reason)
    cancelled = []
    for booking in candidates:
        starts_at = anchor(booking.booking_date, booking.start_time, tz)
        ends_at = anchor(booking.booking_date, booking.end_time, tz)
        if starts_at <= now:
            continue
        if not blocks_overlap([interval], starts_at, ends_at, tz):
            continue
        mark_cancelled(booking, f"Court blocked: {reason_value}", block.created_by, now)
        _notify(
            db, booking, BOOKING_CANCELLED,
            "Booking cancelled",
            f"{court.name} is unavailable ({reason_value}); booking {booking.booking_number} was cancelled",
        )
        cancelled.append(booking)

    db.commit()
    db.refresh(block)
    logger.info(
        "Block %s on court %s (%s) cancelled %d booking(s)",
        block.id, court.name, reason_value, len(cancelled),
    )
    for booking in cancelled:
        emit_event(BOOKING_CANCELLED, _event_payload(booking))
    return cancelled


# ---------------------------------------------------------------------------
# Completion sweep
# ---------------------------------------------------------------------------


def complete_past_bookings(db: Session, now: Optional[datetime] = None) -> int:
    """
    Mark confirmed bookings whose end has passed as completed.

    Returns the number of bookings completed.
    """
    tz = club_timezone()
    now = local_now(tz, now)

    rows = (
        db.query(Booking)
        .filter(
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.booking_date <= now.date(),
        )
        .all()
    )
    finished = [b for b in rows if anchor(b.booking_date, b.end_time, tz) <= now]
    if not finished:
        return 0

    for booking in finished:
        booking.status = BookingStatus.COMPLETED.value
    db.commit()

    for booking in finished:
        emit_event(BOOKING_COMPLETED, _event_payload(booking))
    return len(finished)
