"""
Booking policy checks.

Both functions return a ``ValidationResult`` value instead of raising: a
rejection is an expected outcome, translated to an HTTP error by the API layer.
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

import pytz

from courtbooking.utils.blocks import blocks_overlap
from courtbooking.utils.policy import BookedInterval, BookingRequest, CourtConfig
from courtbooking.utils.timeslots import anchor, overlaps, to_minutes


class RejectionReason(str, enum.Enum):
    COURT_INACTIVE = "CourtInactive"
    PAST_DATE = "PastDate"
    TOO_FAR_IN_ADVANCE = "TooFarInAdvance"
    DURATION_OUT_OF_RANGE = "DurationOutOfRange"
    OUTSIDE_OPERATING_HOURS = "OutsideOperatingHours"
    COURT_BLOCKED = "CourtBlocked"
    SLOT_TAKEN = "SlotTaken"
    USER_DOUBLE_BOOKED = "UserDoubleBooked"

    # Cancellation
    ALREADY_CANCELLED = "AlreadyCancelled"
    NOT_CANCELLABLE = "NotCancellable"
    NOT_BOOKING_OWNER = "NotBookingOwner"
    CANCELLATION_DEADLINE_PASSED = "CancellationDeadlinePassed"


# Rejections caused by another booking or block rather than by the request itself
CONFLICT_REASONS = frozenset({
    RejectionReason.COURT_BLOCKED,
    RejectionReason.SLOT_TAKEN,
    RejectionReason.USER_DOUBLE_BOOKED,
})


@dataclass(frozen=True)
class ValidationResult:
    reason: Optional[RejectionReason] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def reject(cls, reason: RejectionReason, message: str) -> "ValidationResult":
        return cls(reason=reason, message=message)


OK = ValidationResult()


def validate_booking(
    request: BookingRequest,
    court: CourtConfig,
    court_bookings: Iterable[BookedInterval],
    user_bookings: Iterable[BookedInterval],
    today: date,
    tz=pytz.utc,
) -> ValidationResult:
    """
    Check a booking request against the court's policy and existing bookings.

    ``court_bookings`` are the court's bookings on the requested date and
    ``user_bookings`` the requesting user's bookings on that date across all
    courts. The first failing check decides the result.
    """
    if not court.is_active:
        return ValidationResult.reject(RejectionReason.COURT_INACTIVE, "Court is not available for booking")

    if request.day < today:
        return ValidationResult.reject(RejectionReason.PAST_DATE, "Cannot book a date in the past")
    advance = court.rules.advance_booking_days
    if (request.day - today).days > advance:
        return ValidationResult.reject(
            RejectionReason.TOO_FAR_IN_ADVANCE,
            f"Bookings can only be made up to {advance} days in advance",
        )

    duration = request.duration_minutes
    rules = court.rules
    if not rules.min_duration_minutes <= duration <= rules.max_duration_minutes:
        return ValidationResult.reject(
            RejectionReason.DURATION_OUT_OF_RANGE,
            f"Booking duration must be between {rules.min_duration_minutes} "
            f"and {rules.max_duration_minutes} minutes",
        )

    hours = court.hours_for(request.day)
    if hours is None:
        return ValidationResult.reject(RejectionReason.OUTSIDE_OPERATING_HOURS, "Court is closed on this day")
    if request.start_time < hours.open or request.end_time > hours.close:
        return ValidationResult.reject(
            RejectionReason.OUTSIDE_OPERATING_HOURS,
            f"Court is open from {hours.open:%H:%M} to {hours.close:%H:%M}",
        )

    start_at = anchor(request.day, request.start_time, tz)
    end_at = anchor(request.day, request.end_time, tz)
    if blocks_overlap(court.blocks, start_at, end_at, tz):
        return ValidationResult.reject(RejectionReason.COURT_BLOCKED, "Court is blocked during this time")

    return check_overlaps(request, court_bookings, user_bookings)


def check_overlaps(
    request: BookingRequest,
    court_bookings: Iterable[BookedInterval],
    user_bookings: Iterable[BookedInterval],
) -> ValidationResult:
    """The court-slot and user double-booking checks of ``validate_booking``."""
    start_m, end_m = to_minutes(request.start_time), to_minutes(request.end_time)

    for b in court_bookings:
        if b.occupies and overlaps(to_minutes(b.start_time), to_minutes(b.end_time), start_m, end_m):
            return ValidationResult.reject(RejectionReason.SLOT_TAKEN, "Time slot is already booked")

    for b in user_bookings:
        if request.user_id is not None and b.user_id is not None and b.user_id != request.user_id:
            continue
        if b.occupies and overlaps(to_minutes(b.start_time), to_minutes(b.end_time), start_m, end_m):
            return ValidationResult.reject(
                RejectionReason.USER_DOUBLE_BOOKED,
                "You already have a booking at this time",
            )

    return OK


def check_cancellation(
    status: str,
    starts_at: datetime,
    deadline_hours: int,
    now: datetime,
    is_owner: bool,
    is_admin: bool = False,
) -> ValidationResult:
    """Whether a booking starting at ``starts_at`` may be cancelled at ``now``."""
    if status == "cancelled":
        return ValidationResult.reject(RejectionReason.ALREADY_CANCELLED, "Booking is already cancelled")
    if status in ("completed", "no-show"):
        return ValidationResult.reject(
            RejectionReason.NOT_CANCELLABLE,
            f"A {status} booking cannot be cancelled",
        )
    if is_admin:
        return OK
    if not is_owner:
        return ValidationResult.reject(RejectionReason.NOT_BOOKING_OWNER, "Not authorized to cancel this booking")

    hours_until_start = (starts_at - now).total_seconds() / 3600
    if hours_until_start < deadline_hours:
        return ValidationResult.reject(
            RejectionReason.CANCELLATION_DEADLINE_PASSED,
            f"Bookings must be cancelled at least {deadline_hours} hours in advance",
        )
    return OK
