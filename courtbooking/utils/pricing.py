from datetime import date, time
from decimal import Decimal, ROUND_HALF_UP

from courtbooking.utils.policy import CourtConfig

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def is_peak(court: CourtConfig, day: date, start_time: time) -> bool:
    return any(window.contains(day, start_time) for window in court.pricing.peak_windows)


def price(court: CourtConfig, day: date, start_time: time, duration_minutes: int) -> Decimal:
    """
    Base hourly price pro-rated by duration, times the peak multiplier when the
    booking starts inside a peak window. A booking that merely runs into a peak
    window pays the off-peak rate.
    """
    base = court.pricing.base_price_per_hour
    if not base:
        return ZERO

    amount = Decimal(base) * Decimal(duration_minutes) / Decimal(60)
    if is_peak(court, day, start_time):
        amount *= Decimal(court.pricing.peak_hour_multiplier or 1)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
