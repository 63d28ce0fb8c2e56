from datetime import date
from typing import Iterable, List

import pytz

from courtbooking.utils.blocks import blocks_overlap
from courtbooking.utils.policy import BlockInterval, BookedInterval, CourtConfig, Slot
from courtbooking.utils.timeslots import anchor, from_minutes, overlaps, to_minutes


def compute_available_slots(
    court: CourtConfig,
    day: date,
    duration_minutes: int,
    existing_bookings: Iterable[BookedInterval],
    blocks: Iterable[BlockInterval],
    tz=pytz.utc,
) -> List[Slot]:
    """
    Free start times on ``day`` for a booking of ``duration_minutes``.

    Candidates start at opening time and advance by the court's slot
    increment; the last candidate ends exactly at closing time. A candidate is
    dropped when it overlaps a pending/confirmed booking or, anchored to ``day``
    in ``tz``, any block occurrence. Result is ordered by start time.
    """
    if not court.is_active or duration_minutes <= 0:
        return []

    hours = court.hours_for(day)
    if hours is None:
        return []

    busy = [
        (to_minutes(b.start_time), to_minutes(b.end_time))
        for b in existing_bookings
        if b.occupies
    ]
    blocks = list(blocks)
    open_m, close_m = to_minutes(hours.open), to_minutes(hours.close)
    step = court.rules.slot_increment_minutes

    slots = []
    for start in range(open_m, close_m - duration_minutes + 1, step):
        end = start + duration_minutes
        if any(overlaps(start, end, b_start, b_end) for b_start, b_end in busy):
            continue

        start_t, end_t = from_minutes(start), from_minutes(end)
        if blocks and blocks_overlap(blocks, anchor(day, start_t, tz), anchor(day, end_t, tz), tz):
            continue

        slots.append(Slot(start_time=start_t, end_time=end_t))
    return slots
