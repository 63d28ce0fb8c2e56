from datetime import datetime, timedelta
from typing import Iterable, Iterator, Optional, Tuple

import pytz

from courtbooking.utils.policy import BlockInterval
from courtbooking.utils.timeslots import overlaps


def _repeat(local_start: datetime, pattern: str, n: int) -> Optional[datetime]:
    """The n-th repetition of a local wall-clock start; None if the date doesn't exist."""
    if pattern == "daily":
        return local_start + timedelta(days=n)
    if pattern == "weekly":
        return local_start + timedelta(weeks=n)
    month_index = local_start.month - 1 + n
    try:
        return local_start.replace(year=local_start.year + month_index // 12, month=month_index % 12 + 1)
    except ValueError:
        # e.g. the 31st in a 30-day month
        return None


def block_occurrences(
    block: BlockInterval,
    window_start: datetime,
    window_end: datetime,
    tz=pytz.utc,
) -> Iterator[Tuple[datetime, datetime]]:
    """
    Yield the absolute intervals ``block`` occupies inside [window_start, window_end).

    A recurring block repeats the same wall-clock interval in ``tz`` on every
    daily/weekly/monthly repetition that starts on or before its
    ``recurring_end_date``.
    """
    if not block.is_recurring or not block.recurring_pattern:
        if overlaps(block.start_at, block.end_at, window_start, window_end):
            yield block.start_at, block.end_at
        return

    local_start = block.start_at.astimezone(tz).replace(tzinfo=None)
    length = block.end_at - block.start_at
    until = block.recurring_end_date or local_start.date()
    pattern = block.recurring_pattern

    n = 0
    if pattern in ("daily", "weekly"):
        step = timedelta(days=1) if pattern == "daily" else timedelta(weeks=1)
        # Jump close to the window; one step of slack absorbs DST shifts
        window_local = window_start.astimezone(tz).replace(tzinfo=None)
        n = max(0, (window_local - local_start - length) // step - 1)

    while True:
        candidate = _repeat(local_start, pattern, n)
        n += 1
        if candidate is None:
            continue
        if candidate.date() > until:
            return
        start = tz.localize(candidate)
        if start >= window_end:
            return
        end = start + length
        if overlaps(start, end, window_start, window_end):
            yield start, end


def blocks_overlap(
    blocks: Iterable[BlockInterval],
    start: datetime,
    end: datetime,
    tz=pytz.utc,
) -> bool:
    """True when [start, end) intersects any occurrence of any block."""
    for block in blocks:
        for _ in block_occurrences(block, start, end, tz):
            return True
    return False
