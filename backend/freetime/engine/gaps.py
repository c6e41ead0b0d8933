"""
Gap Calculator - Per-day free intervals inside a working-hours window
"""

from datetime import datetime, date, timedelta
from typing import Iterator, List, Optional, Sequence

from .errors import InvalidRange
from .models import DEFAULT_WORKING_HOURS, DailyWindow, FreeInterval, TimeInterval, group_by_day

def _days_in_range(range_start: datetime, range_end: datetime) -> Iterator[date]:
    day = range_start.date()
    last = range_end.date()
    while day <= last:
        yield day
        day += timedelta(days=1)

def free_slots(
    occupied: Sequence[TimeInterval],
    range_start: datetime,
    range_end: datetime,
    working_hours: DailyWindow = DEFAULT_WORKING_HOURS,
    min_duration: int = 30,
    owner_id: Optional[str] = None
) -> List[FreeInterval]:
    """
    Compute free intervals for one person, day by day

    For every date in the range the working window is swept with a cursor:
    each occupied interval (clipped to the window, sorted by start then end)
    emits the gap before it and pushes the cursor to max(cursor, end), which
    merges overlapping and back-to-back intervals without a separate pass.
    Gaps shorter than ``min_duration`` minutes are dropped.

    Args:
        occupied: occupied intervals, in any order
        range_start: first instant of the query range
        range_end: last instant of the query range
        working_hours: daily window considered for free time
        min_duration: minimum free interval length in minutes
        owner_id: stamped onto every produced FreeInterval

    Returns:
        Free intervals sorted by start; non-overlapping within each day
    """
    if range_start >= range_end:
        raise InvalidRange(
            f"Range start {range_start.isoformat()} must be before range end {range_end.isoformat()}"
        )
    if min_duration <= 0:
        raise InvalidRange(f"Minimum duration must be positive, got {min_duration}")

    min_length = timedelta(minutes=min_duration)
    slots: List[FreeInterval] = []

    for day in _days_in_range(range_start, range_end):
        window_open, window_close = working_hours.on(day, tzinfo=range_start.tzinfo)
        window_open = max(window_open, range_start)
        window_close = min(window_close, range_end)
        if window_open >= window_close:
            continue

        day_busy = sorted(
            (
                (max(interval.start, window_open), min(interval.end, window_close))
                for interval in occupied
                if interval.start < window_close and interval.end > window_open
            )
        )

        cursor = window_open
        for busy_start, busy_end in day_busy:
            if cursor < busy_start and busy_start - cursor >= min_length:
                slots.append(FreeInterval(cursor, busy_start, owner_id))
            cursor = max(cursor, busy_end)

        if cursor < window_close and window_close - cursor >= min_length:
            slots.append(FreeInterval(cursor, window_close, owner_id))

    return slots

__all__ = ['free_slots', 'group_by_day']
