"""
Recurrence Expander - Turns commitments into concrete occupied intervals

Recurring commitments advance in fixed steps from their base occurrence:
weekly = 7 days x interval, biweekly = 14 days x interval and monthly = 28
days x interval. The monthly rule is a four-week approximation rather than
calendar-month arithmetic; ``MonthlyMode.CALENDAR`` switches to real
calendar months (day-of-month anchored, clamped at short months).
"""

from datetime import datetime, date, time, timedelta
from typing import Iterator, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from .errors import InvalidInterval, InvalidRange, InvalidRecurrence
from .models import Commitment, Frequency, MonthlyMode, Recurrence, TimeInterval

def validate_recurrence(recurrence: Recurrence) -> Frequency:
    """Check recurrence metadata and return its frequency as an enum"""
    frequency = Frequency.parse(recurrence.frequency)
    if isinstance(recurrence.interval, bool) or not isinstance(recurrence.interval, int):
        raise InvalidRecurrence(f"Recurrence interval must be an integer, got {recurrence.interval!r}")
    if recurrence.interval <= 0:
        raise InvalidRecurrence(f"Recurrence interval must be positive, got {recurrence.interval}")
    return frequency

def validate_commitment(commitment: Commitment) -> None:
    """
    Reject commitments that cannot safely enter the engine

    Raises:
        InvalidInterval: weekday outside 0-6 or inconsistent with the start
        InvalidRecurrence: recurrence missing, unexpected or malformed
    """
    start = commitment.interval.start
    if commitment.interval.start >= commitment.interval.end:
        raise InvalidInterval(f"Commitment for {commitment.owner_id} ends before it starts")
    if not 0 <= commitment.day_of_week <= 6:
        raise InvalidInterval(f"Day of week must be between 0 and 6, got {commitment.day_of_week}")
    if commitment.day_of_week != start.weekday():
        raise InvalidInterval(
            f"Day of week {commitment.day_of_week} does not match start {start.isoformat()} "
            f"(weekday {start.weekday()})"
        )

    if commitment.is_recurring:
        if commitment.recurrence is None:
            raise InvalidRecurrence("Recurring pattern is required for recurring entries")
        validate_recurrence(commitment.recurrence)
    elif commitment.recurrence is not None:
        raise InvalidRecurrence("Recurring pattern supplied for a non-recurring entry")

def _step(frequency: Frequency, interval: int) -> timedelta:
    """Fixed step between occurrences for the four-week interpretation"""
    if frequency == Frequency.WEEKLY:
        return timedelta(days=7 * interval)
    elif frequency == Frequency.BIWEEKLY:
        return timedelta(days=14 * interval)
    elif frequency == Frequency.MONTHLY:
        return timedelta(days=28 * interval)
    raise InvalidRecurrence(f"Unhandled recurrence frequency: {frequency!r}")

def _end_limit(end_date, tzinfo=None) -> Optional[datetime]:
    """
    A bare date means 'through the end of that day' in the commitment's zone

    Raises:
        InvalidRecurrence: the end date is naive while the commitment is aware,
            or the other way round
    """
    if end_date is None:
        return None
    if isinstance(end_date, datetime):
        if (end_date.tzinfo is None) != (tzinfo is None):
            raise InvalidRecurrence(
                f"Recurrence end date {end_date.isoformat()} and the commitment must both be "
                f"timezone-aware or both be naive"
            )
        return end_date
    if isinstance(end_date, date):
        return datetime.combine(end_date, time.max, tzinfo=tzinfo)
    raise InvalidRecurrence(f"Recurrence end date must be a date or datetime, got {end_date!r}")

def iter_occurrences(
    commitment: Commitment,
    until: datetime,
    after: Optional[datetime] = None,
    monthly_mode: MonthlyMode = MonthlyMode.FOUR_WEEK
) -> Iterator[TimeInterval]:
    """
    Yield unclipped occurrences in start order

    Args:
        commitment: validated commitment to walk
        until: stop once an occurrence would start after this instant
        after: skip occurrences that end at or before this instant
        monthly_mode: interpretation of the monthly frequency

    Yields:
        TimeInterval for every occurrence that starts no later than ``until``
        (and no later than the recurrence end date)
    """
    validate_commitment(commitment)
    base = commitment.interval
    duration = base.end - base.start

    if not commitment.is_recurring:
        if base.start <= until and (after is None or base.end > after):
            yield base
        return

    recurrence = commitment.recurrence
    frequency = validate_recurrence(recurrence)
    limit = _end_limit(recurrence.end_date, base.start.tzinfo)
    if limit is not None and limit < until:
        until = limit

    if frequency == Frequency.MONTHLY and monthly_mode == MonthlyMode.CALENDAR:
        # Offsets are computed from the base so day-of-month clamping never drifts
        n = 0
        while True:
            start = base.start + relativedelta(months=n * recurrence.interval)
            if start > until:
                return
            end = start + duration
            if after is None or end > after:
                yield TimeInterval(start, end)
            n += 1

    step = _step(frequency, recurrence.interval)
    n = 0
    if after is not None and base.end <= after:
        # Jump straight to the first step that can still end after `after`
        n = (after - base.end) // step
    while True:
        start = base.start + step * n
        if start > until:
            return
        end = start + duration
        if after is None or end > after:
            yield TimeInterval(start, end)
        n += 1

def expand(
    commitment: Commitment,
    range_start: datetime,
    range_end: datetime,
    monthly_mode: MonthlyMode = MonthlyMode.FOUR_WEEK
) -> List[TimeInterval]:
    """
    Expand a commitment into occupied intervals inside [range_start, range_end]

    Occurrences that straddle a range boundary are clipped to it, so every
    returned interval is fully contained in the range.

    Raises:
        InvalidRange: range_start >= range_end
        InvalidInterval / InvalidRecurrence: malformed commitment
    """
    if range_start >= range_end:
        raise InvalidRange(
            f"Range start {range_start.isoformat()} must be before range end {range_end.isoformat()}"
        )

    occurrences = []
    for occurrence in iter_occurrences(commitment, range_end, after=range_start, monthly_mode=monthly_mode):
        start = max(occurrence.start, range_start)
        end = min(occurrence.end, range_end)
        if start < end:
            occurrences.append(TimeInterval(start, end))
    return occurrences

def expand_all(
    commitments: Sequence[Commitment],
    range_start: datetime,
    range_end: datetime,
    monthly_mode: MonthlyMode = MonthlyMode.FOUR_WEEK
) -> List[TimeInterval]:
    """Expand every commitment and return occupied intervals sorted by (start, end)"""
    occupied: List[TimeInterval] = []
    for commitment in commitments:
        occupied.extend(expand(commitment, range_start, range_end, monthly_mode))
    occupied.sort(key=lambda interval: (interval.start, interval.end))
    return occupied

def occurs_on(
    commitment: Commitment,
    day: date,
    monthly_mode: MonthlyMode = MonthlyMode.FOUR_WEEK
) -> bool:
    """Check whether the commitment has an occurrence starting on a calendar date"""
    tzinfo = commitment.interval.start.tzinfo
    day_start = datetime.combine(day, time.min, tzinfo=tzinfo)
    day_end = datetime.combine(day, time.max, tzinfo=tzinfo)
    for occurrence in iter_occurrences(commitment, day_end, after=day_start, monthly_mode=monthly_mode):
        if occurrence.start.date() == day:
            return True
    return False

__all__ = [
    'validate_recurrence',
    'validate_commitment',
    'iter_occurrences',
    'expand',
    'expand_all',
    'occurs_on'
]
