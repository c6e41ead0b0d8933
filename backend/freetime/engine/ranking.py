"""
Suggestion Ranker - Turns common free intervals into meeting candidates

Confidence is a weighted blend of two factors, both in [0, 1]:

- duration: raw interval length relative to the maximum meeting length,
  capped at 1.0
- time of day: 1.0 when the meeting starts inside the preferred band,
  decaying linearly to 0.0 over ``band_falloff_minutes`` outside it

The time-of-day factor only looks at the start time, which clipping never
moves, so confidence is monotonic non-decreasing in duration.
"""

from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from .errors import InvalidRange
from .models import DEFAULT_PREFERRED_BAND, DailyWindow, FreeInterval, MeetingSuggestion, TimeInterval

DEFAULT_WEIGHTS = (0.6, 0.4)  # (duration, time of day)
DEFAULT_BAND_FALLOFF_MINUTES = 240

def _minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute

def duration_score(raw_minutes: int, max_meeting_length: int) -> float:
    """Longer intervals score higher, saturating at the maximum meeting length"""
    return min(raw_minutes / max_meeting_length, 1.0)

def time_of_day_score(
    start: datetime,
    preferred_band: DailyWindow = DEFAULT_PREFERRED_BAND,
    band_falloff_minutes: int = DEFAULT_BAND_FALLOFF_MINUTES
) -> float:
    """Proximity of a start time to the preferred band"""
    minute = _minutes_of_day(start)
    band_start = preferred_band.start.hour * 60 + preferred_band.start.minute
    band_end = preferred_band.end.hour * 60 + preferred_band.end.minute

    if band_start <= minute <= band_end:
        return 1.0

    distance = band_start - minute if minute < band_start else minute - band_end
    return max(0.0, 1.0 - distance / band_falloff_minutes)

def confidence_score(
    slot: FreeInterval,
    max_meeting_length: int,
    preferred_band: DailyWindow = DEFAULT_PREFERRED_BAND,
    weights: Tuple[float, float] = DEFAULT_WEIGHTS,
    band_falloff_minutes: int = DEFAULT_BAND_FALLOFF_MINUTES
) -> float:
    """Weighted confidence for a common interval, always within [0, 1]"""
    duration_weight, time_weight = weights
    total_weight = duration_weight + time_weight

    score = (
        duration_weight * duration_score(slot.duration_minutes, max_meeting_length)
        + time_weight * time_of_day_score(slot.start, preferred_band, band_falloff_minutes)
    ) / total_weight

    return round(max(0.0, min(1.0, score)), 4)

def rank(
    common_intervals: Sequence[FreeInterval],
    participants: Sequence[str],
    max_suggestions: int = 5,
    max_meeting_length: int = 120,
    preferred_band: DailyWindow = DEFAULT_PREFERRED_BAND,
    weights: Tuple[float, float] = DEFAULT_WEIGHTS,
    band_falloff_minutes: int = DEFAULT_BAND_FALLOFF_MINUTES
) -> List[MeetingSuggestion]:
    """
    Rank common intervals as meeting suggestions

    Args:
        common_intervals: intervals when every participant is free
        participants: the full participant set, copied onto every suggestion
        max_suggestions: maximum number of suggestions returned
        max_meeting_length: suggestions are clipped to this many minutes
        preferred_band: time-of-day band that earns the full time score
        weights: (duration, time of day) weights, normalized internally
        band_falloff_minutes: distance from the band at which the time score hits 0

    Returns:
        Suggestions by descending confidence, ties broken by earliest start
    """
    if max_suggestions < 0:
        raise InvalidRange(f"Maximum suggestions cannot be negative, got {max_suggestions}")
    if max_meeting_length <= 0:
        raise InvalidRange(f"Maximum meeting length must be positive, got {max_meeting_length}")
    if band_falloff_minutes <= 0:
        raise InvalidRange(f"Band falloff must be positive, got {band_falloff_minutes}")
    if min(weights) < 0 or sum(weights) <= 0:
        raise InvalidRange(f"Ranking weights must be non-negative with a positive sum, got {weights}")

    group = tuple(participants)
    max_length = timedelta(minutes=max_meeting_length)
    suggestions: List[MeetingSuggestion] = []

    for slot in common_intervals:
        end = min(slot.end, slot.start + max_length)
        suggestions.append(MeetingSuggestion(
            interval=TimeInterval(slot.start, end),
            confidence=confidence_score(
                slot, max_meeting_length, preferred_band, weights, band_falloff_minutes
            ),
            participants=group
        ))

    suggestions.sort(key=lambda s: (-s.confidence, s.interval.start, s.interval.end))
    return suggestions[:max_suggestions]

__all__ = [
    'rank',
    'confidence_score',
    'duration_score',
    'time_of_day_score',
    'DEFAULT_WEIGHTS',
    'DEFAULT_BAND_FALLOFF_MINUTES'
]
