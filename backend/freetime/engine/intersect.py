"""
Multi-Party Intersector - Times when every participant is free

Pairwise intersections are folded across participants. Each fold is a
two-pointer sweep over start-sorted inputs, and short overlaps are dropped
at every step; since a dropped overlap can only shrink further in later
folds, the final result does not depend on fold order.
"""

from datetime import timedelta
from typing import List, Sequence

from .errors import InvalidRange
from .models import FreeInterval

def _sorted(slots: Sequence[FreeInterval]) -> List[FreeInterval]:
    return sorted(slots, key=lambda slot: (slot.start, slot.end))

def intersect_pair(
    first: Sequence[FreeInterval],
    second: Sequence[FreeInterval],
    min_duration: int = 30
) -> List[FreeInterval]:
    """
    Intersect two free-interval sequences

    Args:
        first: one participant's free intervals (non-overlapping)
        second: another participant's free intervals (non-overlapping)
        min_duration: overlaps shorter than this many minutes are dropped

    Returns:
        Owner-less overlaps sorted by start, then end
    """
    a = _sorted(first)
    b = _sorted(second)
    min_length = timedelta(minutes=min_duration)
    overlaps: List[FreeInterval] = []

    i = j = 0
    while i < len(a) and j < len(b):
        overlap_start = max(a[i].start, b[j].start)
        overlap_end = min(a[i].end, b[j].end)
        if overlap_start < overlap_end and overlap_end - overlap_start >= min_length:
            overlaps.append(FreeInterval(overlap_start, overlap_end))

        # Whichever interval finishes first cannot overlap anything further
        if a[i].end < b[j].end:
            i += 1
        elif b[j].end < a[i].end:
            j += 1
        else:
            i += 1
            j += 1

    return overlaps

def intersect(
    per_person_slots: Sequence[Sequence[FreeInterval]],
    min_duration: int = 30
) -> List[FreeInterval]:
    """
    Intersect the free intervals of every participant

    Zero participants give an empty result and a single participant gets
    their own slots back unchanged.

    Raises:
        InvalidRange: min_duration is not positive
    """
    if min_duration <= 0:
        raise InvalidRange(f"Minimum duration must be positive, got {min_duration}")

    if not per_person_slots:
        return []
    if len(per_person_slots) == 1:
        return list(per_person_slots[0])

    common = intersect_pair(per_person_slots[0], per_person_slots[1], min_duration)
    for slots in per_person_slots[2:]:
        if not common:
            break
        common = intersect_pair(common, slots, min_duration)
    return common

__all__ = ['intersect', 'intersect_pair']
