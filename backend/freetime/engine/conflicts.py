"""
Conflict Detector - Finds double-booked commitments for one person
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Sequence, Tuple

from .models import Commitment, MonthlyMode, TimeInterval
from .recurrence import expand

@dataclass(frozen=True)
class Conflict:
    """Two commitments whose occurrences overlap"""
    first: Commitment
    second: Commitment
    overlap: TimeInterval

    def to_dict(self) -> Dict[str, object]:
        return {
            "first": self.first.to_dict(),
            "second": self.second.to_dict(),
            "overlap": self.overlap.to_dict()
        }

def detect_conflicts(
    commitments: Sequence[Commitment],
    range_start: datetime,
    range_end: datetime,
    monthly_mode: MonthlyMode = MonthlyMode.FOUR_WEEK
) -> List[Conflict]:
    """
    List every pair of occurrences from different commitments that overlap

    Back-to-back occurrences (one ending exactly when the next starts) are
    not conflicts.

    Returns:
        Conflicts ordered by overlap start
    """
    tagged: List[Tuple[TimeInterval, int]] = []
    for index, commitment in enumerate(commitments):
        for occurrence in expand(commitment, range_start, range_end, monthly_mode):
            tagged.append((occurrence, index))
    tagged.sort(key=lambda item: (item[0].start, item[0].end, item[1]))

    conflicts: List[Conflict] = []
    for position, (occurrence, index) in enumerate(tagged):
        for other, other_index in tagged[position + 1:]:
            if other.start >= occurrence.end:
                break
            if other_index == index:
                continue
            overlap = TimeInterval(max(occurrence.start, other.start), min(occurrence.end, other.end))
            first, second = sorted((index, other_index))
            conflicts.append(Conflict(commitments[first], commitments[second], overlap))

    conflicts.sort(key=lambda c: (c.overlap.start, c.overlap.end))
    return conflicts

__all__ = ['Conflict', 'detect_conflicts']
