"""
Schedule Statistics - Summary counts over one person's commitments
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Sequence

from .models import Commitment
from .recurrence import validate_commitment

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

@dataclass
class ScheduleStats:
    """Counts by kind and weekday plus committed hours for one person"""
    owner_id: str
    total_entries: int = 0
    entries_by_kind: Dict[str, int] = field(default_factory=dict)
    entries_by_day: Dict[str, int] = field(default_factory=dict)
    weekly_hours: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "owner_id": self.owner_id,
            "total_entries": self.total_entries,
            "entries_by_kind": dict(self.entries_by_kind),
            "entries_by_day": dict(self.entries_by_day),
            "weekly_hours": self.weekly_hours
        }

def summarize_commitments(owner_id: str, commitments: Sequence[Commitment]) -> ScheduleStats:
    """
    Summarize a person's commitments

    Each commitment counts once, by its base occurrence; weekly_hours is the
    summed length of those occurrences, rounded to two decimals. Weekdays
    appear in Monday-first order and only when they have entries.

    Raises:
        InvalidInterval / InvalidRecurrence: malformed commitment
    """
    for commitment in commitments:
        validate_commitment(commitment)

    by_day = Counter(commitment.day_of_week for commitment in commitments)
    minutes = sum(commitment.interval.duration_minutes for commitment in commitments)

    return ScheduleStats(
        owner_id=owner_id,
        total_entries=len(commitments),
        entries_by_kind=dict(Counter(commitment.kind for commitment in commitments)),
        entries_by_day={WEEKDAY_NAMES[day]: by_day[day] for day in sorted(by_day)},
        weekly_hours=round(minutes / 60, 2)
    )

__all__ = ['ScheduleStats', 'summarize_commitments', 'WEEKDAY_NAMES']
