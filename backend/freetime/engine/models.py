"""
Availability Models - Commitments, intervals and meeting suggestions

Plain data structures passed between the engine stages. All timestamps are
expected to be normalized to a single reference zone before they get here;
naive datetimes are the norm, aware ones work as long as every value in a
single call shares the same zone.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, date, time
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..utils.helpers import calculate_duration, format_duration, format_time_slot
from .errors import InvalidInterval, InvalidRange, InvalidRecurrence

class Frequency(Enum):
    """Supported recurrence frequencies"""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value) -> 'Frequency':
        """Convert a raw frequency string into the closed enum"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidRecurrence(f"Unknown recurrence frequency: {value!r}") from None

class MonthlyMode(Enum):
    """How a monthly recurrence advances"""
    FOUR_WEEK = "four_week"  # fixed 28-day steps
    CALENDAR = "calendar"    # true calendar months, day-of-month anchored

@dataclass(frozen=True)
class TimeInterval:
    """Half-open occupied or free span [start, end)"""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInterval(
                f"Interval start {self.start.isoformat()} must be before end {self.end.isoformat()}"
            )

    @property
    def duration_minutes(self) -> int:
        return calculate_duration(self.start, self.end)

    def to_dict(self) -> Dict[str, object]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_minutes": self.duration_minutes
        }

@dataclass(frozen=True)
class Recurrence:
    """Recurring pattern attached to a commitment"""
    frequency: Frequency
    interval: int = 1
    end_date: Optional[datetime] = None

@dataclass(frozen=True)
class Commitment:
    """A single scheduled occupied interval, possibly recurring"""
    owner_id: str
    interval: TimeInterval
    day_of_week: int  # 0=Monday, 6=Sunday
    is_recurring: bool = False
    recurrence: Optional[Recurrence] = None
    title: Optional[str] = None
    kind: str = "other"

    @classmethod
    def create(
        cls,
        owner_id: str,
        start: datetime,
        end: datetime,
        recurrence: Optional[Recurrence] = None,
        title: Optional[str] = None,
        kind: str = "other"
    ) -> 'Commitment':
        """Build a commitment, deriving the weekday and recurring flag"""
        return cls(
            owner_id=owner_id,
            interval=TimeInterval(start, end),
            day_of_week=start.weekday(),
            is_recurring=recurrence is not None,
            recurrence=recurrence,
            title=title,
            kind=kind
        )

    def to_dict(self) -> Dict[str, object]:
        recurrence = None
        if self.recurrence is not None:
            recurrence = {
                "frequency": Frequency.parse(self.recurrence.frequency).value,
                "interval": self.recurrence.interval,
                "end_date": self.recurrence.end_date.isoformat() if self.recurrence.end_date else None
            }
        return {
            "owner_id": self.owner_id,
            "title": self.title,
            "kind": self.kind,
            "start": self.interval.start.isoformat(),
            "end": self.interval.end.isoformat(),
            "day_of_week": self.day_of_week,
            "is_recurring": self.is_recurring,
            "recurrence": recurrence
        }

@dataclass(frozen=True)
class DailyWindow:
    """A time-of-day band such as working hours or a preferred meeting band"""
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidRange(
                f"Daily window start {self.start.strftime('%H:%M')} must be before end {self.end.strftime('%H:%M')}"
            )

    def on(self, day: date, tzinfo=None) -> Tuple[datetime, datetime]:
        """Concrete [open, close) datetimes of this window on a given date"""
        return (
            datetime.combine(day, self.start, tzinfo=tzinfo),
            datetime.combine(day, self.end, tzinfo=tzinfo)
        )

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start.strftime("%H:%M"), "end": self.end.strftime("%H:%M")}

DEFAULT_WORKING_HOURS = DailyWindow(time(8, 0), time(22, 0))
DEFAULT_PREFERRED_BAND = DailyWindow(time(11, 0), time(14, 0))

@dataclass(frozen=True)
class FreeInterval:
    """A free span; owner_id is None for spans shared by a whole group"""
    start: datetime
    end: datetime
    owner_id: Optional[str] = None

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInterval(
                f"Free interval start {self.start.isoformat()} must be before end {self.end.isoformat()}"
            )

    @property
    def duration_minutes(self) -> int:
        return calculate_duration(self.start, self.end)

    @property
    def day_of_week(self) -> int:
        return self.start.weekday()

    def to_dict(self) -> Dict[str, object]:
        data = {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration_minutes": self.duration_minutes,
            "day_of_week": self.day_of_week,
            "display": format_time_slot(self.start, self.end)
        }
        if self.owner_id is not None:
            data["owner_id"] = self.owner_id
        return data

@dataclass(frozen=True)
class MeetingSuggestion:
    """Ranked candidate meeting window"""
    interval: TimeInterval
    confidence: float
    participants: Tuple[str, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "start": self.interval.start.isoformat(),
            "end": self.interval.end.isoformat(),
            "duration_minutes": self.interval.duration_minutes,
            "confidence": self.confidence,
            "participants": list(self.participants)
        }

def group_by_day(slots: List[FreeInterval]) -> "OrderedDict[date, List[FreeInterval]]":
    """Group free intervals by the calendar date they start on"""
    grouped: "OrderedDict[date, List[FreeInterval]]" = OrderedDict()
    for slot in sorted(slots, key=lambda s: (s.start, s.end)):
        grouped.setdefault(slot.start.date(), []).append(slot)
    return grouped

@dataclass
class PersonalAvailability:
    """One person's free time over a queried range"""
    owner_id: str
    range_start: datetime
    range_end: datetime
    free_intervals: List[FreeInterval] = field(default_factory=list)

    @property
    def by_day(self) -> "OrderedDict[date, List[FreeInterval]]":
        return group_by_day(self.free_intervals)

    @property
    def total_free_minutes(self) -> int:
        return sum(slot.duration_minutes for slot in self.free_intervals)

    def to_dict(self) -> Dict[str, object]:
        return {
            "owner_id": self.owner_id,
            "range_start": self.range_start.isoformat(),
            "range_end": self.range_end.isoformat(),
            "free_intervals": [slot.to_dict() for slot in self.free_intervals],
            "grouped_by_day": {
                day.isoformat(): [slot.to_dict() for slot in slots]
                for day, slots in self.by_day.items()
            },
            "total_slots": len(self.free_intervals),
            "total_free_minutes": self.total_free_minutes,
            "total_free_time": format_duration(self.total_free_minutes)
        }

@dataclass
class CommonAvailability:
    """Times when every participant is free, plus ranked suggestions"""
    participants: Tuple[str, ...]
    common_intervals: List[FreeInterval] = field(default_factory=list)
    suggestions: List[MeetingSuggestion] = field(default_factory=list)

    @property
    def total_common_minutes(self) -> int:
        return sum(slot.duration_minutes for slot in self.common_intervals)

    def to_dict(self) -> Dict[str, object]:
        return {
            "participants": list(self.participants),
            "participant_count": len(self.participants),
            "common_intervals": [slot.to_dict() for slot in self.common_intervals],
            "suggestions": [suggestion.to_dict() for suggestion in self.suggestions],
            "total_common_minutes": self.total_common_minutes,
            "total_common_time": format_duration(self.total_common_minutes)
        }

__all__ = [
    'Frequency',
    'MonthlyMode',
    'TimeInterval',
    'Recurrence',
    'Commitment',
    'DailyWindow',
    'DEFAULT_WORKING_HOURS',
    'DEFAULT_PREFERRED_BAND',
    'FreeInterval',
    'MeetingSuggestion',
    'group_by_day',
    'PersonalAvailability',
    'CommonAvailability'
]
