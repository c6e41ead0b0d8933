"""
Availability Engine - Personal free time and group meeting suggestions

Chains the pure stages together: Recurrence Expander -> Gap Calculator per
person, then Multi-Party Intersector -> Suggestion Ranker across the group.
Per-person work for a group is fanned out concurrently and joined before the
intersection runs. The engine holds settings only; nothing computed is kept
between calls.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from ..utils.config import EngineConfig
from ..utils.helpers import measure_execution_time
from .conflicts import Conflict, detect_conflicts
from .errors import EmptyParticipantSet, InvalidCommitment, InvalidRange
from .gaps import free_slots
from .intersect import intersect
from .models import (
    DEFAULT_PREFERRED_BAND, DEFAULT_WORKING_HOURS, Commitment, CommonAvailability,
    DailyWindow, FreeInterval, MonthlyMode, PersonalAvailability
)
from .ranking import DEFAULT_BAND_FALLOFF_MINUTES, DEFAULT_WEIGHTS, rank
from .recurrence import expand_all
from .stats import ScheduleStats, summarize_commitments

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class AvailabilitySettings:
    """Defaults applied when a request does not override them"""
    working_hours: DailyWindow = DEFAULT_WORKING_HOURS
    min_duration: int = 30
    max_suggestions: int = 5
    max_meeting_length: int = 120
    preferred_band: DailyWindow = DEFAULT_PREFERRED_BAND
    weights: Tuple[float, float] = DEFAULT_WEIGHTS
    band_falloff_minutes: int = DEFAULT_BAND_FALLOFF_MINUTES
    monthly_mode: MonthlyMode = MonthlyMode.FOUR_WEEK

    @classmethod
    def from_config(cls, engine_config: EngineConfig) -> 'AvailabilitySettings':
        return cls(
            working_hours=DailyWindow(engine_config.working_hours_start, engine_config.working_hours_end),
            min_duration=engine_config.min_duration_minutes,
            max_suggestions=engine_config.max_suggestions,
            max_meeting_length=engine_config.max_meeting_length_minutes,
            preferred_band=DailyWindow(engine_config.preferred_band_start, engine_config.preferred_band_end),
            weights=(engine_config.duration_weight, engine_config.time_of_day_weight),
            band_falloff_minutes=engine_config.band_falloff_minutes,
            monthly_mode=MonthlyMode(engine_config.monthly_mode)
        )

    def override(self, **changes) -> 'AvailabilitySettings':
        """Copy with every non-None keyword applied"""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})

def _unique(participants: Sequence[str]) -> Tuple[str, ...]:
    seen = []
    for participant in participants:
        if participant not in seen:
            seen.append(participant)
    return tuple(seen)

def _check_ownership(owner_id: str, commitments: Sequence[Commitment]) -> None:
    for commitment in commitments:
        if commitment.owner_id != owner_id:
            raise InvalidCommitment(
                f"Commitment owned by '{commitment.owner_id}' cannot be used for '{owner_id}'"
            )

class AvailabilityEngine:
    """
    Free-Time Computation & Common-Availability Engine

    Computes personal free time from commitments and combines several
    people's free time into common intervals and ranked meeting suggestions.
    """

    def __init__(self, settings: Optional[AvailabilitySettings] = None):
        """Initialize the engine with default settings"""
        self.settings = settings or AvailabilitySettings()
        logger.info("Availability engine initialized")

    def _personal_free_slots(
        self,
        owner_id: str,
        commitments: Sequence[Commitment],
        range_start: datetime,
        range_end: datetime,
        settings: AvailabilitySettings
    ) -> List[FreeInterval]:
        _check_ownership(owner_id, commitments)

        occupied = expand_all(commitments, range_start, range_end, settings.monthly_mode)
        return free_slots(
            occupied,
            range_start,
            range_end,
            working_hours=settings.working_hours,
            min_duration=settings.min_duration,
            owner_id=owner_id
        )

    @measure_execution_time
    def compute_free_time(
        self,
        owner_id: str,
        commitments: Sequence[Commitment],
        range_start: datetime,
        range_end: datetime,
        working_hours: Optional[DailyWindow] = None,
        min_duration: Optional[int] = None
    ) -> PersonalAvailability:
        """
        Compute one person's free time over a date range

        Args:
            owner_id: person whose commitments are supplied
            commitments: that person's commitments
            range_start: start of the queried range
            range_end: end of the queried range
            working_hours: overrides the configured working-hours window
            min_duration: overrides the configured minimum slot length

        Returns:
            PersonalAvailability with free intervals sorted by start
        """
        settings = self.settings.override(working_hours=working_hours, min_duration=min_duration)
        slots = self._personal_free_slots(owner_id, commitments, range_start, range_end, settings)

        logger.debug(f"Computed {len(slots)} free slots for {owner_id}")
        return PersonalAvailability(
            owner_id=owner_id,
            range_start=range_start,
            range_end=range_end,
            free_intervals=slots
        )

    @measure_execution_time
    async def compute_group_availability(
        self,
        participants: Sequence[str],
        commitments_by_owner: Dict[str, Sequence[Commitment]],
        range_start: datetime,
        range_end: datetime,
        working_hours: Optional[DailyWindow] = None,
        min_duration: Optional[int] = None,
        max_suggestions: Optional[int] = None,
        max_meeting_length: Optional[int] = None,
        require_participants: bool = False
    ) -> CommonAvailability:
        """
        Find times when every participant is free and rank meeting candidates

        Per-person free time is computed concurrently (one worker thread per
        participant); intersection starts only after every result is in.

        Args:
            participants: ordered participant ids; duplicates are collapsed
            commitments_by_owner: commitments per participant (missing = none)
            range_start: start of the queried range
            range_end: end of the queried range
            working_hours: overrides the configured working-hours window
            min_duration: overrides the configured minimum slot length
            max_suggestions: overrides the configured suggestion count
            max_meeting_length: overrides the configured meeting length cap
            require_participants: raise EmptyParticipantSet instead of
                returning an empty result when no participants are given

        Returns:
            CommonAvailability with common intervals and ranked suggestions
        """
        settings = self.settings.override(
            working_hours=working_hours,
            min_duration=min_duration,
            max_suggestions=max_suggestions,
            max_meeting_length=max_meeting_length
        )
        if range_start >= range_end:
            raise InvalidRange(
                f"Range start {range_start.isoformat()} must be before range end {range_end.isoformat()}"
            )

        group = _unique(participants)
        if not group:
            if require_participants:
                raise EmptyParticipantSet("At least one participant is required")
            return CommonAvailability(participants=())

        logger.info(f"Computing common availability for {len(group)} participants")

        per_person = await asyncio.gather(*[
            asyncio.to_thread(
                self._personal_free_slots,
                owner_id,
                commitments_by_owner.get(owner_id, []),
                range_start,
                range_end,
                settings
            )
            for owner_id in group
        ])

        common = intersect(per_person, settings.min_duration)
        if len(group) == 1:
            common = [FreeInterval(slot.start, slot.end) for slot in common]

        suggestions = rank(
            common,
            group,
            max_suggestions=settings.max_suggestions,
            max_meeting_length=settings.max_meeting_length,
            preferred_band=settings.preferred_band,
            weights=settings.weights,
            band_falloff_minutes=settings.band_falloff_minutes
        )

        logger.info(f"Found {len(common)} common intervals and {len(suggestions)} suggestions")
        return CommonAvailability(
            participants=group,
            common_intervals=common,
            suggestions=suggestions
        )

    def find_conflicts(
        self,
        owner_id: str,
        commitments: Sequence[Commitment],
        range_start: datetime,
        range_end: datetime
    ) -> List[Conflict]:
        """List overlapping commitments for one person within a range"""
        _check_ownership(owner_id, commitments)
        conflicts = detect_conflicts(commitments, range_start, range_end, self.settings.monthly_mode)
        if conflicts:
            logger.info(f"Detected {len(conflicts)} conflicts for {owner_id}")
        return conflicts

    def schedule_stats(self, owner_id: str, commitments: Sequence[Commitment]) -> ScheduleStats:
        """Count a person's commitments by kind and weekday and total their hours"""
        _check_ownership(owner_id, commitments)
        return summarize_commitments(owner_id, commitments)

__all__ = [
    'AvailabilityEngine',
    'AvailabilitySettings'
]
