"""
Availability Routes - REST access to the free-time engine

Accepts commitment payloads, normalizes their timestamps to the configured
reference zone, runs the engine and wraps results in the standard success
envelope. Engine errors propagate to the application's exception handler.
"""

import asyncio
import logging
from datetime import datetime, time
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..engine.availability import AvailabilityEngine, AvailabilitySettings
from ..engine.models import Commitment, DailyWindow, Frequency, Recurrence, TimeInterval
from ..engine.recurrence import expand
from ..services.availability_cache import AvailabilityCache
from ..utils.config import config
from ..utils.helpers import create_success_response, normalize_to_zone

logger = logging.getLogger(__name__)

availability_router = APIRouter(prefix="/api/availability", tags=["Availability API"])

# Request models
class RecurrencePayload(BaseModel):
    """Recurring pattern of a commitment"""
    frequency: str = Field(..., description="weekly, biweekly or monthly")
    interval: int = Field(1, description="Step count between occurrences")
    end_date: Optional[datetime] = Field(None, description="No occurrence starts after this instant")

class CommitmentPayload(BaseModel):
    """A single occupied time block"""
    owner_id: Optional[str] = Field(None, description="Defaults to the person the list belongs to")
    title: Optional[str] = Field(None, description="Subject or label")
    kind: str = Field("other", description="lecture, lab, tutorial, exam or other")
    start_time: datetime
    end_time: datetime
    day_of_week: Optional[int] = Field(None, description="0=Monday ... 6=Sunday; derived when omitted")
    is_recurring: Optional[bool] = Field(None, description="Derived from recurrence when omitted")
    recurrence: Optional[RecurrencePayload] = None

class RangePayload(BaseModel):
    """Query range and slot constraints shared by every request"""
    start_date: datetime
    end_date: datetime
    working_hours_start: Optional[time] = None
    working_hours_end: Optional[time] = None
    min_duration: Optional[int] = Field(None, description="Minimum free slot length in minutes")

class PersonalRequest(RangePayload):
    """One person's commitments"""
    owner_id: str
    commitments: List[CommitmentPayload] = Field(default_factory=list)

class StatsRequest(BaseModel):
    """One person's commitments, no range needed"""
    owner_id: str
    commitments: List[CommitmentPayload] = Field(default_factory=list)

class CommonFreeTimeRequest(RangePayload):
    """Several people's commitments"""
    participants: List[str] = Field(default_factory=list)
    commitments: Dict[str, List[CommitmentPayload]] = Field(default_factory=dict)
    max_suggestions: Optional[int] = None
    max_meeting_length: Optional[int] = Field(None, description="Suggestion length cap in minutes")

# Dependencies
def _get_engine(request: Request) -> AvailabilityEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        engine = AvailabilityEngine(AvailabilitySettings.from_config(config.engine))
        request.app.state.engine = engine
    return engine

def _get_cache(request: Request) -> Optional[AvailabilityCache]:
    return getattr(request.app.state, "cache", None)

# Conversion helpers
def _normalize(value: datetime) -> datetime:
    return normalize_to_zone(value, config.engine.reference_timezone)

def _to_commitment(payload: CommitmentPayload, owner_id: str) -> Commitment:
    start = _normalize(payload.start_time)
    end = _normalize(payload.end_time)

    recurrence = None
    if payload.recurrence is not None:
        end_date = payload.recurrence.end_date
        recurrence = Recurrence(
            frequency=Frequency.parse(payload.recurrence.frequency),
            interval=payload.recurrence.interval,
            end_date=_normalize(end_date) if end_date is not None else None
        )

    return Commitment(
        owner_id=payload.owner_id or owner_id,
        interval=TimeInterval(start, end),
        day_of_week=payload.day_of_week if payload.day_of_week is not None else start.weekday(),
        is_recurring=payload.is_recurring if payload.is_recurring is not None else recurrence is not None,
        recurrence=recurrence,
        title=payload.title,
        kind=payload.kind
    )

def _working_hours(payload: RangePayload, engine: AvailabilityEngine) -> DailyWindow:
    default = engine.settings.working_hours
    return DailyWindow(
        payload.working_hours_start or default.start,
        payload.working_hours_end or default.end
    )

@availability_router.post("/free-time")
async def get_free_time(
    payload: PersonalRequest,
    engine: AvailabilityEngine = Depends(_get_engine),
    cache: Optional[AvailabilityCache] = Depends(_get_cache)
):
    """Calculate one person's free time slots"""
    range_start, range_end = _normalize(payload.start_date), _normalize(payload.end_date)
    working_hours = _working_hours(payload, engine)
    min_duration = payload.min_duration if payload.min_duration is not None else engine.settings.min_duration
    commitments = [_to_commitment(c, payload.owner_id) for c in payload.commitments]

    key = None
    if cache is not None:
        key = AvailabilityCache.make_key(
            "personal", [payload.owner_id], range_start, range_end,
            working_hours, min_duration, {payload.owner_id: commitments}
        )
        cached = cache.get(key)
        if cached is not None:
            return create_success_response(cached.to_dict(), "Free time slots calculated successfully")

    availability = await asyncio.to_thread(
        engine.compute_free_time,
        payload.owner_id,
        commitments,
        range_start,
        range_end,
        working_hours=working_hours,
        min_duration=min_duration
    )
    if cache is not None:
        cache.set(key, availability)

    return create_success_response(availability.to_dict(), "Free time slots calculated successfully")

@availability_router.post("/common")
async def find_common_free_time(
    payload: CommonFreeTimeRequest,
    engine: AvailabilityEngine = Depends(_get_engine),
    cache: Optional[AvailabilityCache] = Depends(_get_cache)
):
    """Find common free time for a group and suggest meeting windows"""
    range_start, range_end = _normalize(payload.start_date), _normalize(payload.end_date)
    working_hours = _working_hours(payload, engine)
    min_duration = payload.min_duration if payload.min_duration is not None else engine.settings.min_duration
    commitments = {
        owner_id: [_to_commitment(c, owner_id) for c in entries]
        for owner_id, entries in payload.commitments.items()
        if owner_id in payload.participants
    }

    key = None
    if cache is not None:
        key = AvailabilityCache.make_key(
            "common", payload.participants, range_start, range_end,
            working_hours, min_duration, commitments,
            extra=(payload.max_suggestions, payload.max_meeting_length)
        )
        cached = cache.get(key)
        if cached is not None:
            return create_success_response(cached.to_dict(), "Common free time found successfully")

    availability = await engine.compute_group_availability(
        payload.participants,
        commitments,
        range_start,
        range_end,
        working_hours=working_hours,
        min_duration=min_duration,
        max_suggestions=payload.max_suggestions,
        max_meeting_length=payload.max_meeting_length
    )
    if cache is not None:
        cache.set(key, availability)

    return create_success_response(availability.to_dict(), "Common free time found successfully")

@availability_router.post("/conflicts")
async def find_conflicts(
    payload: PersonalRequest,
    engine: AvailabilityEngine = Depends(_get_engine)
):
    """Report overlapping commitments for one person"""
    commitments = [_to_commitment(c, payload.owner_id) for c in payload.commitments]
    conflicts = await asyncio.to_thread(
        engine.find_conflicts,
        payload.owner_id,
        commitments,
        _normalize(payload.start_date),
        _normalize(payload.end_date)
    )
    return create_success_response(
        {
            "owner_id": payload.owner_id,
            "conflicts": [conflict.to_dict() for conflict in conflicts],
            "total_conflicts": len(conflicts)
        },
        "Conflict check completed"
    )

@availability_router.post("/occurrences")
async def list_occurrences(
    payload: PersonalRequest,
    engine: AvailabilityEngine = Depends(_get_engine)
):
    """Expand recurring commitments into concrete occurrences"""
    range_start, range_end = _normalize(payload.start_date), _normalize(payload.end_date)
    expanded = []
    for entry in payload.commitments:
        commitment = _to_commitment(entry, payload.owner_id)
        occurrences = expand(commitment, range_start, range_end, engine.settings.monthly_mode)
        expanded.append({
            "commitment": commitment.to_dict(),
            "occurrences": [occurrence.to_dict() for occurrence in occurrences]
        })
    return create_success_response(
        {"owner_id": payload.owner_id, "commitments": expanded},
        "Occurrences expanded"
    )

@availability_router.post("/stats")
async def get_schedule_stats(
    payload: StatsRequest,
    engine: AvailabilityEngine = Depends(_get_engine)
):
    """Summarize a person's commitments by kind and weekday"""
    commitments = [_to_commitment(c, payload.owner_id) for c in payload.commitments]
    stats = engine.schedule_stats(payload.owner_id, commitments)
    return create_success_response(stats.to_dict(), "Schedule statistics retrieved successfully")

@availability_router.delete("/cache/{owner_id}")
async def invalidate_cache(
    owner_id: str,
    cache: Optional[AvailabilityCache] = Depends(_get_cache)
):
    """Drop cached results involving a person after their schedule changes"""
    removed = cache.invalidate_owner(owner_id) if cache is not None else 0
    return create_success_response({"owner_id": owner_id, "removed": removed}, "Cache invalidated")

__all__ = ['availability_router']
