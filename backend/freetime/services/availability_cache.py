"""
Availability Cache - Time-bounded cache for computed availability

Owned by the HTTP layer, never by the engine. Entries are keyed by the
participant set, query range, working hours, minimum duration and a digest
of the commitments they were computed from, so a changed schedule can never
be served a stale answer; expiry bounds memory for everything else.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from ..engine.models import Commitment, DailyWindow
from ..utils.helpers import create_hash, safe_json_serialize

logger = logging.getLogger(__name__)

CacheKey = Tuple[Any, ...]

@dataclass
class CacheEntry:
    """Cached value with its expiry deadline"""
    value: Any
    expires_at: float

class AvailabilityCache:
    """
    TTL + LRU cache for PersonalAvailability / CommonAvailability results
    """

    def __init__(
        self,
        ttl_seconds: int = 300,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize an empty cache"""
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: 'OrderedDict[CacheKey, CacheEntry]' = OrderedDict()
        self.hits = 0
        self.misses = 0

        logger.info(f"Availability cache initialized (ttl={ttl_seconds}s, max_entries={max_entries})")

    @staticmethod
    def make_key(
        kind: str,
        participants: Sequence[str],
        range_start: datetime,
        range_end: datetime,
        working_hours: DailyWindow,
        min_duration: int,
        commitments: Dict[str, Sequence[Commitment]],
        extra: Tuple[Any, ...] = ()
    ) -> CacheKey:
        """Build a cache key for one availability query"""
        digest = create_hash(safe_json_serialize({
            owner_id: [commitment.to_dict() for commitment in commitments.get(owner_id, [])]
            for owner_id in participants
        }))
        return (
            kind,
            tuple(participants),
            range_start.isoformat(),
            range_end.isoformat(),
            working_hours.start.isoformat(),
            working_hours.end.isoformat(),
            min_duration,
            digest
        ) + tuple(extra)

    def get(self, key: CacheKey) -> Optional[Any]:
        """Return a live cached value or None"""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            self.misses += 1
            logger.debug(f"Cache entry expired for {key[0]} {key[1]}")
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: CacheKey, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a value, evicting the least recently used entry when full"""
        ttl = ttl_seconds if ttl_seconds is not None else self.ttl_seconds
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cache entry for {evicted[0]} {evicted[1]}")

    def invalidate_owner(self, owner_id: str) -> int:
        """Drop every entry whose participant set includes owner_id"""
        stale = [key for key in self._entries if owner_id in key[1]]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info(f"Invalidated {len(stale)} cache entries for {owner_id}")
        return len(stale)

    def clear(self) -> None:
        """Remove all entries"""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        """Hit/miss counters and current size"""
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses
        }

__all__ = ['AvailabilityCache', 'CacheEntry', 'CacheKey']
