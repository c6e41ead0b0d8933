import pytest

from freetime.engine.models import DEFAULT_WORKING_HOURS
from freetime.services.availability_cache import AvailabilityCache


class FakeClock:

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return AvailabilityCache(ttl_seconds=60, max_entries=3, clock=clock)


@pytest.fixture
def key_for(day_range):
    def _key(participants, commitments=None, kind="common"):
        start, end = day_range(0, 7)
        return AvailabilityCache.make_key(
            kind, participants, start, end, DEFAULT_WORKING_HOURS, 30, commitments or {}
        )
    return _key


class TestAvailabilityCache:

    def test_miss_then_hit(self, cache, key_for):
        key = key_for(["alice"])

        assert cache.get(key) is None
        cache.set(key, "result")

        assert cache.get(key) == "result"
        assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1}

    def test_entries_expire(self, cache, clock, key_for):
        key = key_for(["alice"])
        cache.set(key, "result")

        clock.now += 59
        assert cache.get(key) == "result"

        clock.now += 1
        assert cache.get(key) is None
        assert len(cache) == 0

    def test_per_entry_ttl(self, cache, clock, key_for):
        key = key_for(["alice"])
        cache.set(key, "result", ttl_seconds=5)

        clock.now += 5

        assert cache.get(key) is None

    def test_least_recently_used_is_evicted(self, cache, key_for):
        keys = [key_for([name]) for name in ("a", "b", "c", "d")]
        for key in keys[:3]:
            cache.set(key, key[1])

        cache.get(keys[0])
        cache.set(keys[3], "d")

        assert len(cache) == 3
        assert cache.get(keys[1]) is None
        assert cache.get(keys[0]) == ("a",)

    def test_invalidate_owner(self, cache, key_for):
        cache.set(key_for(["alice", "bob"]), 1)
        cache.set(key_for(["alice"], kind="personal"), 2)
        cache.set(key_for(["carol"]), 3)

        assert cache.invalidate_owner("alice") == 2
        assert len(cache) == 1
        assert cache.invalidate_owner("alice") == 0

    def test_key_changes_with_commitments(self, commitment, key_for):
        before = key_for(["alice"], {"alice": [commitment("alice", 0, 9, 0, 10, 0)]})
        after = key_for(["alice"], {"alice": [commitment("alice", 0, 9, 0, 11, 0)]})
        again = key_for(["alice"], {"alice": [commitment("alice", 0, 9, 0, 10, 0)]})

        assert before != after
        assert before == again

    def test_key_ignores_non_participant_commitments(self, commitment, key_for):
        base = key_for(["alice"], {})
        with_other = key_for(["alice"], {"bob": [commitment("bob", 0, 9, 0, 10, 0)]})

        assert base == with_other

    def test_extra_key_parts(self, day_range):
        start, end = day_range(0)
        first = AvailabilityCache.make_key("common", ["a"], start, end, DEFAULT_WORKING_HOURS, 30, {}, (5, 120))
        second = AvailabilityCache.make_key("common", ["a"], start, end, DEFAULT_WORKING_HOURS, 30, {}, (2, 120))

        assert first != second

    def test_clear(self, cache, key_for):
        cache.set(key_for(["alice"]), 1)

        cache.clear()

        assert len(cache) == 0
