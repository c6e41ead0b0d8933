import itertools
import random
from datetime import timedelta

import pytest

from freetime.engine.errors import InvalidRange
from freetime.engine.gaps import free_slots
from freetime.engine.intersect import intersect, intersect_pair
from freetime.engine.models import TimeInterval


def spans(slots):
    return [(s.start, s.end) for s in slots]


def random_person(rng, monday, range_start, range_end):
    occupied = []
    for _ in range(rng.randint(0, 20)):
        start = monday + timedelta(days=rng.randint(0, 4), hours=rng.randint(7, 21), minutes=rng.choice([0, 15, 30, 45]))
        occupied.append(TimeInterval(start, start + timedelta(minutes=rng.randrange(15, 180, 15))))
    return free_slots(occupied, range_start, range_end, min_duration=15)


class TestIntersect:

    def test_overlapping_mornings(self, slot, at):
        a = [slot(0, 8, 0, 12, 0, "a")]
        b = [slot(0, 10, 0, 14, 0, "b")]

        common = intersect([a, b])

        assert spans(common) == [(at(0, 10, 0), at(0, 12, 0))]
        assert common[0].duration_minutes == 120
        assert common[0].owner_id is None

    def test_short_overlap_is_dropped(self, slot):
        a = [slot(0, 8, 0, 8, 20)]
        b = [slot(0, 8, 10, 8, 25)]

        assert intersect([a, b]) == []
        assert len(intersect([a, b], min_duration=10)) == 1

    def test_identity_and_empty(self, slot):
        a = [slot(0, 8, 0, 12, 0, "a"), slot(1, 9, 0, 10, 0, "a")]

        assert intersect([a]) == a
        assert intersect([]) == []

    def test_different_days_never_intersect(self, slot):
        a = [slot(0, 8, 0, 22, 0)]
        b = [slot(1, 8, 0, 22, 0)]

        assert intersect([a, b]) == []

    def test_touching_intervals_do_not_intersect(self, slot):
        assert intersect_pair([slot(0, 8, 0, 10, 0)], [slot(0, 10, 0, 12, 0)]) == []

    def test_one_interval_against_many(self, slot, at):
        a = [slot(0, 8, 0, 22, 0)]
        b = [slot(0, 9, 0, 10, 0), slot(0, 12, 0, 13, 30), slot(0, 21, 0, 23, 0)]

        common = intersect([a, b])

        assert spans(common) == [
            (at(0, 9, 0), at(0, 10, 0)),
            (at(0, 12, 0), at(0, 13, 30)),
            (at(0, 21, 0), at(0, 22, 0)),
        ]

    def test_unsorted_inputs_are_handled(self, slot, at):
        a = [slot(1, 8, 0, 12, 0), slot(0, 8, 0, 12, 0)]
        b = [slot(0, 11, 0, 14, 0), slot(1, 7, 0, 9, 0)]

        assert spans(intersect([a, b])) == [
            (at(0, 11, 0), at(0, 12, 0)),
            (at(1, 8, 0), at(1, 9, 0)),
        ]

    def test_empty_participant_short_circuits(self, slot):
        a = [slot(0, 8, 0, 12, 0)]

        assert intersect([a, [], a]) == []

    def test_non_positive_min_duration_is_rejected(self, slot):
        with pytest.raises(InvalidRange):
            intersect([[slot(0, 8, 0, 9, 0)]], min_duration=0)


@pytest.mark.parametrize("seed", range(30))
def test_intersection_is_order_independent(seed, monday, day_range):
    rng = random.Random(seed)
    range_start, range_end = day_range(0, 5)
    people = [random_person(rng, monday, range_start, range_end) for _ in range(3)]
    a, b, c = people

    expected = intersect([a, b, c])

    for order in itertools.permutations(people):
        assert intersect(list(order)) == expected
    assert intersect([intersect([a, b]), c]) == expected
    assert intersect([a, intersect([b, c])]) == expected
    assert intersect([intersect([c, a]), b]) == expected


@pytest.mark.parametrize("seed", range(30))
def test_intersection_respects_inputs(seed, monday, day_range):
    rng = random.Random(seed)
    range_start, range_end = day_range(0, 5)
    people = [random_person(rng, monday, range_start, range_end) for _ in range(rng.randint(2, 4))]

    common = intersect(people, min_duration=30)

    assert spans(common) == sorted(spans(common))
    for interval in common:
        assert interval.duration_minutes >= 30
        for person in people:
            assert any(s.start <= interval.start and interval.end <= s.end for s in person)
    for previous, current in zip(common, common[1:]):
        assert previous.end <= current.start
