import random
from datetime import time, timedelta

import pytest

from freetime.engine.errors import InvalidRange
from freetime.engine.models import DailyWindow, FreeInterval
from freetime.engine.ranking import confidence_score, rank, time_of_day_score

PARTICIPANTS = ["alice", "bob"]


def noon_slots(at, lengths):
    """One interval per consecutive day, each starting at 12:00"""
    return [
        FreeInterval(at(day, 12, 0), at(day, 12, 0) + timedelta(minutes=length))
        for day, length in enumerate(lengths)
    ]


class TestRank:

    def test_max_suggestions_keeps_best_with_earliest_tiebreak(self, at):
        common = noon_slots(at, [30, 60, 90, 120, 150])

        suggestions = rank(common, PARTICIPANTS, max_suggestions=2, max_meeting_length=120)

        assert len(suggestions) == 2
        assert [s.interval.start for s in suggestions] == [at(3, 12, 0), at(4, 12, 0)]
        assert suggestions[0].confidence == suggestions[1].confidence == 1.0

    def test_suggestions_are_clipped_to_meeting_length(self, at):
        common = [FreeInterval(at(0, 11, 0), at(0, 16, 0))]

        suggestion = rank(common, PARTICIPANTS, max_meeting_length=90)[0]

        assert suggestion.interval.start == at(0, 11, 0)
        assert suggestion.interval.end == at(0, 12, 30)
        assert suggestion.interval.duration_minutes == 90

    def test_short_intervals_are_not_extended(self, at):
        common = [FreeInterval(at(0, 12, 0), at(0, 12, 45))]

        suggestion = rank(common, PARTICIPANTS, max_meeting_length=120)[0]

        assert suggestion.interval.end == at(0, 12, 45)

    def test_participants_are_attached(self, at):
        suggestion = rank(noon_slots(at, [60]), PARTICIPANTS)[0]

        assert suggestion.participants == ("alice", "bob")

    def test_preferred_band_outranks_early_morning(self, at):
        common = [
            FreeInterval(at(0, 8, 0), at(0, 10, 0)),
            FreeInterval(at(1, 12, 0), at(1, 14, 0)),
        ]

        suggestions = rank(common, PARTICIPANTS)

        assert suggestions[0].interval.start == at(1, 12, 0)
        assert suggestions[0].confidence > suggestions[1].confidence

    def test_equal_confidence_orders_by_start(self, at):
        common = [
            FreeInterval(at(2, 12, 0), at(2, 13, 0)),
            FreeInterval(at(0, 12, 0), at(0, 13, 0)),
            FreeInterval(at(1, 12, 0), at(1, 13, 0)),
        ]

        suggestions = rank(common, PARTICIPANTS)

        assert [s.interval.start for s in suggestions] == [at(0, 12, 0), at(1, 12, 0), at(2, 12, 0)]

    def test_zero_suggestions_and_empty_input(self, at):
        assert rank(noon_slots(at, [60, 90]), PARTICIPANTS, max_suggestions=0) == []
        assert rank([], PARTICIPANTS) == []

    @pytest.mark.parametrize("kwargs", [
        {"max_suggestions": -1},
        {"max_meeting_length": 0},
        {"band_falloff_minutes": 0},
        {"weights": (0.0, 0.0)},
        {"weights": (-0.5, 1.0)},
    ])
    def test_invalid_parameters_are_rejected(self, at, kwargs):
        with pytest.raises(InvalidRange):
            rank(noon_slots(at, [60]), PARTICIPANTS, **kwargs)


class TestScores:

    @pytest.mark.parametrize("hour, expected", [
        (11, 1.0),
        (12, 1.0),
        (14, 1.0),
        (9, 0.5),
        (15, 0.75),
        (7, 0.0),
        (20, 0.0),
    ])
    def test_time_of_day_score(self, at, hour, expected):
        assert time_of_day_score(at(0, hour, 0)) == pytest.approx(expected)

    def test_custom_band(self, at):
        band = DailyWindow(time(9, 0), time(10, 0))

        assert time_of_day_score(at(0, 9, 30), band) == 1.0
        assert time_of_day_score(at(0, 12, 0), band, band_falloff_minutes=120) == 0.0

    def test_weights_are_normalized(self, at):
        slot = FreeInterval(at(0, 8, 0), at(0, 9, 0))

        assert confidence_score(slot, 120, weights=(3.0, 2.0)) == confidence_score(slot, 120)
        assert confidence_score(slot, 120, weights=(1.0, 0.0)) == 0.5

    @pytest.mark.parametrize("seed", range(20))
    def test_confidence_is_bounded_and_monotonic_in_length(self, seed, at):
        rng = random.Random(seed)
        start = at(rng.randint(0, 6), rng.randint(0, 22), rng.choice([0, 15, 30, 45]))
        max_length = rng.choice([30, 60, 120, 240])
        lengths = sorted(rng.sample(range(1, 600), 10))

        scores = [
            confidence_score(FreeInterval(start, start + timedelta(minutes=length)), max_length)
            for length in lengths
        ]

        assert all(0.0 <= score <= 1.0 for score in scores)
        assert scores == sorted(scores)
