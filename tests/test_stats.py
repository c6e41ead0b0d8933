import pytest

from freetime.engine.availability import AvailabilityEngine
from freetime.engine.errors import InvalidCommitment, InvalidInterval
from freetime.engine.models import Commitment, Frequency, Recurrence, TimeInterval
from freetime.engine.stats import summarize_commitments


class TestSummarizeCommitments:

    def test_counts_by_kind_and_day(self, at):
        weekly = Recurrence(Frequency.WEEKLY, 1)
        commitments = [
            Commitment.create("alice", at(0, 9, 0), at(0, 10, 30), recurrence=weekly, kind="lecture"),
            Commitment.create("alice", at(2, 9, 0), at(2, 10, 30), recurrence=weekly, kind="lecture"),
            Commitment.create("alice", at(2, 14, 0), at(2, 17, 0), kind="lab"),
            Commitment.create("alice", at(4, 11, 0), at(4, 11, 45)),
        ]

        stats = summarize_commitments("alice", commitments)

        assert stats.total_entries == 4
        assert stats.entries_by_kind == {"lecture": 2, "lab": 1, "other": 1}
        assert list(stats.entries_by_day.items()) == [("Monday", 1), ("Wednesday", 2), ("Friday", 1)]
        assert stats.weekly_hours == 6.75

    def test_hours_are_rounded(self, at):
        commitments = [Commitment.create("alice", at(0, 9, 0), at(0, 9, 20))]

        assert summarize_commitments("alice", commitments).weekly_hours == 0.33

    def test_empty_schedule(self):
        data = summarize_commitments("alice", []).to_dict()

        assert data == {
            "owner_id": "alice",
            "total_entries": 0,
            "entries_by_kind": {},
            "entries_by_day": {},
            "weekly_hours": 0.0
        }

    def test_malformed_commitment_is_rejected(self, at):
        c = Commitment("alice", TimeInterval(at(0, 9, 0), at(0, 10, 0)), 4)

        with pytest.raises(InvalidInterval):
            summarize_commitments("alice", [c])

    def test_engine_checks_ownership(self, commitment):
        with pytest.raises(InvalidCommitment):
            AvailabilityEngine().schedule_stats("alice", [commitment("bob", 0, 9, 0, 10, 0)])
