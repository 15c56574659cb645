"""Tests for the point-allocation and forced-ranking tallies."""

from dataclasses import dataclass

import pytest

from decider.engine.tally import FORCED_RANKING, POINT_ALLOCATION, tally


@dataclass
class _Vote:
    option_id: str
    value: int


def _ballots(*ballots: dict) -> list[_Vote]:
    return [_Vote(option_id, value) for ballot in ballots for option_id, value in ballot.items()]


class TestPointAllocation:
    def test_highest_total_wins(self) -> None:
        votes = _ballots(
            {"A": 6, "B": 2, "C": 2},
            {"A": 3, "B": 5, "C": 2},
            {"A": 1, "B": 1, "C": 8},
        )
        rows = tally(POINT_ALLOCATION, ["A", "B", "C"], votes)
        assert [(r.option_id, r.total_points, r.rank) for r in rows] == [("C", 12, 1), ("A", 10, 2), ("B", 8, 3)]
        assert [r.is_winner for r in rows] == [True, False, False]
        assert all(r.average_rank is None for r in rows)

    def test_ties_keep_submission_order(self) -> None:
        votes = _ballots({"B": 5, "C": 5}, {"A": 5, "D": 5})
        rows = tally(POINT_ALLOCATION, ["A", "B", "C", "D"], votes)
        assert [r.option_id for r in rows] == ["A", "B", "C", "D"]
        assert rows[0].is_winner and not rows[1].is_winner

    def test_option_without_votes_scores_zero(self) -> None:
        rows = tally(POINT_ALLOCATION, ["A", "B"], _ballots({"B": 10}))
        assert [(r.option_id, r.total_points) for r in rows] == [("B", 10), ("A", 0)]

    def test_votes_for_unknown_options_are_ignored(self) -> None:
        rows = tally(POINT_ALLOCATION, ["A"], _ballots({"A": 4, "gone": 6}))
        assert [(r.option_id, r.total_points) for r in rows] == [("A", 4)]


class TestForcedRanking:
    def test_lowest_average_wins(self) -> None:
        votes = _ballots(
            {"A": 1, "B": 2, "C": 3},
            {"A": 2, "B": 1, "C": 3},
            {"A": 1, "B": 3, "C": 2},
        )
        rows = tally(FORCED_RANKING, ["A", "B", "C"], votes)
        assert [r.option_id for r in rows] == ["A", "B", "C"]
        assert rows[0].average_rank == pytest.approx(4 / 3)
        assert rows[1].average_rank == pytest.approx(2.0)
        assert rows[2].average_rank == pytest.approx(8 / 3)
        assert [r.total_points for r in rows] == [3, 2, 1]
        assert [r.rank for r in rows] == [1, 2, 3]
        assert rows[0].is_winner

    def test_unranked_options_sort_last_without_an_average(self) -> None:
        rows = tally(FORCED_RANKING, ["A", "B", "C"], _ballots({"C": 2, "B": 1}))
        assert [r.option_id for r in rows] == ["B", "C", "A"]
        assert rows[-1].average_rank is None
        assert rows[-1].total_points == 1

    def test_no_votes_at_all_keeps_submission_order(self) -> None:
        rows = tally(FORCED_RANKING, ["A", "B"], [])
        assert [r.option_id for r in rows] == ["A", "B"]
        assert rows[0].is_winner


class TestTally:
    def test_no_options_gives_no_rows(self) -> None:
        assert tally(POINT_ALLOCATION, [], _ballots({"A": 10})) == []
        assert tally(FORCED_RANKING, [], []) == []

    def test_deterministic(self) -> None:
        votes = _ballots({"A": 4, "B": 6}, {"A": 6, "B": 4})
        assert tally(POINT_ALLOCATION, ["A", "B"], votes) == tally(POINT_ALLOCATION, ["A", "B"], votes)

    def test_unknown_mechanism(self) -> None:
        with pytest.raises(ValueError):
            tally("approval", ["A"], [])
