"""Vote tallying for the two voting mechanisms.

Both functions are pure: the same options and votes always produce the
same rows. Ties keep the order in which options were given (Python's
sort is stable), which is the submission order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

POINT_ALLOCATION = "point_allocation"
FORCED_RANKING = "forced_ranking"


@dataclass(frozen=True)
class TallyRow:
    option_id: Any
    total_points: int
    average_rank: float | None
    rank: int
    is_winner: bool


def tally_points(option_ids: Sequence[Any], votes: Iterable[Any]) -> list[TallyRow]:
    totals = {option_id: 0 for option_id in option_ids}
    for vote in votes:
        if vote.option_id in totals:
            totals[vote.option_id] += vote.value

    ordered = sorted(totals.items(), key=lambda item: -item[1])
    return [
        TallyRow(option_id=option_id, total_points=total, average_rank=None, rank=index + 1, is_winner=index == 0)
        for index, (option_id, total) in enumerate(ordered)
    ]


def tally_ranking(option_ids: Sequence[Any], votes: Iterable[Any]) -> list[TallyRow]:
    """Rank by average assigned rank, lower is better.

    An option nobody ranked has no average; it sorts after every ranked
    option instead of dividing by zero.
    """
    sums = {option_id: 0 for option_id in option_ids}
    counts = {option_id: 0 for option_id in option_ids}
    for vote in votes:
        if vote.option_id in sums:
            sums[vote.option_id] += vote.value
            counts[vote.option_id] += 1

    averages = [
        (option_id, sums[option_id] / counts[option_id] if counts[option_id] else None)
        for option_id in option_ids
    ]
    ordered = sorted(averages, key=lambda item: (item[1] is None, item[1] or 0.0))

    max_points = len(option_ids)
    return [
        TallyRow(
            option_id=option_id,
            total_points=max_points - index,
            average_rank=average,
            rank=index + 1,
            is_winner=index == 0,
        )
        for index, (option_id, average) in enumerate(ordered)
    ]


def tally(mechanism: str, option_ids: Sequence[Any], votes: Iterable[Any]) -> list[TallyRow]:
    if not option_ids:
        return []
    if mechanism == FORCED_RANKING:
        return tally_ranking(option_ids, votes)
    if mechanism == POINT_ALLOCATION:
        return tally_points(option_ids, votes)
    raise ValueError(f"Unknown voting mechanism: {mechanism}")
