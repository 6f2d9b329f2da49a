"""Leaderboard ranking.

Single ordering rule used everywhere ranks are produced:
- higher score first;
- equal scores: earlier `submitted_at` first.

A row's rank is 1 + the number of rows strictly ahead of it under that rule,
so ranks are contiguous by position whenever submission times differ, and two
rows share a rank only if both score and submission time are identical.
Insertion order and identity never influence rank.

Incomplete participations (admin view) are listed after every completed one,
ordered by join time, and ranked by the same formula.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Tuple

from .types import LeaderboardRow, Participation

if TYPE_CHECKING:
    from .store import ContestStore


def standing_key(p: Participation) -> Tuple:
    """Sort key implementing the ranking rule (ties then fall back to join order / id for stable output)."""
    if p.is_completed:
        return (0, -p.score, p.submitted_at, p.joined_at, p.identity_id)
    return (1, p.joined_at, p.identity_id)


def is_ahead(
    score: int,
    submitted_at: Optional[datetime],
    other_score: int,
    other_submitted_at: Optional[datetime],
) -> bool:
    """True if (score, submitted_at) ranks strictly ahead of the other pair."""
    if score != other_score:
        return score > other_score
    if submitted_at is None or other_submitted_at is None:
        return False
    return submitted_at < other_submitted_at


def _rank_key(p: Participation) -> Tuple:
    if p.is_completed:
        return (0, -p.score, p.submitted_at)
    return (1, p.joined_at, p.identity_id)


def assign_ranks(ordered: List[Participation]) -> List[LeaderboardRow]:
    """Turn participations already sorted by `standing_key` into ranked rows."""
    rows: List[LeaderboardRow] = []
    prev_key = None
    rank = 0
    for pos, p in enumerate(ordered, start=1):
        key = _rank_key(p)
        if key != prev_key:
            rank = pos
            prev_key = key
        rows.append(
            LeaderboardRow(
                identity_id=p.identity_id,
                rank=rank,
                score=p.score,
                correct_answers=p.correct_answers,
                wrong_answers=p.wrong_answers,
                submitted_at=p.submitted_at,
                time_spent=p.time_spent,
                is_completed=p.is_completed,
            )
        )
    return rows


def rank(
    store: "ContestStore",
    contest_id: str,
    completed_only: bool = True,
    limit: Optional[int] = None,
) -> List[LeaderboardRow]:
    """Ordered, ranked leaderboard rows for a contest (already authorized)."""
    ordered = store.ranked_participations(
        contest_id, completed_only=completed_only, limit=limit
    )
    return assign_ranks(ordered)


def rank_of(store: "ContestStore", identity_id: str, contest_id: str) -> Optional[int]:
    """Rank of one identity's completed participation, without building the list."""
    participation = store.get_participation(identity_id, contest_id)
    if participation is None or not participation.is_completed:
        return None
    ahead = store.count_ahead(contest_id, participation.score, participation.submitted_at)
    return ahead + 1
