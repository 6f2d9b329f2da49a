"""Contest catalog and access filter.

Visibility rules:
- NORMAL contests are visible to everyone, including anonymous viewers.
- VIP contests are visible to `vip` and `admin` identities only.
- Asking for VIP contests without the tier silently becomes a NORMAL query,
  so tier existence is never leaked as an error.

Listings are annotated with the viewer's own participation (a read-side join
keyed by identity + contest id). Listings never carry questions;
those are served by `contest_detail` under its own visibility rules.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple

from .ledger import load_active_contest, check_tier_access
from .lifecycle import effective_status, is_open, reconcile
from .ranking import rank, rank_of
from .results import Rejected, guarded
from .store import ContestStore
from .types import (
    CONTEST_STATUSES,
    CONTEST_TIERS,
    Contest,
    ContestDetail,
    ContestListing,
    ContestPage,
    Identity,
    Leaderboard,
    Option,
    ParticipationStatus,
    Question,
)
from .validation import ContestLimits

logger = logging.getLogger(__name__)


def visible_tiers(viewer: Optional[Identity], requested: Optional[str] = None) -> Tuple[str, ...]:
    """Tiers a viewer may list, after downgrading an unauthorized VIP request."""
    if viewer is not None and viewer.sees_vip:
        return (requested,) if requested else ("NORMAL", "VIP")
    if requested == "VIP":
        logger.debug("VIP listing requested without VIP tier; downgraded to NORMAL")
    return ("NORMAL",)


def check_filters(status: Optional[str], tier: Optional[str]) -> None:
    """Reject filter values that name no status or tier."""
    if status is not None and status not in CONTEST_STATUSES:
        raise Rejected("invalid_state", f"Unknown status filter: {status}")
    if tier is not None and tier not in CONTEST_TIERS:
        raise Rejected("invalid_state", f"Unknown tier filter: {tier}")


def participation_status(
    store: ContestStore, viewer: Identity, contest_id: str
) -> ParticipationStatus:
    participation = store.get_participation(viewer.id, contest_id)
    if participation is None:
        return ParticipationStatus()
    return ParticipationStatus(
        has_joined=True,
        is_completed=participation.is_completed,
        score=participation.score,
        rank=rank_of(store, viewer.id, contest_id),
    )


@guarded
def list_contests(
    store: ContestStore,
    viewer: Optional[Identity],
    now: datetime,
    status: Optional[str] = None,
    tier: Optional[str] = None,
    page: int = 1,
    limit: int = ContestLimits.DEFAULT_PAGE_SIZE,
) -> ContestPage:
    check_filters(status, tier)
    page = max(1, int(page))
    limit = max(1, int(limit))

    contests: List[Contest] = [
        reconcile(c, now)
        for c in store.list_contests(active_only=True, tiers=visible_tiers(viewer, tier))
    ]
    if status is not None:
        contests = [c for c in contests if c.status == status]

    total = len(contests)
    start = (page - 1) * limit
    listings = []
    for contest in contests[start : start + limit]:
        summary = participation_status(store, viewer, contest.id) if viewer else None
        listings.append(
            ContestListing(contest=replace(contest, questions=()), participation=summary)
        )
    return ContestPage(
        contests=tuple(listings),
        page=page,
        pages=math.ceil(total / limit),
        total=total,
    )


def _hide_answers(questions: Tuple[Question, ...]) -> Tuple[Question, ...]:
    return tuple(
        replace(q, options=tuple(Option(text=o.text) for o in q.options)) for q in questions
    )


@guarded
def contest_detail(
    store: ContestStore, viewer: Optional[Identity], contest_id: str, now: datetime
) -> ContestDetail:
    """
    Contest view for a viewer.

    Questions are shown once the viewer has joined or the contest has ended.
    While the contest has not ended, correctness flags are stripped for
    anyone but admins.
    """
    contest = reconcile(load_active_contest(store, contest_id), now)
    check_tier_access(viewer, contest)

    participation = store.get_participation(viewer.id, contest_id) if viewer else None
    ended = now > contest.end_time
    questions = None
    if participation is not None or ended or (viewer is not None and viewer.is_admin):
        questions = contest.questions
        if not ended and not (viewer is not None and viewer.is_admin):
            questions = _hide_answers(questions)
    return ContestDetail(
        contest=replace(contest, questions=()),
        questions=questions,
        participation=participation,
        can_join=participation is None and is_open(contest, now),
    )


@guarded
def leaderboard(
    store: ContestStore,
    viewer: Optional[Identity],
    contest_id: str,
    now: datetime,
    limit: Optional[int] = ContestLimits.LEADERBOARD_LIMIT,
) -> Leaderboard:
    contest = store.get_contest(contest_id)
    if contest is None:
        raise Rejected("not_found", "Contest not found")
    if contest.tier == "VIP" and (viewer is None or not viewer.sees_vip):
        raise Rejected(
            "access_denied",
            "Access denied. VIP contest leaderboards are only available to VIP users",
        )
    rows = rank(store, contest_id, completed_only=True, limit=limit)
    viewer_rank = rank_of(store, viewer.id, contest_id) if viewer else None
    return Leaderboard(
        contest_id=contest_id,
        status=effective_status(contest, now),
        end_time=contest.end_time,
        rows=tuple(rows),
        viewer_rank=viewer_rank,
    )
