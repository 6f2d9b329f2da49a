"""Administrator operations on contests and their question lists.

Rules enforced here:
- before the start time every field may change;
- from the start time on, only description, prize_info and max_participants;
- questions may only be added, edited or deleted before the start time, and
  every add/edit re-checks the question's type invariants;
- capacity never drops below the current participant count;
- a contest with any participation can never be deleted.

Contest writes go through `store.update_contest`, which serializes them with
joins on the same contest.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from .catalog import check_filters
from .grading import validate_question
from .lifecycle import (
    can_delete,
    can_mutate_full,
    can_mutate_questions,
    reconcile,
    release_status,
    set_status,
)
from .ranking import rank
from .results import Rejected, guarded
from .store import ContestStore
from .types import (
    Contest,
    ContestListing,
    ContestPage,
    ContestStats,
    Identity,
    LeaderboardRow,
    Question,
)
from .validation import ContestCreate, ContestLimits, ContestUpdate

logger = logging.getLogger(__name__)

RESTRICTED_FIELDS = frozenset({"description", "prize_info", "max_participants"})


def _require_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise Rejected("access_denied", "Administrator access required")


def _apply(store: ContestStore, contest_id: str, mutate) -> Contest:
    updated = store.update_contest(contest_id, mutate)
    if updated is None:
        raise Rejected("not_found", "Contest not found")
    return updated


@guarded
def create_contest(
    store: ContestStore, admin: Identity, payload: ContestCreate, now: datetime
) -> Contest:
    _require_admin(admin)
    if payload.start_time <= now:
        raise Rejected("invalid_contest", "Start time must be in the future")
    contest = Contest(
        id=uuid.uuid4().hex,
        name=payload.name,
        description=payload.description,
        tier=payload.type,
        start_time=payload.start_time,
        end_time=payload.end_time,
        prize_info=payload.prize_info,
        max_participants=payload.max_participants,
        status="UPCOMING",
        created_by=admin.id,
    )
    store.add_contest(contest)
    logger.info(f"Contest {contest.id} created by {admin.id}")
    return contest


@guarded
def update_contest(
    store: ContestStore,
    admin: Identity,
    contest_id: str,
    changes: ContestUpdate,
    now: datetime,
) -> Contest:
    _require_admin(admin)
    fields = changes.changed_fields()

    def mutate(contest: Contest) -> Contest:
        if not can_mutate_full(contest, now):
            locked = sorted(set(fields) - RESTRICTED_FIELDS)
            if locked:
                raise Rejected(
                    "contest_started",
                    f"Cannot update {', '.join(locked)} after the contest has started",
                )
        updated = replace(contest, **fields)
        if updated.end_time <= updated.start_time:
            raise Rejected("invalid_contest", "End time must be after start time")
        if updated.max_participants < contest.current_participants:
            raise Rejected(
                "invalid_contest",
                f"max_participants cannot drop below {contest.current_participants}",
            )
        return updated

    updated = _apply(store, contest_id, mutate)
    logger.info(f"Contest {contest_id} updated: {sorted(fields)}")
    return updated


@guarded
def delete_contest(store: ContestStore, admin: Identity, contest_id: str) -> Contest:
    _require_admin(admin)

    def guard(contest: Contest, participation_count: int) -> None:
        if not can_delete(contest, participation_count):
            raise Rejected("invalid_state", "Cannot delete contest with existing participants")

    deleted = store.delete_contest(contest_id, guard)
    if deleted is None:
        raise Rejected("not_found", "Contest not found")
    logger.info(f"Contest {contest_id} deleted by {admin.id}")
    return deleted


def _question_mutation(now: datetime, action: str):
    def check(contest: Contest) -> None:
        if not can_mutate_questions(contest, now):
            raise Rejected(
                "contest_started", f"Cannot {action} questions after the contest has started"
            )

    return check


def _check_index(contest: Contest, index: int) -> None:
    if index < 0 or index >= len(contest.questions):
        raise Rejected("invalid_question", "Invalid question index")


@guarded
def add_question(
    store: ContestStore, admin: Identity, contest_id: str, question: Question, now: datetime
) -> Contest:
    _require_admin(admin)
    check = _question_mutation(now, "add")

    def mutate(contest: Contest) -> Contest:
        check(contest)
        validate_question(question)
        return replace(contest, questions=contest.questions + (question,))

    return _apply(store, contest_id, mutate)


@guarded
def edit_question(
    store: ContestStore,
    admin: Identity,
    contest_id: str,
    index: int,
    question: Question,
    now: datetime,
) -> Contest:
    _require_admin(admin)
    check = _question_mutation(now, "update")

    def mutate(contest: Contest) -> Contest:
        _check_index(contest, index)
        check(contest)
        validate_question(question)
        questions = list(contest.questions)
        questions[index] = question
        return replace(contest, questions=tuple(questions))

    return _apply(store, contest_id, mutate)


@guarded
def delete_question(
    store: ContestStore, admin: Identity, contest_id: str, index: int, now: datetime
) -> Contest:
    _require_admin(admin)
    check = _question_mutation(now, "delete")

    def mutate(contest: Contest) -> Contest:
        _check_index(contest, index)
        check(contest)
        return replace(contest, questions=contest.questions[:index] + contest.questions[index + 1 :])

    return _apply(store, contest_id, mutate)


@guarded
def change_status(
    store: ContestStore, admin: Identity, contest_id: str, status: Optional[str], now: datetime
) -> Contest:
    """Pin a contest's status, or pass ``None`` to let it follow the clock again."""
    _require_admin(admin)

    def mutate(contest: Contest) -> Contest:
        if status is None:
            return release_status(contest, now)
        return set_status(contest, status)

    updated = _apply(store, contest_id, mutate)
    logger.info(f"Contest {contest_id} status set to {updated.status} by {admin.id}")
    return updated


@guarded
def admin_leaderboard(
    store: ContestStore, admin: Identity, contest_id: str
) -> List[LeaderboardRow]:
    """Every participation, completed ones ranked first."""
    _require_admin(admin)
    if store.get_contest(contest_id) is None:
        raise Rejected("not_found", "Contest not found")
    return rank(store, contest_id, completed_only=False)


@guarded
def admin_list_contests(
    store: ContestStore,
    admin: Identity,
    now: datetime,
    status: Optional[str] = None,
    tier: Optional[str] = None,
    page: int = 1,
    limit: int = ContestLimits.DEFAULT_PAGE_SIZE,
) -> ContestPage:
    """All contests of both tiers, inactive ones included."""
    _require_admin(admin)
    check_filters(status, tier)
    page = max(1, int(page))
    limit = max(1, int(limit))

    tiers = (tier,) if tier else None
    contests = [reconcile(c, now) for c in store.list_contests(active_only=False, tiers=tiers)]
    if status is not None:
        contests = [c for c in contests if c.status == status]

    total = len(contests)
    start = (page - 1) * limit
    return ContestPage(
        contests=tuple(
            ContestListing(contest=replace(c, questions=())) for c in contests[start : start + limit]
        ),
        page=page,
        pages=math.ceil(total / limit),
        total=total,
    )


@guarded
def contest_stats(
    store: ContestStore, admin: Identity, contest_id: str, now: datetime
) -> ContestStats:
    _require_admin(admin)
    contest = store.get_contest(contest_id)
    if contest is None:
        raise Rejected("not_found", "Contest not found")
    contest = reconcile(contest, now)

    rows = store.ranked_participations(contest_id, completed_only=False)
    if not rows:
        return ContestStats(contest=contest)
    scores = [p.score for p in rows]
    return ContestStats(
        contest=contest,
        total_participants=len(rows),
        completed_submissions=sum(1 for p in rows if p.is_completed),
        average_score=sum(scores) / len(scores),
        highest_score=max(scores),
    )
