"""Participation ledger: join, submit and history.

Join validation order:
    not_found -> access_denied -> already_joined -> not_open -> full
The uniqueness check, the capacity check and the counter increment are
repeated inside the store's atomic `insert_participation`; the earlier
reads only give callers the most specific error cheaply.

Submit validation order:
    not_found -> already_completed -> ended -> answer_count_mismatch -> invalid_answer
Submission is write-once: the completion flag is checked and set atomically
with the score write, so a retried submit is rejected, never re-graded.
"""
from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Sequence

from .grading import grade_sheet, validate_answers
from .lifecycle import effective_status
from .results import Rejected, guarded
from .store import ContestStore
from .types import (
    Answer,
    Contest,
    Identity,
    Participation,
    ParticipationPage,
    ScoreSummary,
)

logger = logging.getLogger(__name__)


def load_active_contest(store: ContestStore, contest_id: str) -> Contest:
    contest = store.get_contest(contest_id)
    if contest is None:
        raise Rejected("not_found", "Contest not found")
    if not contest.is_active:
        raise Rejected("not_found", "Contest is not active")
    return contest


def check_tier_access(identity: Identity | None, contest: Contest) -> None:
    if contest.tier == "VIP" and (identity is None or not identity.sees_vip):
        raise Rejected(
            "access_denied",
            "Access denied. VIP contests are only available to VIP users",
        )


def _check_open(contest: Contest, now: datetime) -> None:
    if now < contest.start_time:
        raise Rejected("not_open", "Contest has not started yet")
    if now > contest.end_time:
        raise Rejected("not_open", "Contest has already ended")
    if effective_status(contest, now) != "ONGOING":
        raise Rejected("not_open", "Contest is not currently active")


def elapsed_seconds(joined_at: datetime, submitted_at: datetime) -> int:
    return max(0, math.floor((submitted_at - joined_at).total_seconds()))


@guarded
def join(
    store: ContestStore, identity: Identity, contest_id: str, now: datetime
) -> Participation:
    contest = load_active_contest(store, contest_id)
    check_tier_access(identity, contest)
    if store.get_participation(identity.id, contest_id) is not None:
        raise Rejected("already_joined", "You have already joined this contest")
    _check_open(contest, now)
    if contest.current_participants >= contest.max_participants:
        raise Rejected("full", "Contest is full")

    participation = Participation(
        identity_id=identity.id,
        contest_id=contest_id,
        joined_at=now,
        total_questions=len(contest.questions),
    )
    result = store.insert_participation(participation)
    if result == "duplicate":
        raise Rejected("already_joined", "You have already joined this contest")
    if result == "full":
        raise Rejected("full", "Contest is full")
    if result == "missing":
        raise Rejected("not_found", "Contest not found")
    logger.info(f"Identity {identity.id} joined contest {contest_id}")
    return participation


@guarded
def submit(
    store: ContestStore,
    identity: Identity,
    contest_id: str,
    answers: Sequence[Answer],
    now: datetime,
) -> ScoreSummary:
    contest = store.get_contest(contest_id)
    if contest is None:
        raise Rejected("not_found", "Contest not found")
    participation = store.get_participation(identity.id, contest_id)
    if participation is None:
        raise Rejected("not_found", "You must join the contest before submitting answers")
    if participation.is_completed:
        raise Rejected("already_completed", "You have already submitted your answers")
    if now > contest.end_time:
        raise Rejected("ended", "Contest has ended. Cannot submit answers")

    validate_answers(contest.questions, answers)
    sheet = grade_sheet(contest.questions, answers)
    time_spent = elapsed_seconds(participation.joined_at, now)
    completed = replace(
        participation,
        answers=sheet.answers,
        score=sheet.score,
        correct_answers=sheet.correct_answers,
        wrong_answers=sheet.wrong_answers,
        is_completed=True,
        submitted_at=now,
        time_spent=time_spent,
    )
    if not store.complete_participation(completed):
        raise Rejected("already_completed", "You have already submitted your answers")
    logger.info(
        f"Identity {identity.id} submitted contest {contest_id}: score={sheet.score}"
    )
    return ScoreSummary(
        score=sheet.score,
        correct_answers=sheet.correct_answers,
        wrong_answers=sheet.wrong_answers,
        total_questions=len(contest.questions),
        submitted_at=now,
        time_spent=time_spent,
    )


@guarded
def history(
    store: ContestStore, identity: Identity, page: int = 1, limit: int = 10
) -> ParticipationPage:
    page = max(1, int(page))
    limit = max(1, int(limit))
    rows = store.participations_for_identity(identity.id)
    start = (page - 1) * limit
    return ParticipationPage(
        participations=tuple(rows[start : start + limit]),
        page=page,
        pages=math.ceil(len(rows) / limit),
        total=len(rows),
    )
