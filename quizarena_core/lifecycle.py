"""Contest lifecycle: status derivation, administrative override, mutation gates.

All functions are pure. `now` is always passed in; nothing here reads a clock.

Two notions of status exist side by side:
- derived status: what wall-clock time says (`derive_status`);
- effective status: the stored status when an administrator has pinned it
  with `set_status`, otherwise the derived status (`effective_status`).
Join, submit and the catalog consult the effective status only.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from .results import Rejected
from .types import CONTEST_STATUSES, Contest, ContestStatus

logger = logging.getLogger(__name__)


def derive_status(contest: Contest, now: datetime) -> ContestStatus:
    """Status implied by the clock alone: UPCOMING, then ONGOING (inclusive), then ENDED."""
    if now < contest.start_time:
        return "UPCOMING"
    if now <= contest.end_time:
        return "ONGOING"
    return "ENDED"


def effective_status(contest: Contest, now: datetime) -> ContestStatus:
    if contest.status_overridden:
        return contest.status
    return derive_status(contest, now)


def reconcile(contest: Contest, now: datetime) -> Contest:
    """Return the contest with `status` materialized to its effective value."""
    status = effective_status(contest, now)
    if status == contest.status:
        return contest
    logger.debug(f"Contest {contest.id} status {contest.status} -> {status}")
    return replace(contest, status=status)


def set_status(contest: Contest, new_status: str) -> Contest:
    """Administrative override. Not validated against the clock."""
    if new_status not in CONTEST_STATUSES:
        raise Rejected(
            "invalid_state",
            "Invalid status. Must be UPCOMING, ONGOING, or ENDED",
        )
    return replace(contest, status=new_status, status_overridden=True)


def release_status(contest: Contest, now: datetime) -> Contest:
    """Drop an override and go back to following the clock."""
    return replace(contest, status=derive_status(contest, now), status_overridden=False)


def is_open(contest: Contest, now: datetime) -> bool:
    return (
        contest.start_time <= now <= contest.end_time
        and effective_status(contest, now) == "ONGOING"
    )


def can_mutate_full(contest: Contest, now: datetime) -> bool:
    return now < contest.start_time


def can_mutate_questions(contest: Contest, now: datetime) -> bool:
    return can_mutate_full(contest, now)


def can_delete(contest: Contest, participation_count: int) -> bool:
    return participation_count == 0
