"""Durable store protocol and the in-memory reference store.

The core never talks to a database directly. It needs a handful of primitives,
two of which must be atomic per contest:

- `insert_participation`: uniqueness check on (identity, contest), capacity
  check, insert and participant-counter increment as one unit;
- `complete_participation`: check-and-set of the completion flag together with
  the score write.

`update_contest` and `delete_contest` are read-modify-write units under the same
per-contest serialization, so an admin edit never clobbers a concurrent join.

Stores signal backend failure by raising `StoreUnavailable`.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Literal, Optional, Protocol, Tuple

from .ranking import is_ahead, standing_key
from .types import Contest, Participation

logger = logging.getLogger(__name__)


InsertResult = Literal["inserted", "duplicate", "full", "missing"]


class ContestStore(Protocol):
    def get_contest(self, contest_id: str) -> Optional[Contest]:
        ...

    def list_contests(
        self, *, active_only: bool = True, tiers: Optional[Iterable[str]] = None
    ) -> List[Contest]:
        ...

    def add_contest(self, contest: Contest) -> Contest:
        ...

    def update_contest(
        self, contest_id: str, mutate: Callable[[Contest], Contest]
    ) -> Optional[Contest]:
        ...

    def delete_contest(
        self, contest_id: str, guard: Callable[[Contest, int], None]
    ) -> Optional[Contest]:
        ...

    def count_participations(self, contest_id: str) -> int:
        ...

    def get_participation(self, identity_id: str, contest_id: str) -> Optional[Participation]:
        ...

    def participations_for_identity(self, identity_id: str) -> List[Participation]:
        ...

    def insert_participation(self, participation: Participation) -> InsertResult:
        ...

    def complete_participation(self, participation: Participation) -> bool:
        ...

    def ranked_participations(
        self, contest_id: str, *, completed_only: bool = True, limit: Optional[int] = None
    ) -> List[Participation]:
        ...

    def count_ahead(self, contest_id: str, score: int, submitted_at: datetime) -> int:
        ...


class InMemoryContestStore:
    """
    Thread-safe in-memory store.

    Each contest id gets its own lock for the multi-step units; a short-lived
    index lock guards the dictionaries themselves. Records are frozen
    dataclasses, so handing them out needs no copying.
    """

    def __init__(self) -> None:
        self._contests: Dict[str, Contest] = {}
        self._participations: Dict[Tuple[str, str], Participation] = {}
        self._contest_locks: Dict[str, threading.Lock] = {}
        self._index_lock = threading.Lock()

    def _lock_for(self, contest_id: str) -> threading.Lock:
        with self._index_lock:
            lock = self._contest_locks.get(contest_id)
            if lock is None:
                lock = threading.Lock()
                self._contest_locks[contest_id] = lock
            return lock

    def _rows(self) -> List[Participation]:
        with self._index_lock:
            return list(self._participations.values())

    # ---- contests ----

    def get_contest(self, contest_id: str) -> Optional[Contest]:
        with self._index_lock:
            return self._contests.get(contest_id)

    def list_contests(
        self, *, active_only: bool = True, tiers: Optional[Iterable[str]] = None
    ) -> List[Contest]:
        allowed = set(tiers) if tiers is not None else None
        with self._index_lock:
            contests = list(self._contests.values())
        out = [
            c
            for c in contests
            if (not active_only or c.is_active) and (allowed is None or c.tier in allowed)
        ]
        out.sort(key=lambda c: (c.start_time, c.id))
        return out

    def add_contest(self, contest: Contest) -> Contest:
        with self._index_lock:
            if contest.id in self._contests:
                raise ValueError(f"contest {contest.id} already exists")
            self._contests[contest.id] = contest
        return contest

    def update_contest(
        self, contest_id: str, mutate: Callable[[Contest], Contest]
    ) -> Optional[Contest]:
        with self._lock_for(contest_id):
            current = self.get_contest(contest_id)
            if current is None:
                return None
            updated = mutate(current)
            with self._index_lock:
                self._contests[contest_id] = updated
            return updated

    def delete_contest(
        self, contest_id: str, guard: Callable[[Contest, int], None]
    ) -> Optional[Contest]:
        with self._lock_for(contest_id):
            current = self.get_contest(contest_id)
            if current is None:
                return None
            guard(current, self.count_participations(contest_id))
            with self._index_lock:
                del self._contests[contest_id]
            return current

    # ---- participations ----

    def count_participations(self, contest_id: str) -> int:
        return sum(1 for p in self._rows() if p.contest_id == contest_id)

    def get_participation(self, identity_id: str, contest_id: str) -> Optional[Participation]:
        with self._index_lock:
            return self._participations.get((identity_id, contest_id))

    def participations_for_identity(self, identity_id: str) -> List[Participation]:
        rows = [p for p in self._rows() if p.identity_id == identity_id]
        rows.sort(key=lambda p: p.joined_at, reverse=True)
        return rows

    def insert_participation(self, participation: Participation) -> InsertResult:
        contest_id = participation.contest_id
        with self._lock_for(contest_id):
            contest = self.get_contest(contest_id)
            if contest is None or not contest.is_active:
                return "missing"
            with self._index_lock:
                if participation.key in self._participations:
                    return "duplicate"
                if contest.current_participants >= contest.max_participants:
                    return "full"
                self._participations[participation.key] = participation
                self._contests[contest_id] = replace(
                    contest, current_participants=contest.current_participants + 1
                )
            return "inserted"

    def complete_participation(self, participation: Participation) -> bool:
        with self._lock_for(participation.contest_id):
            with self._index_lock:
                stored = self._participations.get(participation.key)
                if stored is None or stored.is_completed:
                    return False
                self._participations[participation.key] = participation
            return True

    def ranked_participations(
        self, contest_id: str, *, completed_only: bool = True, limit: Optional[int] = None
    ) -> List[Participation]:
        rows = [
            p
            for p in self._rows()
            if p.contest_id == contest_id and (p.is_completed or not completed_only)
        ]
        rows.sort(key=standing_key)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def count_ahead(self, contest_id: str, score: int, submitted_at: datetime) -> int:
        return sum(
            1
            for p in self._rows()
            if p.contest_id == contest_id
            and p.is_completed
            and is_ahead(p.score, p.submitted_at, score, submitted_at)
        )
