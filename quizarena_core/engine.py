"""Engine facade: one object binding a store and a clock.

The module-level operations take `now` explicitly. `ContestEngine` reads the
injected clock once per call and forwards it, so a transport layer only needs
an engine instance and the caller's identity. Each forwarded call's outcome is
logged at debug level; rejections are already logged as warnings where they
are raised.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from . import admin, catalog, ledger, lifecycle, ranking
from .clock import Clock, SystemClock
from .results import Outcome
from .store import ContestStore
from .types import Answer, Contest, ContestStatus, Identity, Question
from .validation import ContestCreate, ContestLimits, ContestUpdate

logger = logging.getLogger(__name__)

# Suggested mapping for HTTP transports; not used by the core itself.
ERROR_STATUS_CODES: Dict[str, int] = {
    "not_found": 404,
    "access_denied": 403,
    "not_open": 409,
    "full": 409,
    "already_joined": 409,
    "already_completed": 409,
    "ended": 409,
    "invalid_answer": 400,
    "answer_count_mismatch": 400,
    "invalid_state": 400,
    "invalid_question": 400,
    "invalid_contest": 400,
    "contest_started": 409,
    "store_unavailable": 503,
}


def _logged(operation: str, outcome: Outcome) -> Outcome:
    logger.debug(f"{operation}: {'ok' if outcome.ok else outcome.kind}")
    return outcome


class ContestEngine:
    def __init__(
        self,
        store: ContestStore,
        clock: Optional[Clock] = None,
        *,
        leaderboard_limit: Optional[int] = ContestLimits.LEADERBOARD_LIMIT,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.leaderboard_limit = leaderboard_limit

    # ---- participants ----

    def join(self, identity: Identity, contest_id: str) -> Outcome:
        return _logged(
            "join", ledger.join(self.store, identity, contest_id, self.clock.now())
        )

    def submit(self, identity: Identity, contest_id: str, answers: Sequence[Answer]) -> Outcome:
        return _logged(
            "submit", ledger.submit(self.store, identity, contest_id, answers, self.clock.now())
        )

    def history(self, identity: Identity, page: int = 1, limit: int = ContestLimits.DEFAULT_PAGE_SIZE) -> Outcome:
        return _logged("history", ledger.history(self.store, identity, page, limit))

    # ---- catalog ----

    def list_contests(
        self,
        viewer: Optional[Identity],
        *,
        status: Optional[str] = None,
        tier: Optional[str] = None,
        page: int = 1,
        limit: int = ContestLimits.DEFAULT_PAGE_SIZE,
    ) -> Outcome:
        return _logged(
            "list_contests",
            catalog.list_contests(
                self.store, viewer, self.clock.now(), status=status, tier=tier, page=page, limit=limit
            ),
        )

    def contest_detail(self, viewer: Optional[Identity], contest_id: str) -> Outcome:
        return _logged(
            "contest_detail", catalog.contest_detail(self.store, viewer, contest_id, self.clock.now())
        )

    def leaderboard(self, viewer: Optional[Identity], contest_id: str) -> Outcome:
        return _logged(
            "leaderboard",
            catalog.leaderboard(
                self.store, viewer, contest_id, self.clock.now(), limit=self.leaderboard_limit
            ),
        )

    def rank_of(self, identity: Identity, contest_id: str) -> Optional[int]:
        return ranking.rank_of(self.store, identity.id, contest_id)

    def status_of(self, contest: Contest) -> ContestStatus:
        return lifecycle.effective_status(contest, self.clock.now())

    # ---- administration ----

    def create_contest(self, admin_identity: Identity, payload: ContestCreate) -> Outcome:
        return _logged(
            "create_contest",
            admin.create_contest(self.store, admin_identity, payload, self.clock.now()),
        )

    def update_contest(self, admin_identity: Identity, contest_id: str, changes: ContestUpdate) -> Outcome:
        return _logged(
            "update_contest",
            admin.update_contest(self.store, admin_identity, contest_id, changes, self.clock.now()),
        )

    def delete_contest(self, admin_identity: Identity, contest_id: str) -> Outcome:
        return _logged("delete_contest", admin.delete_contest(self.store, admin_identity, contest_id))

    def add_question(self, admin_identity: Identity, contest_id: str, question: Question) -> Outcome:
        return _logged(
            "add_question",
            admin.add_question(self.store, admin_identity, contest_id, question, self.clock.now()),
        )

    def edit_question(
        self, admin_identity: Identity, contest_id: str, index: int, question: Question
    ) -> Outcome:
        return _logged(
            "edit_question",
            admin.edit_question(
                self.store, admin_identity, contest_id, index, question, self.clock.now()
            ),
        )

    def delete_question(self, admin_identity: Identity, contest_id: str, index: int) -> Outcome:
        return _logged(
            "delete_question",
            admin.delete_question(self.store, admin_identity, contest_id, index, self.clock.now()),
        )

    def change_status(self, admin_identity: Identity, contest_id: str, status: Optional[str]) -> Outcome:
        return _logged(
            "change_status",
            admin.change_status(self.store, admin_identity, contest_id, status, self.clock.now()),
        )

    def admin_leaderboard(self, admin_identity: Identity, contest_id: str) -> Outcome:
        return _logged(
            "admin_leaderboard", admin.admin_leaderboard(self.store, admin_identity, contest_id)
        )

    def admin_list_contests(
        self,
        admin_identity: Identity,
        *,
        status: Optional[str] = None,
        tier: Optional[str] = None,
        page: int = 1,
        limit: int = ContestLimits.DEFAULT_PAGE_SIZE,
    ) -> Outcome:
        return _logged(
            "admin_list_contests",
            admin.admin_list_contests(
                self.store,
                admin_identity,
                self.clock.now(),
                status=status,
                tier=tier,
                page=page,
                limit=limit,
            ),
        )

    def contest_stats(self, admin_identity: Identity, contest_id: str) -> Outcome:
        return _logged(
            "contest_stats",
            admin.contest_stats(self.store, admin_identity, contest_id, self.clock.now()),
        )
