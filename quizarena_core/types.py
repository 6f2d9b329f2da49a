"""Type definitions for contests, questions and participations."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional, Tuple


ContestTier = Literal["NORMAL", "VIP"]
ContestStatus = Literal["UPCOMING", "ONGOING", "ENDED"]
QuestionType = Literal["single-select", "multi-select", "true-false"]
IdentityTier = Literal["normal", "vip", "admin"]

CONTEST_STATUSES: Tuple[str, ...] = ("UPCOMING", "ONGOING", "ENDED")
CONTEST_TIERS: Tuple[str, ...] = ("NORMAL", "VIP")
QUESTION_TYPES: Tuple[str, ...] = ("single-select", "multi-select", "true-false")


@dataclass(frozen=True)
class Identity:
    """The caller as supplied by the identity provider."""

    id: str
    tier: IdentityTier = "normal"

    @property
    def is_admin(self) -> bool:
        return self.tier == "admin"

    @property
    def sees_vip(self) -> bool:
        return self.tier in ("vip", "admin")


@dataclass(frozen=True)
class Option:
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class Question:
    text: str
    type: QuestionType
    options: Tuple[Option, ...]
    points: int = 1

    def correct_indices(self) -> frozenset[int]:
        return frozenset(i for i, opt in enumerate(self.options) if opt.is_correct)


@dataclass(frozen=True)
class Contest:
    """
    A contest and its embedded question list.

    `status` is the materialized status. It tracks wall-clock time unless
    `status_overridden` is set, in which case an administrator has pinned it.
    """

    id: str
    name: str
    description: str
    tier: ContestTier
    start_time: datetime
    end_time: datetime
    prize_info: str
    questions: Tuple[Question, ...] = ()
    max_participants: int = 1000
    current_participants: int = 0
    status: ContestStatus = "UPCOMING"
    status_overridden: bool = False
    is_active: bool = True
    created_by: Optional[str] = None


@dataclass(frozen=True)
class Answer:
    """One submitted answer, as received from the caller."""

    question_index: int
    selected_options: Tuple[int, ...]


@dataclass(frozen=True)
class AnswerRecord:
    question_index: int
    selected_options: Tuple[int, ...]
    is_correct: bool = False
    points_earned: int = 0


@dataclass(frozen=True)
class Participation:
    identity_id: str
    contest_id: str
    joined_at: datetime
    total_questions: int
    submitted_at: Optional[datetime] = None
    answers: Tuple[AnswerRecord, ...] = ()
    score: int = 0
    correct_answers: int = 0
    wrong_answers: int = 0
    is_completed: bool = False
    time_spent: int = 0  # seconds, floored

    @property
    def key(self) -> Tuple[str, str]:
        return (self.identity_id, self.contest_id)


@dataclass(frozen=True)
class ScoreSummary:
    score: int
    correct_answers: int
    wrong_answers: int
    total_questions: int
    submitted_at: datetime
    time_spent: int


@dataclass(frozen=True)
class LeaderboardRow:
    identity_id: str
    rank: int
    score: int
    correct_answers: int
    wrong_answers: int
    submitted_at: Optional[datetime]
    time_spent: int
    is_completed: bool = True


@dataclass(frozen=True)
class ParticipationStatus:
    """The viewer's own standing in a contest, attached to catalog listings."""

    has_joined: bool = False
    is_completed: bool = False
    score: Optional[int] = None
    rank: Optional[int] = None


@dataclass(frozen=True)
class ContestListing:
    contest: Contest
    participation: Optional[ParticipationStatus] = None


@dataclass(frozen=True)
class ContestPage:
    contests: Tuple[ContestListing, ...]
    page: int
    pages: int
    total: int


@dataclass(frozen=True)
class ContestDetail:
    contest: Contest
    questions: Optional[Tuple[Question, ...]]
    participation: Optional[Participation]
    can_join: bool


@dataclass(frozen=True)
class Leaderboard:
    contest_id: str
    status: ContestStatus
    end_time: datetime
    rows: Tuple[LeaderboardRow, ...]
    viewer_rank: Optional[int] = None


@dataclass(frozen=True)
class ParticipationPage:
    participations: Tuple[Participation, ...]
    page: int
    pages: int
    total: int


@dataclass(frozen=True)
class ContestStats:
    """Participation statistics for the admin contest view."""

    contest: Contest
    total_participants: int = 0
    completed_submissions: int = 0
    average_score: float = 0.0
    highest_score: int = 0
