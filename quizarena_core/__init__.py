from .admin import (
    add_question,
    admin_leaderboard,
    admin_list_contests,
    change_status,
    contest_stats,
    create_contest,
    delete_contest,
    delete_question,
    edit_question,
    update_contest,
)
from .catalog import contest_detail, leaderboard, list_contests, visible_tiers
from .clock import Clock, FixedClock, SystemClock
from .engine import ERROR_STATUS_CODES, ContestEngine
from .grading import Grade, GradedSheet, grade, grade_sheet, validate_answers, validate_question
from .ledger import history, join, submit
from .lifecycle import (
    can_delete,
    can_mutate_full,
    can_mutate_questions,
    derive_status,
    effective_status,
    is_open,
    reconcile,
    release_status,
    set_status,
)
from .ranking import rank, rank_of
from .results import OperationError, Outcome, Rejected, StoreUnavailable
from .store import ContestStore, InMemoryContestStore
from .types import (
    Answer,
    AnswerRecord,
    Contest,
    ContestDetail,
    ContestListing,
    ContestPage,
    ContestStats,
    Identity,
    Leaderboard,
    LeaderboardRow,
    Option,
    Participation,
    ParticipationPage,
    ParticipationStatus,
    Question,
    ScoreSummary,
)
from .validation import (
    AnswerIn,
    ContestCreate,
    ContestLimits,
    ContestUpdate,
    InputSanitizer,
    OptionIn,
    QuestionIn,
    SubmissionIn,
)

__all__ = [
    "Answer",
    "AnswerIn",
    "AnswerRecord",
    "Clock",
    "Contest",
    "ContestCreate",
    "ContestDetail",
    "ContestEngine",
    "ContestLimits",
    "ContestListing",
    "ContestPage",
    "ContestStats",
    "ContestStore",
    "ContestUpdate",
    "ERROR_STATUS_CODES",
    "FixedClock",
    "Grade",
    "GradedSheet",
    "Identity",
    "InMemoryContestStore",
    "InputSanitizer",
    "Leaderboard",
    "LeaderboardRow",
    "OperationError",
    "Option",
    "OptionIn",
    "Outcome",
    "Participation",
    "ParticipationPage",
    "ParticipationStatus",
    "Question",
    "QuestionIn",
    "Rejected",
    "ScoreSummary",
    "StoreUnavailable",
    "SubmissionIn",
    "SystemClock",
    "add_question",
    "admin_leaderboard",
    "admin_list_contests",
    "can_delete",
    "can_mutate_full",
    "can_mutate_questions",
    "change_status",
    "contest_detail",
    "contest_stats",
    "create_contest",
    "delete_contest",
    "delete_question",
    "derive_status",
    "edit_question",
    "effective_status",
    "grade",
    "grade_sheet",
    "history",
    "is_open",
    "join",
    "leaderboard",
    "list_contests",
    "rank",
    "rank_of",
    "reconcile",
    "release_status",
    "set_status",
    "submit",
    "update_contest",
    "validate_answers",
    "validate_question",
    "visible_tiers",
]
