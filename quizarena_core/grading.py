"""Answer grading and question/answer structural rules (pure).

Question types are a tagged variant. Each tag maps to a `QuestionRules` entry
holding its own authoring check, selection check and grading function, so call
sites dispatch on `question.type` in one place only.

Grading is all-or-nothing per question:
- single-select / true-false: the one selected option must be flagged correct.
- multi-select: the selected index set must equal the correct index set
  (order-independent; extra or missing selections both fail).
No partial credit, no negative marking.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple

from .results import Rejected
from .types import Answer, AnswerRecord, Question

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grade:
    is_correct: bool
    points_earned: int


@dataclass(frozen=True)
class GradedSheet:
    answers: Tuple[AnswerRecord, ...]
    score: int
    correct_answers: int
    wrong_answers: int


def _check_single_correct(question: Question) -> str | None:
    if len(question.correct_indices()) != 1:
        return f"{question.type} questions must have exactly one correct option"
    return None


def _check_true_false(question: Question) -> str | None:
    if len(question.options) != 2:
        return "true-false questions must have exactly 2 options"
    return _check_single_correct(question)


def _check_multi(question: Question) -> str | None:
    return None


def _exactly_one(question: Question, selected: Sequence[int]) -> str | None:
    if len(selected) != 1:
        return f"{question.type} questions require exactly one selected option"
    return None


def _any_count(question: Question, selected: Sequence[int]) -> str | None:
    return None


def _grade_single(question: Question, selected: Sequence[int]) -> bool:
    if len(selected) != 1:
        return False
    idx = selected[0]
    if idx < 0 or idx >= len(question.options):
        return False
    return question.options[idx].is_correct


def _grade_multi(question: Question, selected: Sequence[int]) -> bool:
    return frozenset(selected) == question.correct_indices()


@dataclass(frozen=True)
class QuestionRules:
    check_question: Callable[[Question], str | None]
    check_selection: Callable[[Question, Sequence[int]], str | None]
    is_correct: Callable[[Question, Sequence[int]], bool]


QUESTION_RULES: Dict[str, QuestionRules] = {
    "single-select": QuestionRules(_check_single_correct, _exactly_one, _grade_single),
    "true-false": QuestionRules(_check_true_false, _exactly_one, _grade_single),
    "multi-select": QuestionRules(_check_multi, _any_count, _grade_multi),
}


def _rules_for(question: Question) -> QuestionRules:
    rules = QUESTION_RULES.get(question.type)
    if rules is None:
        raise ValueError(f"unknown question type: {question.type!r}")
    return rules


def validate_question(question: Question) -> None:
    """Raise `Rejected('invalid_question')` if the question breaks its type's invariants."""
    if question.type not in QUESTION_RULES:
        raise Rejected("invalid_question", f"unknown question type: {question.type!r}")
    if not question.text or not question.text.strip():
        raise Rejected("invalid_question", "question text is required")
    if question.points < 1:
        raise Rejected("invalid_question", "points must be at least 1")
    if len(question.options) < 2:
        raise Rejected("invalid_question", "at least 2 options are required")
    if not question.correct_indices():
        raise Rejected("invalid_question", "question must have at least one correct option")
    problem = _rules_for(question).check_question(question)
    if problem:
        raise Rejected("invalid_question", problem)


def grade(question: Question, selected: Sequence[int]) -> Grade:
    """Grade one selection against one question."""
    correct = bool(_rules_for(question).is_correct(question, selected))
    return Grade(is_correct=correct, points_earned=question.points if correct else 0)


def validate_answers(questions: Sequence[Question], answers: Sequence[Answer]) -> None:
    """
    Structural checks for a full submission; raises on the first violation.

    Raises:
        Rejected('answer_count_mismatch'): answer count differs from question count
        Rejected('invalid_answer'): bad question index, repeated question index,
            option index out of range, repeated option, or wrong selection count
    """
    if len(answers) != len(questions):
        raise Rejected(
            "answer_count_mismatch",
            f"You must answer all {len(questions)} questions",
        )
    seen: set[int] = set()
    for pos, answer in enumerate(answers, start=1):
        q_idx = answer.question_index
        if q_idx < 0 or q_idx >= len(questions):
            raise Rejected("invalid_answer", f"Invalid question index: {q_idx}")
        if q_idx in seen:
            raise Rejected("invalid_answer", f"Question index {q_idx} answered twice")
        seen.add(q_idx)
        question = questions[q_idx]
        for opt in answer.selected_options:
            if opt < 0 or opt >= len(question.options):
                raise Rejected(
                    "invalid_answer", f"Invalid option index {opt} for question {pos}"
                )
        if len(set(answer.selected_options)) != len(answer.selected_options):
            raise Rejected("invalid_answer", f"Question {pos} repeats an option")
        problem = _rules_for(question).check_selection(question, answer.selected_options)
        if problem:
            raise Rejected("invalid_answer", f"Question {pos}: {problem}")


def grade_sheet(questions: Sequence[Question], answers: Sequence[Answer]) -> GradedSheet:
    """Grade a validated submission and total it up."""
    records = []
    score = 0
    correct = 0
    for answer in answers:
        result = grade(questions[answer.question_index], answer.selected_options)
        records.append(
            AnswerRecord(
                question_index=answer.question_index,
                selected_options=tuple(answer.selected_options),
                is_correct=result.is_correct,
                points_earned=result.points_earned,
            )
        )
        score += result.points_earned
        if result.is_correct:
            correct += 1
    logger.debug(f"Graded {len(records)} answers: score={score} correct={correct}")
    return GradedSheet(
        answers=tuple(records),
        score=score,
        correct_answers=correct,
        wrong_answers=len(records) - correct,
    )
