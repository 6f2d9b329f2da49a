from __future__ import annotations

import pytest

from quizarena_core import Answer, Option, Question, Rejected, grade, grade_sheet, validate_answers, validate_question

from conftest import multi, single, true_false


def test_single_select_grades_by_correct_flag():
    q = single(points=5, correct=1)
    assert grade(q, [1]).is_correct is True
    assert grade(q, [1]).points_earned == 5
    assert grade(q, [0]).is_correct is False
    assert grade(q, [0]).points_earned == 0


def test_multi_select_is_order_independent():
    q = multi(correct=(0, 2), points=3)
    assert grade(q, [0, 2]) == grade(q, [2, 0])
    assert grade(q, [2, 0]).points_earned == 3


def test_multi_select_requires_exact_set():
    q = multi(correct=(0, 1))
    assert grade(q, [0]).is_correct is False  # missing
    assert grade(q, [0, 1, 3]).is_correct is False  # extra
    assert grade(q, []).is_correct is False
    assert grade(q, [1, 0]).is_correct is True


def test_true_false_grading():
    q = true_false(answer=False)
    assert grade(q, [1]).is_correct is True
    assert grade(q, [0]).is_correct is False


def test_grade_is_deterministic():
    q = multi(correct=(1, 3))
    results = {grade(q, [3, 1]) for _ in range(20)}
    assert len(results) == 1


def test_grade_sheet_totals_without_partial_credit():
    questions = (single(points=5), multi(correct=(0, 1), points=2), true_false(points=1))
    answers = [
        Answer(0, (0,)),
        Answer(1, (0,)),  # half right is still wrong
        Answer(2, (0,)),
    ]
    sheet = grade_sheet(questions, answers)
    assert sheet.score == 6
    assert sheet.correct_answers == 2
    assert sheet.wrong_answers == 1
    assert [a.points_earned for a in sheet.answers] == [5, 0, 1]


def test_validate_question_rules():
    validate_question(single())
    validate_question(multi(correct=(0, 1, 2)))
    validate_question(true_false())

    no_correct = Question("Pick one of these", "multi-select", (Option("a"), Option("b")))
    two_correct_single = Question(
        "Pick one of these", "single-select", (Option("a", True), Option("b", True))
    )
    three_way_tf = Question(
        "True or false?", "true-false", (Option("T", True), Option("F"), Option("Maybe"))
    )
    zero_points = Question("Pick one of these", "single-select", (Option("a", True), Option("b")), points=0)
    for bad in (no_correct, two_correct_single, three_way_tf, zero_points):
        with pytest.raises(Rejected) as exc:
            validate_question(bad)
        assert exc.value.error.kind == "invalid_question"


def _kind(questions, answers):
    with pytest.raises(Rejected) as exc:
        validate_answers(questions, answers)
    return exc.value.error.kind


def test_validate_answers_structural_errors():
    questions = (single(), multi(), true_false())
    ok = [Answer(0, (0,)), Answer(1, (1, 0)), Answer(2, (1,))]
    validate_answers(questions, ok)

    assert _kind(questions, ok[:2]) == "answer_count_mismatch"
    assert _kind(questions, [Answer(0, (0,)), Answer(1, (0,)), Answer(5, (0,))]) == "invalid_answer"
    assert _kind(questions, [Answer(0, (0,)), Answer(0, (1,)), Answer(2, (0,))]) == "invalid_answer"
    assert _kind(questions, [Answer(0, (9,)), Answer(1, (0,)), Answer(2, (0,))]) == "invalid_answer"
    assert _kind(questions, [Answer(0, (0, 1)), Answer(1, (0,)), Answer(2, (0,))]) == "invalid_answer"
    assert _kind(questions, [Answer(0, (0,)), Answer(1, (0,)), Answer(2, ())]) == "invalid_answer"
    assert _kind(questions, [Answer(0, (0,)), Answer(1, (1, 1)), Answer(2, (0,))]) == "invalid_answer"
