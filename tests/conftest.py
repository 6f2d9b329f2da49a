from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from quizarena_core import Contest, FixedClock, InMemoryContestStore, Option, Question

START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
END = START + timedelta(hours=1)


def single(points: int = 1, correct: int = 0, n: int = 3) -> Question:
    return Question(
        text="Which planet is known as the red planet?",
        type="single-select",
        options=tuple(Option(text=f"opt{i}", is_correct=(i == correct)) for i in range(n)),
        points=points,
    )


def multi(correct=(0, 1), n: int = 4, points: int = 2) -> Question:
    return Question(
        text="Select every prime number below.",
        type="multi-select",
        options=tuple(Option(text=f"opt{i}", is_correct=(i in correct)) for i in range(n)),
        points=points,
    )


def true_false(answer: bool = True, points: int = 1) -> Question:
    return Question(
        text="Water boils at 100C at sea level.",
        type="true-false",
        options=(Option("True", is_correct=answer), Option("False", is_correct=not answer)),
        points=points,
    )


@pytest.fixture
def store():
    return InMemoryContestStore()


@pytest.fixture
def clock():
    return FixedClock(START - timedelta(days=1))


@pytest.fixture
def make_contest(store):
    counter = {"n": 0}

    def _make(**overrides) -> Contest:
        counter["n"] += 1
        fields = dict(
            id=f"c{counter['n']}",
            name="General knowledge",
            description="A short general knowledge quiz",
            tier="NORMAL",
            start_time=START,
            end_time=END,
            prize_info="Gift card",
            questions=(single(points=5), multi(), true_false()),
            max_participants=100,
        )
        fields.update(overrides)
        return store.add_contest(Contest(**fields))

    return _make
