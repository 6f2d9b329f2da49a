from __future__ import annotations

from datetime import timedelta

import pytest

from quizarena_core import (
    Contest,
    Rejected,
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

from conftest import END, START


def _contest(**overrides) -> Contest:
    fields = dict(
        id="c1",
        name="Quiz",
        description="Lifecycle quiz",
        tier="NORMAL",
        start_time=START,
        end_time=END,
        prize_info="Mug",
    )
    fields.update(overrides)
    return Contest(**fields)


def test_derive_status_partitions_timeline():
    c = _contest()
    one = timedelta(microseconds=1)
    assert derive_status(c, START - one) == "UPCOMING"
    assert derive_status(c, START) == "ONGOING"
    assert derive_status(c, END) == "ONGOING"
    assert derive_status(c, END + one) == "ENDED"


def test_derive_status_is_monotonic_over_a_sweep():
    c = _contest()
    order = {"UPCOMING": 0, "ONGOING": 1, "ENDED": 2}
    seen = []
    t = START - timedelta(minutes=30)
    while t <= END + timedelta(minutes=30):
        seen.append(order[derive_status(c, t)])
        t += timedelta(minutes=5)
    assert seen == sorted(seen)
    assert set(seen) == {0, 1, 2}


def test_set_status_overrides_clock():
    c = set_status(_contest(), "ENDED")
    assert c.status == "ENDED"
    assert c.status_overridden is True
    assert effective_status(c, START + timedelta(minutes=5)) == "ENDED"
    assert derive_status(c, START + timedelta(minutes=5)) == "ONGOING"
    assert is_open(c, START + timedelta(minutes=5)) is False


def test_set_status_rejects_unknown_values():
    with pytest.raises(Rejected) as exc:
        set_status(_contest(), "PAUSED")
    assert exc.value.error.kind == "invalid_state"


def test_release_status_follows_clock_again():
    c = set_status(_contest(), "ENDED")
    released = release_status(c, START + timedelta(minutes=1))
    assert released.status_overridden is False
    assert released.status == "ONGOING"


def test_reconcile_materializes_derived_status():
    c = _contest(status="UPCOMING")
    assert reconcile(c, START + timedelta(minutes=1)).status == "ONGOING"
    assert reconcile(c, END + timedelta(seconds=1)).status == "ENDED"
    assert reconcile(c, START - timedelta(seconds=1)) is c


def test_mutation_gates():
    c = _contest()
    assert can_mutate_full(c, START - timedelta(seconds=1)) is True
    assert can_mutate_full(c, START) is False
    assert can_mutate_questions(c, START) is False
    assert can_mutate_questions(c, START - timedelta(days=1)) is True
    assert can_delete(c, 0) is True
    assert can_delete(c, 1) is False
