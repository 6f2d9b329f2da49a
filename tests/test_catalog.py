from __future__ import annotations

from datetime import timedelta

from quizarena_core import (
    Answer,
    Identity,
    contest_detail,
    join,
    leaderboard,
    list_contests,
    submit,
    visible_tiers,
)

from conftest import END, START

BEFORE = START - timedelta(hours=1)
DURING = START + timedelta(minutes=10)
AFTER = END + timedelta(minutes=1)

NORMAL_USER = Identity("n1", "normal")
VIP_USER = Identity("v1", "vip")
ADMIN = Identity("root", "admin")


def _names(page):
    return [listing.contest.id for listing in page.contests]


def test_visible_tiers_downgrade():
    assert visible_tiers(None, "VIP") == ("NORMAL",)
    assert visible_tiers(NORMAL_USER, "VIP") == ("NORMAL",)
    assert visible_tiers(NORMAL_USER) == ("NORMAL",)
    assert visible_tiers(VIP_USER) == ("NORMAL", "VIP")
    assert visible_tiers(ADMIN, "VIP") == ("VIP",)


def test_list_filters_tier_active_and_status(store, make_contest):
    normal = make_contest()
    vip = make_contest(tier="VIP")
    make_contest(is_active=False)
    later = make_contest(start_time=END + timedelta(days=1), end_time=END + timedelta(days=2))

    assert _names(list_contests(store, None, DURING).value) == [normal.id, later.id]
    # explicit VIP request from a normal user is downgraded, not rejected
    out = list_contests(store, NORMAL_USER, DURING, tier="VIP")
    assert out.ok
    assert _names(out.value) == [normal.id, later.id]
    assert _names(list_contests(store, VIP_USER, DURING, tier="VIP").value) == [vip.id]

    ongoing = list_contests(store, VIP_USER, DURING, status="ONGOING").value
    assert _names(ongoing) == [normal.id, vip.id]
    assert all(listing.contest.status == "ONGOING" for listing in ongoing.contests)
    upcoming = list_contests(store, VIP_USER, DURING, status="UPCOMING").value
    assert _names(upcoming) == [later.id]


def test_list_pagination(store, make_contest):
    for _ in range(5):
        make_contest()
    page = list_contests(store, None, DURING, page=2, limit=2).value
    assert page.total == 5
    assert page.pages == 3
    assert len(page.contests) == 2


def test_list_annotates_viewer_participation(store, make_contest):
    joined = make_contest()
    other = make_contest()
    join(store, NORMAL_USER, joined.id, DURING)
    answers = [Answer(0, (0,)), Answer(1, (0, 1)), Answer(2, (0,))]
    submit(store, NORMAL_USER, joined.id, answers, DURING)

    page = list_contests(store, NORMAL_USER, DURING).value
    by_id = {listing.contest.id: listing.participation for listing in page.contests}
    assert by_id[joined.id].has_joined is True
    assert by_id[joined.id].is_completed is True
    assert by_id[joined.id].score == 8
    assert by_id[joined.id].rank == 1
    assert by_id[other.id].has_joined is False
    assert by_id[other.id].rank is None

    anonymous = list_contests(store, None, DURING).value
    assert all(listing.participation is None for listing in anonymous.contests)


def test_detail_hides_questions_until_joined(store, make_contest):
    contest = make_contest()
    before_join = contest_detail(store, NORMAL_USER, contest.id, DURING).value
    assert before_join.questions is None
    assert before_join.can_join is True

    join(store, NORMAL_USER, contest.id, DURING)
    joined = contest_detail(store, NORMAL_USER, contest.id, DURING).value
    assert len(joined.questions) == 3
    assert not any(o.is_correct for q in joined.questions for o in q.options)
    assert joined.can_join is False
    assert joined.participation.identity_id == "n1"

    ended = contest_detail(store, None, contest.id, AFTER).value
    assert any(o.is_correct for o in ended.questions[0].options)
    assert ended.contest.status == "ENDED"


def test_detail_access(store, make_contest):
    vip = make_contest(tier="VIP")
    assert contest_detail(store, NORMAL_USER, vip.id, DURING).kind == "access_denied"
    assert contest_detail(store, None, "nope", DURING).kind == "not_found"
    assert contest_detail(store, VIP_USER, vip.id, BEFORE).value.can_join is False


def test_leaderboard_gating_and_viewer_rank(store, make_contest):
    vip = make_contest(tier="VIP")
    assert leaderboard(store, None, vip.id, DURING).kind == "access_denied"
    assert leaderboard(store, NORMAL_USER, vip.id, DURING).kind == "access_denied"

    answers_right = [Answer(0, (0,)), Answer(1, (0, 1)), Answer(2, (0,))]
    answers_wrong = [Answer(0, (1,)), Answer(1, (0,)), Answer(2, (1,))]
    join(store, VIP_USER, vip.id, DURING)
    join(store, ADMIN, vip.id, DURING)
    submit(store, ADMIN, vip.id, answers_wrong, DURING + timedelta(seconds=1))
    submit(store, VIP_USER, vip.id, answers_right, DURING + timedelta(seconds=2))

    board = leaderboard(store, VIP_USER, vip.id, DURING).value
    assert [r.identity_id for r in board.rows] == ["v1", "root"]
    assert [r.rank for r in board.rows] == [1, 2]
    assert board.viewer_rank == 1
    assert board.status == "ONGOING"
    assert leaderboard(store, ADMIN, vip.id, DURING).value.viewer_rank == 2


def test_leaderboard_normal_contest_is_public(store, make_contest):
    contest = make_contest()
    out = leaderboard(store, None, contest.id, DURING)
    assert out.ok
    assert out.value.rows == ()
    assert out.value.viewer_rank is None


def test_listings_carry_no_questions(store, make_contest):
    make_contest()
    make_contest(tier="VIP")
    for viewer in (None, NORMAL_USER, VIP_USER, ADMIN):
        page = list_contests(store, viewer, DURING).value
        assert page.contests
        assert all(listing.contest.questions == () for listing in page.contests)
    # the stored contest keeps its questions
    assert len(store.get_contest("c1").questions) == 3


def test_list_rejects_unknown_filters(store, make_contest):
    make_contest()
    for viewer in (None, NORMAL_USER, VIP_USER, ADMIN):
        assert list_contests(store, viewer, DURING, tier="GOLD").kind == "invalid_state"
    assert list_contests(store, None, DURING, status="LIVE").kind == "invalid_state"
