from __future__ import annotations

import pytest

from config import settings
from conftest import make_trade
from leaderboard import aggregate_user_scores, build_leaderboard, rank_users, user_analytics


def _three_trade_user():
    return [
        make_trade(id="a", user_id="gm", grade=80, status="accepted", created_at="2026-02-01T00:00:00Z"),
        make_trade(id="b", user_id="gm", grade=60, status="accepted", created_at="2026-02-03T00:00:00Z"),
        make_trade(id="c", user_id="gm", grade=90, status="rejected", created_at="2026-02-02T00:00:00Z"),
    ]


def test_user_row_aggregates_counts_and_grades() -> None:
    (row,) = aggregate_user_scores(_three_trade_user())
    assert row.total_trades == 3
    assert row.accepted_trades == 2
    assert row.rejected_trades == 1
    assert row.average_grade == 76.7
    assert row.highest_grade == 90
    assert row.lowest_grade == 60
    assert row.last_trade_at == "2026-02-03T00:00:00Z"


def test_gm_score_modes() -> None:
    (true_sum,) = aggregate_user_scores(_three_trade_user(), mode="accepted_sum")
    (shortcut,) = aggregate_user_scores(_three_trade_user(), mode="average_shortcut")
    assert true_sum.total_gm_score == 140
    assert shortcut.total_gm_score == 154


def test_gm_score_mode_defaults_to_setting() -> None:
    settings.set("gm_score_mode", "average_shortcut")
    (row,) = aggregate_user_scores(_three_trade_user())
    assert row.total_gm_score == 154


def test_unknown_mode_raises() -> None:
    with pytest.raises(ValueError):
        aggregate_user_scores(_three_trade_user(), mode="median")


def _many_users(count: int):
    return [
        make_trade(id=f"t{i}", user_id=f"user-{i:03d}", grade=50 + i % 50, status="accepted")
        for i in range(count)
    ]


def test_pagination_reports_partial_last_page() -> None:
    page = build_leaderboard(_many_users(120), page=3, limit=50)
    assert len(page.users) == 20
    assert page.total == 120
    assert page.total_pages == 3
    assert page.page == 3


def test_page_past_the_end_is_empty() -> None:
    page = build_leaderboard(_many_users(10), page=4, limit=5)
    assert page.users == []
    assert page.total_pages == 2


def test_empty_history() -> None:
    page = build_leaderboard([])
    assert page.users == []
    assert page.total == 0
    assert page.total_pages == 0


def test_ties_break_on_user_id() -> None:
    trades = [
        make_trade(id="1", user_id="zeta", grade=80, status="accepted"),
        make_trade(id="2", user_id="alpha", grade=80, status="accepted"),
        make_trade(id="3", user_id="mid", grade=95, status="accepted"),
    ]
    page = build_leaderboard(trades)
    assert [row.user_id for row in page.users] == ["mid", "alpha", "zeta"]


def test_secondary_tie_break_is_gm_score_descending() -> None:
    trades = [
        make_trade(id="1", user_id="a", grade=60, status="accepted"),
        make_trade(id="2", user_id="b", grade=90, status="accepted"),
        make_trade(id="3", user_id="c", grade=75, status="accepted"),
        make_trade(id="4", user_id="c", grade=40, status="rejected"),
    ]
    page = build_leaderboard(trades, sort_by="total_trades", sort_order="asc")
    assert [row.user_id for row in page.users] == ["b", "a", "c"]


def test_missing_last_trade_sorts_last_either_direction() -> None:
    trades = [
        make_trade(id="1", user_id="dated-old", grade=70, created_at="2026-01-01T00:00:00Z"),
        make_trade(id="2", user_id="undated", grade=70, created_at=""),
        make_trade(id="3", user_id="dated-new", grade=70, created_at="2026-03-01T00:00:00Z"),
    ]
    desc = build_leaderboard(trades, sort_by="last_trade_at", sort_order="desc")
    asc = build_leaderboard(trades, sort_by="last_trade_at", sort_order="asc")
    assert [row.user_id for row in desc.users] == ["dated-new", "dated-old", "undated"]
    assert [row.user_id for row in asc.users] == ["dated-old", "dated-new", "undated"]


def test_search_is_case_insensitive_across_identity_fields() -> None:
    trades = [
        make_trade(id="1", user_id="u1", display_name="Windy City GM", grade=80, status="accepted"),
        make_trade(id="2", user_id="u2", user_email="Hoops@Example.com", grade=70, status="accepted"),
        make_trade(id="3", user_id="u3", grade=60, status="accepted"),
    ]
    assert [r.user_id for r in build_leaderboard(trades, search="windy").users] == ["u1"]
    assert [r.user_id for r in build_leaderboard(trades, search="HOOPS").users] == ["u2"]
    assert [r.user_id for r in build_leaderboard(trades, search="U3").users] == ["u3"]
    assert build_leaderboard(trades, search="nobody").total == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sort_by": "grade"},
        {"sort_order": "sideways"},
        {"page": 0},
        {"limit": 0},
    ],
)
def test_invalid_queries_raise(kwargs) -> None:
    rows = aggregate_user_scores(_three_trade_user())
    with pytest.raises(ValueError):
        rank_users(rows, **kwargs)


def test_user_analytics_summary(sample_store) -> None:
    summary = user_analytics(sample_store.list_trades(), "u1")
    assert summary["total_trades"] == 2
    assert summary["accepted_trades"] == 1
    assert summary["total_gm_score"] == 82
    assert summary["average_grade"] == 73.0
    buckets = {row["bucket"]: row for row in summary["grade_distribution"]}
    assert buckets["80-90"]["count"] == 1
    assert buckets["60-70"]["percentage"] == 50
    partners = [row["team_name"] for row in summary["trading_partners"]]
    assert set(partners) == {"Green Bay Packers", "Detroit Lions"}
    (team,) = summary["chicago_teams"]
    assert team["team"] == "bears"
    assert team["trade_count"] == 2
    assert team["accepted_rate"] == 50
    positions = {row["position"]: row for row in summary["position_analysis"]}
    assert positions["WR"]["received_count"] == 1
    assert positions["RB"]["net_value"] == -1


def test_user_analytics_for_unknown_user(sample_store) -> None:
    summary = user_analytics(sample_store.list_trades(), "ghost")
    assert summary["total_trades"] == 0
    assert summary["grade_distribution"] == []
