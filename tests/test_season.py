from __future__ import annotations

import pytest

from conftest import make_trade
from season import project_season


def _bears_trades():
    return [
        make_trade(id="a", grade=80, status="accepted", created_at="2026-01-01T00:00:00Z"),
        make_trade(id="b", grade=90, status="accepted", created_at="2026-01-02T00:00:00Z"),
        make_trade(id="c", grade=30, status="rejected", created_at="2026-01-03T00:00:00Z"),
    ]


def test_accepted_trades_raise_the_win_total() -> None:
    projection = project_season(_bears_trades(), "nfl", "bears")

    assert projection.success is True
    assert projection.simulation_version == "v1"
    assert projection.season_year == 2026
    assert projection.trades_considered == 2
    assert projection.baseline.wins == 9
    assert projection.modified.wins == 13
    assert projection.modified.losses == 4
    assert projection.modified.made_playoffs is True
    assert projection.score_breakdown["win_improvement"] == 4
    assert projection.score_breakdown["trade_quality_score"] == pytest.approx(25.5)
    assert projection.score_breakdown["win_improvement_score"] == pytest.approx(24.0)
    assert projection.score_breakdown["playoff_bonus_score"] == 5
    assert projection.gm_score == pytest.approx(54.5)


def test_depth_limits_to_most_recent_trades() -> None:
    projection = project_season(_bears_trades(), "nfl", "bears", depth=1)
    assert projection.trades_considered == 1
    assert projection.modified.wins == 11


def test_no_trades_keeps_the_baseline() -> None:
    projection = project_season([], "mlb", "cubs", season_year=2027)
    assert projection.modified.wins == projection.baseline.wins == 81
    assert projection.score_breakdown["win_improvement"] == 0
    assert projection.score_breakdown["trade_quality_score"] == pytest.approx(15.0)
    assert projection.season_year == 2027


def test_poor_trades_lower_the_score() -> None:
    trades = [make_trade(id="x", grade=10, status="accepted")]
    projection = project_season(trades, "nba", "bulls")
    assert projection.modified.wins < projection.baseline.wins
    assert projection.score_breakdown["win_improvement_score"] < 0
    assert 0 <= projection.gm_score <= 100


def test_hockey_records_split_overtime_losses() -> None:
    projection = project_season([], "nhl", "blackhawks")
    record = projection.modified
    assert record.ot_losses is not None
    assert record.wins + record.losses + record.ot_losses == 82


@pytest.mark.parametrize(
    "sport, team, depth",
    [("cricket", "bears", None), ("nba", "bears", None), ("nfl", "packers", None), ("nfl", "bears", 0)],
)
def test_invalid_inputs_raise(sport: str, team: str, depth) -> None:
    with pytest.raises(ValueError):
        project_season([], sport, team, depth=depth)
