from __future__ import annotations

import math

import pytest

from config import settings
from draft_values import draft_capital, net_draft_capital, pick_value_table, synthesize_pick_value, value_pick
from trades import DraftPickAsset


def test_all_charts_use_the_configured_weights() -> None:
    values = {"legacy": 10.0, "modern": 50.0, "surplus": 20.0, "academic": 40.0}
    # 0.2*10 + 0.3*50 + 0.3*20 + 0.2*40
    assert synthesize_pick_value(values) == pytest.approx(31.0)


def test_missing_charts_are_dropped_not_zeroed() -> None:
    assert synthesize_pick_value({"legacy": 10.0, "modern": 50.0}) == pytest.approx(34.0)
    assert synthesize_pick_value({"academic": 42.0}) == pytest.approx(42.0)


def test_no_inputs_yields_none() -> None:
    assert synthesize_pick_value({"legacy": None, "modern": None}) is None


def test_explicit_weights_are_not_replaced_by_settings() -> None:
    values = {"legacy": 10.0, "modern": 50.0, "surplus": 20.0, "academic": 40.0}
    assert synthesize_pick_value(values, {}) is None
    assert synthesize_pick_value(values, {"surplus": 1.0}) == pytest.approx(20.0)


def test_score_is_never_negative() -> None:
    assert synthesize_pick_value({"legacy": -15.0, "modern": -5.0}) == 0.0


def test_weights_follow_settings() -> None:
    settings.set("draft_weight_legacy", 1.0)
    settings.set("draft_weight_modern", 0.0)
    assert synthesize_pick_value({"legacy": 10.0, "modern": 50.0}) == pytest.approx(10.0)


def test_upstream_value_kept_when_no_chart_present() -> None:
    pick = DraftPickAsset(year=2027, round=2, synthesized=18.5)
    assert value_pick(pick).synthesized == 18.5
    assert value_pick(DraftPickAsset(year=2027, round=2)).synthesized is None


def test_draft_capital_counts_unvalued_picks_separately() -> None:
    picks = [
        DraftPickAsset(year=2027, round=1, legacy=30.0, modern=30.0, surplus=30.0, academic=30.0),
        DraftPickAsset(year=2028, round=4),
    ]
    capital = draft_capital(picks)
    assert capital.total == pytest.approx(30.0)
    assert capital.valued_picks == 1
    assert capital.unvalued_picks == 1
    assert capital.picks[0].synthesized == pytest.approx(30.0)


def test_net_draft_capital_is_received_minus_sent() -> None:
    sent = draft_capital([DraftPickAsset(year=2027, round=1, modern=25.0)])
    received = draft_capital(
        [
            DraftPickAsset(year=2027, round=2, modern=12.0),
            DraftPickAsset(year=2028, round=1, modern=20.0),
        ]
    )
    assert net_draft_capital(sent, received) == pytest.approx(7.0)


def test_pick_table_is_sorted_and_keeps_gaps() -> None:
    picks = [
        value_pick(DraftPickAsset(year=2028, round=1, modern=20.0)),
        value_pick(DraftPickAsset(year=2027, round=3, pick_number=70, legacy=8.0)),
        value_pick(DraftPickAsset(year=2027, round=1, pick_number=12, surplus=40.0)),
    ]
    table = pick_value_table(picks)
    assert list(table["Pick"]) == ["2027 Round 1 Pick 12", "2027 Round 3 Pick 70", "2028 Round 1"]
    assert math.isnan(table.loc[0, "Legacy Chart"])
    assert table.loc[0, "Synthesized"] == pytest.approx(40.0)


def test_empty_pick_table() -> None:
    table = pick_value_table([])
    assert table.empty
    assert "Synthesized" in table.columns
