"""Draft pick valuation: combine independent pick-value charts into one score."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from config import settings
from trades import DraftPickAsset

CHARTS = ("legacy", "modern", "surplus", "academic")
CHART_LABELS = {
    "legacy": "Legacy Chart",
    "modern": "Modern Empirical",
    "surplus": "Surplus Value",
    "academic": "Academic",
}


def chart_weights() -> Dict[str, float]:
    return {chart: float(settings.get(f"draft_weight_{chart}")) for chart in CHARTS}


def synthesize_pick_value(
    values: Dict[str, Optional[float]],
    weights: Optional[Dict[str, float]] = None,
) -> Optional[float]:
    """Weighted mean over the charts that produced a value.

    Absent charts drop out and the remaining weights are renormalized, so a
    missing chart never drags the score toward zero. Returns ``None`` when no
    chart has a value.
    """

    if weights is None:
        weights = chart_weights()
    total_weight = 0.0
    weighted = 0.0
    for chart in CHARTS:
        value = values.get(chart)
        weight = weights.get(chart, 0.0)
        if value is None or weight <= 0:
            continue
        weighted += float(value) * weight
        total_weight += weight
    if total_weight == 0:
        return None
    return round(max(0.0, weighted / total_weight), 1)


def value_pick(pick: DraftPickAsset, weights: Optional[Dict[str, float]] = None) -> DraftPickAsset:
    synthesized = synthesize_pick_value(pick.chart_values(), weights)
    if synthesized is None:
        # keep an upstream figure when none of the charts are present
        synthesized = None if pick.synthesized is None else max(0.0, pick.synthesized)
    return replace(pick, synthesized=synthesized)


@dataclass(frozen=True)
class DraftCapital:
    picks: List[DraftPickAsset]
    total: float
    valued_picks: int
    unvalued_picks: int


def draft_capital(picks: Iterable[DraftPickAsset], weights: Optional[Dict[str, float]] = None) -> DraftCapital:
    """Sum synthesized scores across one side of a trade."""

    valued = [value_pick(pick, weights) for pick in picks]
    present = [pick.synthesized for pick in valued if pick.synthesized is not None]
    return DraftCapital(
        picks=valued,
        total=round(sum(present), 1),
        valued_picks=len(present),
        unvalued_picks=len(valued) - len(present),
    )


def net_draft_capital(sent: DraftCapital, received: DraftCapital) -> float:
    return round(received.total - sent.total, 1)


def pick_value_table(picks: Sequence[DraftPickAsset]) -> pd.DataFrame:
    """Side-by-side chart values with the synthesized score; gaps stay NaN."""

    rows = []
    for pick in picks:
        row = {"Pick": pick.label, "Year": pick.year, "Round": pick.round, "PickNumber": pick.pick_number}
        for chart in CHARTS:
            row[CHART_LABELS[chart]] = getattr(pick, chart)
        row["Synthesized"] = pick.synthesized
        rows.append(row)
    columns = ["Pick", "Year", "Round", "PickNumber", *CHART_LABELS.values(), "Synthesized"]
    df = pd.DataFrame(rows, columns=columns)
    if df.empty:
        return df
    return df.sort_values(["Year", "Round", "PickNumber"], na_position="last").reset_index(drop=True)
