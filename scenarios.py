"""Deterministic what-if adjustments to a graded trade."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

SCENARIO_TYPES = (
    "player_improvement",
    "player_decline",
    "injury_impact",
    "add_pick",
    "remove_player",
    "age_progression",
)

INJURY_DELTAS = {"minor": -3, "major": -8, "season_ending": -15}
# Index by round; rounds past the end use the last entry.
PICK_ROUND_DELTAS = (0, 12, 8, 5, 3, 2, 1, 1)
BREAKDOWN_WEIGHTS = {
    "talent_balance_delta": 0.30,
    "contract_value_delta": 0.20,
    "team_fit_delta": 0.25,
    "future_assets_delta": 0.25,
}
TRADE_SIDES = ("sent", "received")


@dataclass(frozen=True)
class ScenarioResult:
    scenario_type: str
    description: str
    reasoning: str
    original_grade: int
    adjusted_grade: int
    grade_delta: int
    breakdown_changes: Optional[Dict[str, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_grade(value: float) -> int:
    return max(0, min(100, int(value)))


def distribute_delta(delta: int) -> Dict[str, float]:
    return {key: round(delta * weight, 2) for key, weight in BREAKDOWN_WEIGHTS.items()}


def _int_param(params: Mapping[str, Any], key: str, default: Any) -> int:
    raw = params.get(key, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Parameter '{key}' must be an integer") from exc


def _float_param(params: Mapping[str, Any], key: str, default: Any) -> float:
    raw = params.get(key, default)
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Parameter '{key}' must be a number") from exc
    if not math.isfinite(value):
        raise ValueError(f"Parameter '{key}' must be a finite number")
    return value


def _side_param(params: Mapping[str, Any], key: str, default: str) -> str:
    side = str(params.get(key) or default).lower()
    if side not in TRADE_SIDES:
        raise ValueError(f"Parameter '{key}' must be 'sent' or 'received'")
    return side


def _player_label(params: Mapping[str, Any], key: str = "player_name") -> str:
    return str(params.get(key) or "the featured player")


def _improvement(params: Mapping[str, Any]) -> Tuple[int, str, str]:
    pct = _float_param(params, "improvement_pct", 10)
    player = _player_label(params)
    delta = _round_half_up(pct / 3)
    return (
        delta,
        f"{player} improves by {pct:g}%",
        f"A {pct:g}% jump in production from {player} shifts the value balance by {delta:+d} grade points.",
    )


def _decline(params: Mapping[str, Any]) -> Tuple[int, str, str]:
    pct = -abs(_float_param(params, "improvement_pct", -10))
    player = _player_label(params)
    delta = _round_half_up(pct / 3)
    return (
        delta,
        f"{player} declines by {abs(pct):g}%",
        f"A {abs(pct):g}% drop in production from {player} shifts the value balance by {delta:+d} grade points.",
    )


def _injury(params: Mapping[str, Any]) -> Tuple[int, str, str]:
    severity = str(params.get("injury_severity") or "minor").lower()
    if severity not in INJURY_DELTAS:
        raise ValueError(f"Unknown injury severity '{severity}'")
    player = _player_label(params, "injured_player")
    delta = INJURY_DELTAS[severity]
    label = severity.replace("_", "-")
    return (
        delta,
        f"{player} suffers a {label} injury",
        f"A {label} injury to {player} removes availability the grade was counting on ({delta:+d}).",
    )


def _add_pick(params: Mapping[str, Any]) -> Tuple[int, str, str]:
    round_no = _int_param(params, "pick_round", 1)
    if round_no < 1:
        raise ValueError("Parameter 'pick_round' must be at least 1")
    side = _side_param(params, "pick_side", "received")
    year = params.get("pick_year")
    value = PICK_ROUND_DELTAS[min(round_no, len(PICK_ROUND_DELTAS) - 1)]
    delta = value if side == "received" else -value
    pick = f"{year} round {round_no} pick" if year else f"round {round_no} pick"
    verb = "receives" if side == "received" else "sends"
    return (
        delta,
        f"Chicago {verb} an extra {pick}",
        f"Adding a {pick} on the {side} side moves future draft capital by {delta:+d}.",
    )


def _remove_player(params: Mapping[str, Any]) -> Tuple[int, str, str]:
    side = _side_param(params, "removed_side", "sent")
    player = _player_label(params, "removed_player")
    delta = 5 if side == "sent" else -5
    if side == "sent":
        reasoning = f"Keeping {player} out of the outgoing package improves the return ({delta:+d})."
    else:
        reasoning = f"Losing {player} from the incoming package weakens the return ({delta:+d})."
    return delta, f"{player} is removed from the trade", reasoning


def _age_progression(params: Mapping[str, Any]) -> Tuple[int, str, str]:
    years = _int_param(params, "years_forward", 1)
    if not 1 <= years <= 3:
        raise ValueError("Parameter 'years_forward' must be between 1 and 3")
    delta = -2 * years
    unit = "year" if years == 1 else "years"
    return (
        delta,
        f"Project the trade {years} {unit} forward",
        f"Aging curves erode veteran value over {years} {unit}, trimming the grade by {abs(delta)}.",
    )


_HANDLERS: Dict[str, Callable[[Mapping[str, Any]], Tuple[int, str, str]]] = {
    "player_improvement": _improvement,
    "player_decline": _decline,
    "injury_impact": _injury,
    "add_pick": _add_pick,
    "remove_player": _remove_player,
    "age_progression": _age_progression,
}


def scenario_delta(scenario_type: str, parameters: Optional[Mapping[str, Any]] = None) -> int:
    delta, _, _ = _resolve(scenario_type, parameters or {})
    return delta


def _resolve(scenario_type: str, parameters: Mapping[str, Any]) -> Tuple[int, str, str]:
    handler = _HANDLERS.get(scenario_type)
    if handler is None:
        raise ValueError(f"Unknown scenario type '{scenario_type}'")
    return handler(parameters)


def run_scenario(
    scenario_type: str,
    original_grade: int,
    parameters: Optional[Mapping[str, Any]] = None,
    *,
    include_breakdown: bool = True,
) -> ScenarioResult:
    """Apply one what-if adjustment to ``original_grade``."""

    if not 0 <= original_grade <= 100:
        raise ValueError("original_grade must be between 0 and 100")
    delta, description, reasoning = _resolve(scenario_type, parameters or {})
    return ScenarioResult(
        scenario_type=scenario_type,
        description=description,
        reasoning=reasoning,
        original_grade=int(original_grade),
        adjusted_grade=clamp_grade(original_grade + delta),
        grade_delta=delta,
        breakdown_changes=distribute_delta(delta) if include_breakdown else None,
    )
