"""Monte Carlo outcome simulation for a graded trade.

Given a trade's base grade, the simulator perturbs it many times with a
normal "volatility" shock, an occasional injury penalty and a mild
player-development drift, then summarizes the resulting distribution of
grades. It is the local stand-in used when the authoritative simulation
service cannot be reached, so it must stay pure and total over its inputs.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from config import settings

VOLATILITY_TIERS = ("low", "medium", "high")
PERCENTILES = (5, 10, 25, 50, 75, 90, 95)
BUCKET_COUNT = 10

# Descriptive weights for the explanation copy; not derived from the samples.
_VOLATILITY_MAGNITUDE = {"low": 3, "medium": 5, "high": 8}
_INJURY_MAGNITUDE = 6
_DEVELOPMENT_MAGNITUDE = 4


@dataclass(frozen=True)
class DistributionBucket:
    grade_bucket: int
    label: str
    count: int
    percentage: int


@dataclass(frozen=True)
class KeyFactor:
    factor: str
    impact: str
    magnitude: int
    description: str


@dataclass
class SimulationResult:
    num_simulations: int
    original_grade: int
    volatility: str
    mean_grade: float
    median_grade: int
    std_deviation: float
    percentiles: Dict[str, int]
    distribution: List[DistributionBucket]
    risk_analysis: Dict[str, Any]
    key_factors: List[KeyFactor]
    outcomes: List[int] = field(default_factory=list, repr=False)

    def to_dict(self, include_outcomes: bool = False) -> Dict[str, Any]:
        payload = asdict(self)
        if not include_outcomes:
            payload.pop("outcomes")
        return payload


def volatility_sigma(tier: str) -> float:
    key = (tier or "").lower()
    if key not in VOLATILITY_TIERS:
        raise ValueError(f"Unknown volatility tier '{tier}' (expected one of {', '.join(VOLATILITY_TIERS)})")
    return float(settings.get(f"volatility_{key}_sigma"))


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def _percent(part: int, total: int) -> int:
    return int(math.floor(part / total * 100.0 + 0.5))


def _box_muller(rng: np.random.Generator, size: int) -> np.ndarray:
    u1 = rng.random(size)
    u2 = rng.random(size)
    # 1 - u1 lies in (0, 1], keeping the log finite
    return np.sqrt(-2.0 * np.log(1.0 - u1)) * np.cos(2.0 * math.pi * u2)


def sample_outcomes(
    base_grade: float,
    num_simulations: int,
    *,
    sigma: float,
    injury_factor: bool = True,
    development_factor: bool = True,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Draw ``num_simulations`` integer grades in [0, 100]."""

    rng = rng or np.random.default_rng()
    values = base_grade + _box_muller(rng, num_simulations) * sigma

    if injury_factor:
        hit = rng.random(num_simulations) < float(settings.get("injury_probability"))
        penalty = rng.random(num_simulations) * float(settings.get("injury_max_penalty"))
        values = values - np.where(hit, penalty, 0.0)

    if development_factor:
        center = float(settings.get("development_center"))
        scale = float(settings.get("development_scale"))
        values = values + (rng.random(num_simulations) - center) * scale

    clamped = np.clip(values, 0.0, 100.0)
    return _round_half_up(clamped).astype(int)


def percentile_by_index(sorted_grades: np.ndarray, pct: float) -> int:
    """Read a percentile by truncated index ``floor(pct/100 * N)``.

    No interpolation is applied, so small samples read slightly low.
    """

    n = len(sorted_grades)
    idx = min(int(math.floor(pct / 100.0 * n)), n - 1)
    return int(sorted_grades[idx])


def _histogram(grades: np.ndarray) -> List[DistributionBucket]:
    n = len(grades)
    buckets = np.minimum(grades // 10, BUCKET_COUNT - 1)
    counts = np.bincount(buckets, minlength=BUCKET_COUNT)
    rows: List[DistributionBucket] = []
    for idx, count in enumerate(counts):
        low = idx * 10
        high = 100 if idx == BUCKET_COUNT - 1 else low + 9
        rows.append(
            DistributionBucket(
                grade_bucket=low,
                label=f"{low}-{high}",
                count=int(count),
                percentage=_percent(int(count), n),
            )
        )
    return rows


def _key_factors(volatility: str, injury_factor: bool, development_factor: bool) -> List[KeyFactor]:
    injury_text = (
        "Roughly one outcome in seven includes an injury to a key piece, costing up to 20 grade points."
        if injury_factor
        else "Injury shocks were excluded from this run."
    )
    development_text = (
        "Young players tend to grow into their roles, nudging outcomes slightly upward."
        if development_factor
        else "Player development was held flat for this run."
    )
    return [
        KeyFactor(
            factor="Player Volatility",
            impact="neutral",
            magnitude=_VOLATILITY_MAGNITUDE[volatility],
            description=f"{volatility.capitalize()} performance variance spreads outcomes around the base grade.",
        ),
        KeyFactor(
            factor="Injury Risk",
            impact="negative",
            magnitude=_INJURY_MAGNITUDE if injury_factor else 0,
            description=injury_text,
        ),
        KeyFactor(
            factor="Player Development",
            impact="positive",
            magnitude=_DEVELOPMENT_MAGNITUDE if development_factor else 0,
            description=development_text,
        ),
    ]


def summarize_outcomes(
    grades: np.ndarray,
    *,
    original_grade: int,
    volatility: str,
    injury_factor: bool,
    development_factor: bool,
) -> SimulationResult:
    sorted_grades = np.sort(grades)
    n = len(sorted_grades)
    if n == 0:
        raise ValueError("Cannot summarize an empty simulation")

    mean = float(sorted_grades.mean())
    std = float(sorted_grades.std(ddof=0))
    percentiles = {f"p{p}": percentile_by_index(sorted_grades, p) for p in PERCENTILES}

    downside = _percent(int((sorted_grades < 50).sum()), n)
    upside = _percent(int((sorted_grades >= 80).sum()), n)

    return SimulationResult(
        num_simulations=n,
        original_grade=int(original_grade),
        volatility=volatility,
        mean_grade=round(mean, 1),
        median_grade=int(sorted_grades[n // 2]),
        std_deviation=round(std, 1),
        percentiles=percentiles,
        distribution=_histogram(sorted_grades),
        risk_analysis={
            "downside_risk": downside,
            "upside_potential": upside,
            "variance_band": [percentiles["p5"], percentiles["p95"]],
        },
        key_factors=_key_factors(volatility, injury_factor, development_factor),
        outcomes=[int(g) for g in sorted_grades],
    )


def validate_request(
    original_grade: int,
    num_simulations: Optional[int] = None,
    volatility: Optional[str] = "medium",
) -> Tuple[int, str]:
    """Check simulation inputs and resolve defaults to ``(num_simulations, tier)``."""

    if not 0 <= original_grade <= 100:
        raise ValueError("original_grade must be between 0 and 100")
    if num_simulations is None:
        num_simulations = int(settings.get("default_num_simulations"))
    max_sims = int(settings.get("max_num_simulations"))
    if not 1 <= num_simulations <= max_sims:
        raise ValueError(f"num_simulations must be between 1 and {max_sims}")
    tier = (volatility or "medium").lower()
    volatility_sigma(tier)
    return num_simulations, tier


def simulate_outcomes(
    original_grade: int,
    num_simulations: Optional[int] = None,
    volatility: str = "medium",
    *,
    injury_factor: bool = True,
    development_factor: bool = True,
    rng: Optional[np.random.Generator] = None,
) -> SimulationResult:
    """Run the Monte Carlo evaluator for one trade grade."""

    num_simulations, tier = validate_request(original_grade, num_simulations, volatility)
    sigma = volatility_sigma(tier)
    grades = sample_outcomes(
        original_grade,
        num_simulations,
        sigma=sigma,
        injury_factor=injury_factor,
        development_factor=development_factor,
        rng=rng,
    )
    return summarize_outcomes(
        grades,
        original_grade=original_grade,
        volatility=tier,
        injury_factor=injury_factor,
        development_factor=development_factor,
    )
