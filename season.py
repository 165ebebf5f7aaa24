"""Local season projection used when the remote season simulator is down.

This is a closed-form approximation, not a game-by-game simulation: each
accepted trade moves the team's win total in proportion to how far its grade
sits from an average (50) trade, and the GM score is built from the same
components the full simulator reports.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence

from trades import Trade

SIMULATION_VERSION = "v1"
DEFAULT_SEASON_YEAR = 2026
# Average grade assumed when no trades are on record.
NEUTRAL_GRADE = 50
PLAYOFF_WIN_SHARE = 0.52


@dataclass(frozen=True)
class LeagueConfig:
    games_per_season: int
    # Win swing that earns the full win-improvement score.
    expected_win_swing: int
    has_ot_losses: bool = False


LEAGUES: Dict[str, LeagueConfig] = {
    "nfl": LeagueConfig(games_per_season=17, expected_win_swing=5),
    "nba": LeagueConfig(games_per_season=82, expected_win_swing=15),
    "nhl": LeagueConfig(games_per_season=82, expected_win_swing=15, has_ot_losses=True),
    "mlb": LeagueConfig(games_per_season=162, expected_win_swing=20),
}

CHICAGO_TEAMS: Dict[str, str] = {
    "bears": "nfl",
    "bulls": "nba",
    "blackhawks": "nhl",
    "cubs": "mlb",
    "whitesox": "mlb",
}


@dataclass(frozen=True)
class SeasonRecord:
    wins: int
    losses: int
    made_playoffs: bool
    ot_losses: Optional[int] = None


@dataclass(frozen=True)
class SeasonProjection:
    success: bool
    sport: str
    team_key: str
    season_year: int
    baseline: SeasonRecord
    modified: SeasonRecord
    gm_score: float
    score_breakdown: Dict[str, float]
    trades_considered: int
    summary: str
    simulation_version: str = SIMULATION_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def league_for(sport: str) -> LeagueConfig:
    key = (sport or "").lower()
    if key not in LEAGUES:
        raise ValueError(f"Unknown sport '{sport}' (expected one of {', '.join(LEAGUES)})")
    return LEAGUES[key]


def validate_request(sport: str, team_key: str, depth: Optional[int] = None) -> LeagueConfig:
    league = league_for(sport)
    expected_sport = CHICAGO_TEAMS.get((team_key or "").lower())
    if expected_sport is None:
        raise ValueError(f"Unknown team '{team_key}'")
    if expected_sport != sport.lower():
        raise ValueError(f"Team '{team_key}' does not play in {sport}")
    if depth is not None and depth < 1:
        raise ValueError("depth must be at least 1")
    return league


def _record(wins: int, games: int, league: LeagueConfig) -> SeasonRecord:
    losses = games - wins
    ot_losses = None
    if league.has_ot_losses:
        ot_losses = losses // 8
        losses -= ot_losses
    return SeasonRecord(
        wins=wins,
        losses=losses,
        ot_losses=ot_losses,
        made_playoffs=wins > games * PLAYOFF_WIN_SHARE,
    )


def win_delta(trades: Sequence[Trade], league: LeagueConfig) -> int:
    """Projected change in wins, capped at one expected swing either way."""

    swing = league.expected_win_swing
    raw = sum((trade.grade - NEUTRAL_GRADE) / NEUTRAL_GRADE * swing / 2 for trade in trades)
    return _round_half_up(max(-swing, min(swing, raw)))


def gm_score(
    average_grade: float,
    wins_gained: int,
    league: LeagueConfig,
    *,
    made_playoffs: bool,
    won_championship: bool = False,
) -> Dict[str, float]:
    expected = league.expected_win_swing
    trade_quality = min(30.0, average_grade * 0.30)
    if wins_gained >= 0:
        improvement = min(30.0, wins_gained / expected * 30)
    else:
        improvement = max(-20.0, wins_gained / expected * 20)
    playoff_bonus = 0
    if made_playoffs:
        playoff_bonus = 20 if won_championship else 5
    championship_bonus = 15 if won_championship else 0
    total = max(0.0, min(100.0, trade_quality + improvement + playoff_bonus + championship_bonus))
    return {
        "gm_score": round(total, 1),
        "trade_quality_score": round(trade_quality, 1),
        "win_improvement_score": round(improvement, 1),
        "playoff_bonus_score": playoff_bonus,
        "championship_bonus": championship_bonus,
        "win_improvement": wins_gained,
    }


def project_season(
    trades: Sequence[Trade],
    sport: str,
    team_key: str,
    season_year: Optional[int] = None,
    depth: Optional[int] = None,
    *,
    baseline_win_pct: float = 0.5,
) -> SeasonProjection:
    """Project a season record from the session's accepted trades.

    ``depth`` keeps only the most recent ``depth`` trades; ``None`` uses all.
    """

    league = validate_request(sport, team_key, depth)
    team = team_key.lower()
    if not 0.0 <= baseline_win_pct <= 1.0:
        raise ValueError("baseline_win_pct must be between 0 and 1")

    considered = [t for t in trades if t.status == "accepted"]
    considered.sort(key=lambda t: t.created_at)
    if depth is not None:
        considered = considered[-depth:]

    games = league.games_per_season
    baseline_wins = _round_half_up(games * baseline_win_pct)
    delta = win_delta(considered, league)
    modified_wins = max(0, min(games, baseline_wins + delta))
    baseline = _record(baseline_wins, games, league)
    modified = _record(modified_wins, games, league)

    average = sum(t.grade for t in considered) / len(considered) if considered else NEUTRAL_GRADE
    breakdown = gm_score(average, modified_wins - baseline_wins, league, made_playoffs=modified.made_playoffs)
    score = breakdown.pop("gm_score")

    gained = modified_wins - baseline_wins
    summary = f"{len(considered)} trade(s) move the projection from {baseline_wins} to {modified_wins} wins ({gained:+d})."
    if modified.made_playoffs:
        summary += " Projected to make the playoffs."

    return SeasonProjection(
        success=True,
        sport=sport.lower(),
        team_key=team,
        season_year=season_year or DEFAULT_SEASON_YEAR,
        baseline=baseline,
        modified=modified,
        gm_score=score,
        score_breakdown=breakdown,
        trades_considered=len(considered),
        summary=summary,
    )
