"""Per-user GM leaderboard and trade analytics built from the trade history."""

from __future__ import annotations

import math
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from config import GM_SCORE_MODES, settings
from trades import Trade

SORT_KEYS = (
    "total_gm_score",
    "total_trades",
    "average_grade",
    "accepted_trades",
    "last_trade_at",
)
SORT_ORDERS = ("asc", "desc")


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def _round0(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class UserGmScore:
    user_id: str
    email: Optional[str]
    display_name: Optional[str]
    total_trades: int
    accepted_trades: int
    rejected_trades: int
    average_grade: float
    total_gm_score: int
    highest_grade: int
    lowest_grade: int
    last_trade_at: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _UserAccumulator:
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    total: int = 0
    accepted: int = 0
    rejected: int = 0
    grades: List[int] = field(default_factory=list)
    accepted_grades: List[int] = field(default_factory=list)
    last_trade_at: Optional[str] = None

    def add(self, trade: Trade) -> None:
        self.total += 1
        self.grades.append(trade.grade)
        if trade.status == "accepted":
            self.accepted += 1
            self.accepted_grades.append(trade.grade)
        elif trade.status == "rejected":
            self.rejected += 1
        self.email = self.email or trade.user_email
        self.display_name = self.display_name or trade.display_name
        if trade.created_at and (self.last_trade_at is None or trade.created_at > self.last_trade_at):
            self.last_trade_at = trade.created_at


def total_gm_score(accepted_grades: List[int], average_grade: float, mode: str) -> int:
    """Score a user's accepted trades.

    ``accepted_sum`` adds the grades of accepted trades. ``average_shortcut``
    reproduces the legacy figure ``round(average_grade) * accepted_count``,
    which uses the average over *all* trades and therefore only matches the
    true sum by coincidence.
    """

    if mode == "accepted_sum":
        return int(sum(accepted_grades))
    if mode == "average_shortcut":
        return _round0(average_grade) * len(accepted_grades)
    raise ValueError(f"Unknown gm_score_mode '{mode}' (expected one of {', '.join(GM_SCORE_MODES)})")


def aggregate_user_scores(trades: Iterable[Trade], *, mode: Optional[str] = None) -> List[UserGmScore]:
    """Fold the full trade history into one :class:`UserGmScore` per user."""

    mode = mode or str(settings.get("gm_score_mode"))
    if mode not in GM_SCORE_MODES:
        raise ValueError(f"Unknown gm_score_mode '{mode}' (expected one of {', '.join(GM_SCORE_MODES)})")

    users: "OrderedDict[str, _UserAccumulator]" = OrderedDict()
    for trade in trades:
        acc = users.get(trade.user_id)
        if acc is None:
            acc = users[trade.user_id] = _UserAccumulator(user_id=trade.user_id)
        acc.add(trade)

    rows: List[UserGmScore] = []
    for acc in users.values():
        average = _round1(sum(acc.grades) / len(acc.grades)) if acc.grades else 0.0
        rows.append(
            UserGmScore(
                user_id=acc.user_id,
                email=acc.email,
                display_name=acc.display_name,
                total_trades=acc.total,
                accepted_trades=acc.accepted,
                rejected_trades=acc.rejected,
                average_grade=average,
                total_gm_score=total_gm_score(acc.accepted_grades, average, mode),
                highest_grade=max(acc.grades) if acc.grades else 0,
                lowest_grade=min(acc.grades) if acc.grades else 0,
                last_trade_at=acc.last_trade_at,
            )
        )
    return rows


@dataclass
class LeaderboardPage:
    users: List[UserGmScore]
    total: int
    page: int
    limit: int
    total_pages: int


def _filter_frame(df: pd.DataFrame, search: Optional[str]) -> pd.DataFrame:
    if not search or df.empty:
        return df
    needle = search.strip()
    if not needle:
        return df
    mask = pd.Series(False, index=df.index)
    for column in ("user_id", "email", "display_name"):
        mask |= df[column].fillna("").astype(str).str.contains(needle, case=False, regex=False)
    return df[mask]


def rank_users(
    rows: List[UserGmScore],
    *,
    page: int = 1,
    limit: int = 50,
    search: Optional[str] = None,
    sort_by: str = "total_gm_score",
    sort_order: str = "desc",
) -> LeaderboardPage:
    """Filter, sort and paginate leaderboard rows.

    Ties on the requested key fall back to ``total_gm_score`` (descending) and
    then ``user_id`` (ascending); users without a trade timestamp sort last.
    """

    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{sort_by}'")
    order = (sort_order or "desc").lower()
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order '{sort_order}'")
    if page < 1:
        raise ValueError("page must be at least 1")
    if limit < 1:
        raise ValueError("limit must be at least 1")

    columns = list(UserGmScore.__dataclass_fields__.keys())
    df = pd.DataFrame([row.to_dict() for row in rows], columns=columns)
    df = _filter_frame(df, search)

    total = int(len(df))
    total_pages = math.ceil(total / limit) if total else 0
    if total == 0:
        return LeaderboardPage(users=[], total=0, page=page, limit=limit, total_pages=0)

    by = [sort_by]
    ascending = [order == "asc"]
    if sort_by != "total_gm_score":
        by.append("total_gm_score")
        ascending.append(False)
    by.append("user_id")
    ascending.append(True)

    sorted_df = df.sort_values(by, ascending=ascending, na_position="last", kind="mergesort")
    offset = (page - 1) * limit
    window = sorted_df.iloc[offset : offset + limit]
    lookup = {row.user_id: row for row in rows}
    users = [lookup[user_id] for user_id in window["user_id"]]
    return LeaderboardPage(users=users, total=total, page=page, limit=limit, total_pages=total_pages)


def build_leaderboard(
    trades: Iterable[Trade],
    *,
    page: int = 1,
    limit: int = 50,
    search: Optional[str] = None,
    sort_by: str = "total_gm_score",
    sort_order: str = "desc",
    mode: Optional[str] = None,
) -> LeaderboardPage:
    rows = aggregate_user_scores(trades, mode=mode)
    return rank_users(rows, page=page, limit=limit, search=search, sort_by=sort_by, sort_order=sort_order)


def user_analytics(trades: Iterable[Trade], user_id: str) -> Dict[str, Any]:
    """Summary analytics for one user's trade history."""

    mine = [t for t in trades if t.user_id == user_id]
    if not mine:
        return {
            "total_trades": 0,
            "accepted_trades": 0,
            "rejected_trades": 0,
            "average_grade": 0.0,
            "highest_grade": 0,
            "lowest_grade": 0,
            "total_gm_score": 0,
            "grade_distribution": [],
            "trading_partners": [],
            "position_analysis": [],
            "chicago_teams": [],
        }

    grades = [t.grade for t in mine]
    accepted = [t for t in mine if t.status == "accepted"]
    n = len(mine)

    buckets = [0] * 10
    for grade in grades:
        buckets[min(9, grade // 10)] += 1
    distribution = [
        {"bucket": f"{i * 10}-{(i + 1) * 10}", "count": count, "percentage": _round0(count / n * 100)}
        for i, count in enumerate(buckets)
    ]

    frame = pd.DataFrame(
        {
            "partner": [t.trade_partner or "" for t in mine],
            "partner_key": [t.partner_team_key or "" for t in mine],
            "team": [t.chicago_team or "" for t in mine],
            "grade": grades,
            "accepted": [t.status == "accepted" for t in mine],
        }
    )

    partners = (
        frame.groupby("partner", sort=False)
        .agg(team_key=("partner_key", "max"), trade_count=("grade", "size"), grade_sum=("grade", "sum"))
        .reset_index()
        .sort_values("trade_count", ascending=False, kind="mergesort")
        .head(10)
    )
    trading_partners = [
        {
            "team_name": row.partner,
            "team_key": row.team_key,
            "trade_count": int(row.trade_count),
            "avg_grade": _round0(row.grade_sum / row.trade_count),
        }
        for row in partners.itertuples(index=False)
    ]

    teams = (
        frame.groupby("team", sort=False)
        .agg(trade_count=("grade", "size"), grade_sum=("grade", "sum"), accepted=("accepted", "sum"))
        .reset_index()
        .sort_values("trade_count", ascending=False, kind="mergesort")
    )
    chicago_teams = [
        {
            "team": row.team,
            "trade_count": int(row.trade_count),
            "avg_grade": _round0(row.grade_sum / row.trade_count),
            "accepted_rate": _round0(row.accepted / row.trade_count * 100),
        }
        for row in teams.itertuples(index=False)
    ]

    positions: Dict[str, Dict[str, int]] = {}
    for trade in mine:
        for player in trade.players_sent:
            slot = positions.setdefault(str(player.get("position") or "UNK"), {"sent": 0, "received": 0})
            slot["sent"] += 1
        for player in trade.players_received:
            slot = positions.setdefault(str(player.get("position") or "UNK"), {"sent": 0, "received": 0})
            slot["received"] += 1
    position_analysis = sorted(
        (
            {
                "position": pos,
                "sent_count": counts["sent"],
                "received_count": counts["received"],
                "net_value": counts["received"] - counts["sent"],
            }
            for pos, counts in positions.items()
        ),
        key=lambda item: item["sent_count"] + item["received_count"],
        reverse=True,
    )

    return {
        "total_trades": n,
        "accepted_trades": len(accepted),
        "rejected_trades": sum(1 for t in mine if t.status == "rejected"),
        "average_grade": _round1(sum(grades) / n),
        "highest_grade": max(grades),
        "lowest_grade": min(grades),
        "total_gm_score": sum(t.grade for t in accepted),
        "grade_distribution": distribution,
        "trading_partners": trading_partners,
        "position_analysis": position_analysis,
        "chicago_teams": chicago_teams,
    }
