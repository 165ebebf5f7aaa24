"""Read-only trade records and the store contract the engine consumes."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)

TRADE_STATUSES = ("accepted", "rejected")
BREAKDOWN_KEYS = ("talent_balance", "contract_value", "team_fit", "future_assets")


def _coerce_int(value: Any) -> Optional[int]:
    try:
        if value is None or value == "":
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_float(value: Any) -> Optional[float]:
    try:
        if value is None or value == "":
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class DraftPickAsset:
    year: int
    round: int
    pick_number: Optional[int] = None
    legacy: Optional[float] = None
    modern: Optional[float] = None
    surplus: Optional[float] = None
    academic: Optional[float] = None
    synthesized: Optional[float] = None
    condition: Optional[str] = None

    def chart_values(self) -> Dict[str, Optional[float]]:
        return {
            "legacy": self.legacy,
            "modern": self.modern,
            "surplus": self.surplus,
            "academic": self.academic,
        }

    @property
    def label(self) -> str:
        text = f"{self.year} Round {self.round}"
        if self.pick_number is not None:
            text += f" Pick {self.pick_number}"
        return text


@dataclass(frozen=True)
class Trade:
    """A graded trade as stored by the persistent trade store."""

    id: str
    user_id: str
    grade: int
    status: str
    created_at: str
    session_id: Optional[str] = None
    user_email: Optional[str] = None
    display_name: Optional[str] = None
    sport: Optional[str] = None
    chicago_team: Optional[str] = None
    trade_partner: Optional[str] = None
    partner_team_key: Optional[str] = None
    trade_partner_2: Optional[str] = None
    players_sent: List[Dict[str, Any]] = field(default_factory=list)
    players_received: List[Dict[str, Any]] = field(default_factory=list)
    draft_picks_sent: List[DraftPickAsset] = field(default_factory=list)
    draft_picks_received: List[DraftPickAsset] = field(default_factory=list)
    breakdown: Dict[str, float] = field(default_factory=dict)
    reasoning: Optional[str] = None

    @property
    def is_accepted(self) -> bool:
        return self.status == "accepted"

    @property
    def teams(self) -> List[str]:
        return [team for team in (self.chicago_team, self.trade_partner, self.trade_partner_2) if team]


def parse_draft_pick(payload: Dict[str, Any]) -> DraftPickAsset:
    year = _coerce_int(payload.get("year") or payload.get("pick_year"))
    round_no = _coerce_int(payload.get("round") or payload.get("pick_round"))
    if year is None or round_no is None:
        raise ValueError("Draft pick requires 'year' and 'round'")
    return DraftPickAsset(
        year=year,
        round=round_no,
        pick_number=_coerce_int(payload.get("pick_number")),
        legacy=_coerce_float(payload.get("legacy")),
        modern=_coerce_float(payload.get("modern")),
        surplus=_coerce_float(payload.get("surplus")),
        academic=_coerce_float(payload.get("academic")),
        synthesized=_coerce_float(payload.get("synthesized")),
        condition=payload.get("condition") or None,
    )


def parse_trade(payload: Dict[str, Any]) -> Trade:
    """Build a :class:`Trade` from a raw store row."""

    trade_id = payload.get("id")
    user_id = payload.get("user_id")
    grade = _coerce_int(payload.get("grade"))
    if trade_id is None or user_id is None or grade is None:
        raise ValueError("Trade record requires 'id', 'user_id' and 'grade'")
    raw_status = payload.get("status")
    if not raw_status:
        raise ValueError(f"Trade record '{trade_id}' has no status")
    status = str(raw_status).lower()
    if status not in TRADE_STATUSES:
        raise ValueError(f"Unknown trade status '{status}'")

    breakdown: Dict[str, float] = {}
    raw_breakdown = payload.get("breakdown") or {}
    for key in BREAKDOWN_KEYS:
        value = _coerce_float(raw_breakdown.get(key, payload.get(key)))
        if value is not None:
            breakdown[key] = value

    return Trade(
        id=str(trade_id),
        user_id=str(user_id),
        grade=max(0, min(100, grade)),
        status=status,
        created_at=str(payload.get("created_at") or ""),
        session_id=payload.get("session_id"),
        user_email=payload.get("user_email"),
        display_name=payload.get("display_name"),
        sport=payload.get("sport"),
        chicago_team=payload.get("chicago_team"),
        trade_partner=payload.get("trade_partner"),
        partner_team_key=payload.get("partner_team_key"),
        trade_partner_2=payload.get("trade_partner_2"),
        players_sent=list(payload.get("players_sent") or []),
        players_received=list(payload.get("players_received") or []),
        draft_picks_sent=[parse_draft_pick(p) for p in payload.get("draft_picks_sent") or []],
        draft_picks_received=[parse_draft_pick(p) for p in payload.get("draft_picks_received") or []],
        breakdown=breakdown,
        reasoning=payload.get("grade_reasoning") or payload.get("reasoning"),
    )


class TradeStore(Protocol):
    """Read access to graded trades. The engine never writes through it."""

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        ...

    def list_session_trades(self, session_id: str, status: Optional[str] = None) -> List[Trade]:
        ...

    def list_trades(self) -> List[Trade]:
        ...


class InMemoryTradeStore:
    """Trade store backed by a list of records held in memory."""

    def __init__(self, trades: Iterable[Trade] = ()) -> None:
        self._lock = RLock()
        self._trades: Dict[str, Trade] = {trade.id: trade for trade in trades}

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "InMemoryTradeStore":
        return cls(parse_trade(row) for row in records)

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        with self._lock:
            return self._trades.get(str(trade_id))

    def list_session_trades(self, session_id: str, status: Optional[str] = None) -> List[Trade]:
        with self._lock:
            rows = [t for t in self._trades.values() if t.session_id == session_id]
        if status is not None:
            rows = [t for t in rows if t.status == status]
        return sorted(rows, key=lambda t: t.created_at)

    def list_trades(self) -> List[Trade]:
        with self._lock:
            return list(self._trades.values())


def load_trade_store(path: Path | str | None) -> InMemoryTradeStore:
    """Load trades from a JSON array file; a missing path yields an empty store."""

    if path is None:
        return InMemoryTradeStore()
    path = Path(path)
    if not path.exists():
        logger.warning("Trades file %s not found; starting with an empty store", path)
        return InMemoryTradeStore()
    records = json.loads(path.read_text())
    if not isinstance(records, list):
        raise ValueError(f"Trades file {path} must contain a JSON array")
    return InMemoryTradeStore.from_records(records)
