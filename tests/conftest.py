from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_remote_client, get_trade_store
from api.main import app
from config import RemoteConfig, settings
from remote_client import RemoteEvaluationClient
from trades import InMemoryTradeStore, Trade, parse_trade

REMOTE_BASE = "https://grading.test"


def trade_record(**overrides: Any) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": "t-base",
        "user_id": "u-base",
        "grade": 70,
        "status": "rejected",
        "created_at": "2026-01-01T12:00:00Z",
        "session_id": "s-base",
        "sport": "nfl",
        "chicago_team": "bears",
        "trade_partner": "Green Bay Packers",
        "partner_team_key": "packers",
    }
    record.update(overrides)
    return record


def make_trade(**overrides: Any) -> Trade:
    return parse_trade(trade_record(**overrides))


SAMPLE_RECORDS: List[Dict[str, Any]] = [
    trade_record(
        id="t1",
        user_id="u1",
        user_email="gm1@example.com",
        display_name="Windy City GM",
        grade=82,
        status="accepted",
        session_id="s1",
        created_at="2026-01-05T18:30:00Z",
        breakdown={"talent_balance": 0.8, "contract_value": 0.7, "team_fit": 0.9, "future_assets": 0.6},
        grade_reasoning="Chicago lands a WR1 without touching the first-round pick.",
        players_sent=[{"name": "Veteran Back", "position": "RB"}],
        players_received=[{"name": "Young Receiver", "position": "WR"}],
        draft_picks_sent=[{"year": 2027, "round": 3, "legacy": 12.0, "modern": 10.0}],
    ),
    trade_record(
        id="t2",
        user_id="u1",
        user_email="gm1@example.com",
        display_name="Windy City GM",
        grade=64,
        status="rejected",
        session_id="s1",
        created_at="2026-01-06T09:00:00Z",
        trade_partner="Detroit Lions",
        partner_team_key="lions",
    ),
    trade_record(
        id="t3",
        user_id="u2",
        user_email="hoops@example.com",
        display_name="Bulls Fan",
        grade=91,
        status="accepted",
        session_id="s2",
        sport="nba",
        chicago_team="bulls",
        trade_partner="Boston Celtics",
        partner_team_key="celtics",
        created_at="2026-01-07T20:15:00Z",
    ),
    trade_record(
        id="t4",
        user_id="u3",
        grade=77,
        status="accepted",
        session_id="s3",
        created_at="2026-01-03T10:00:00Z",
    ),
]


class RemoteStub:
    """Fake grading service; records every request it receives."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 503
        self.body: Any = {"success": False, "error": "service unavailable"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def client(self, config: RemoteConfig | None = None) -> RemoteEvaluationClient:
        config = config or RemoteConfig(base_url=REMOTE_BASE, service_key="svc-key")
        return RemoteEvaluationClient(config, transport=httpx.MockTransport(self.handler))


@pytest.fixture(autouse=True)
def reset_settings():
    yield
    settings.reset()


@pytest.fixture
def sample_store() -> InMemoryTradeStore:
    return InMemoryTradeStore.from_records(SAMPLE_RECORDS)


@pytest.fixture
def remote_stub() -> RemoteStub:
    return RemoteStub()


@pytest.fixture
def client(monkeypatch, sample_store: InMemoryTradeStore, remote_stub: RemoteStub):
    monkeypatch.delenv("GM_API_KEY", raising=False)
    app.dependency_overrides[get_trade_store] = lambda: sample_store
    app.dependency_overrides[get_remote_client] = lambda: remote_stub.client()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
