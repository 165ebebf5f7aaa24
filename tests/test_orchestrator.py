from __future__ import annotations

import json
import logging

import httpx
import numpy as np
import pytest

from config import RemoteConfig
from orchestrator import AUTHORITATIVE, LOCAL_FALLBACK, EvaluationOrchestrator
from remote_client import RemoteEvaluationClient
from scenarios import run_scenario


@pytest.fixture
def orchestrator(sample_store, remote_stub):
    return EvaluationOrchestrator(sample_store, remote_stub.client(), rng=np.random.default_rng(21))


def test_grade_falls_back_to_stored_grade(orchestrator, remote_stub, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="orchestrator"):
        evaluation = orchestrator.grade("t1")

    assert evaluation.provenance == LOCAL_FALLBACK
    assert evaluation.fallback_reason
    assert evaluation.result["grade"] == 82
    assert evaluation.result["breakdown"]["team_fit"] == 0.9
    assert evaluation.result["reasoning"].startswith("Chicago lands")
    assert len(remote_stub.requests) == 1
    assert "local fallback" in caplog.text


def test_grade_prefers_authoritative_answer(orchestrator, remote_stub) -> None:
    remote_stub.status_code = 200
    remote_stub.body = {"success": True, "grade": 79, "breakdown": {"talent_balance": 0.7}}

    first = orchestrator.grade("t1", user_token="abc")
    second = orchestrator.grade("t1", user_token="abc")

    assert first.provenance == AUTHORITATIVE
    assert first.auth_strategy == "user_token"
    assert first.result["grade"] == second.result["grade"] == 79
    payload = first.to_dict()
    assert payload["provenance"] == AUTHORITATIVE
    assert "fallback_reason" not in payload


def test_unknown_trade_raises_before_remote_call(orchestrator, remote_stub) -> None:
    with pytest.raises(LookupError):
        orchestrator.grade("missing")
    assert remote_stub.requests == []


def test_simulation_fallback_runs_monte_carlo(orchestrator) -> None:
    evaluation = orchestrator.simulate_outcomes("t1", 82, num_simulations=400, volatility="low")

    assert evaluation.provenance == LOCAL_FALLBACK
    assert evaluation.result["num_simulations"] == 400
    assert evaluation.result["volatility"] == "low"
    assert sum(b["count"] for b in evaluation.result["distribution"]) == 400


def test_simulation_forwards_request_shape(orchestrator, remote_stub) -> None:
    remote_stub.status_code = 200
    remote_stub.body = {"success": True, "simulation": {"meanGrade": 80}}

    evaluation = orchestrator.simulate_outcomes("t1", 82, volatility="HIGH", injury_factor=False)

    assert evaluation.is_authoritative
    sent = json.loads(remote_stub.requests[0].content)
    assert sent["player_volatility"] == "high"
    assert sent["num_simulations"] == 1000
    assert sent["injury_factor"] is False


def test_invalid_simulation_input_never_reaches_remote(orchestrator, remote_stub) -> None:
    with pytest.raises(ValueError):
        orchestrator.simulate_outcomes("t1", 82, volatility="wild")
    with pytest.raises(ValueError):
        orchestrator.simulate_outcomes("t1", 140)
    assert remote_stub.requests == []


def test_season_fallback_is_tagged_v1(orchestrator) -> None:
    evaluation = orchestrator.simulate_season("s1", "nfl", "bears")

    assert evaluation.provenance == LOCAL_FALLBACK
    assert evaluation.result["simulation_version"] == "v1"
    assert evaluation.result["success"] is True
    assert evaluation.result["trades_considered"] == 1


def test_season_with_unknown_sport_raises(orchestrator, remote_stub) -> None:
    with pytest.raises(ValueError):
        orchestrator.simulate_season("s1", "cricket", "bears")
    assert remote_stub.requests == []


def test_what_if_fallback_matches_local_engine(orchestrator) -> None:
    params = {"injury_severity": "major"}
    evaluation = orchestrator.what_if("t1", 75, "injury_impact", params)

    assert evaluation.provenance == LOCAL_FALLBACK
    assert evaluation.result == run_scenario("injury_impact", 75, params).to_dict()


def test_unknown_scenario_raises_without_remote_call(orchestrator, remote_stub) -> None:
    with pytest.raises(ValueError):
        orchestrator.what_if("t1", 75, "mystery_box", {})
    assert remote_stub.requests == []


def test_missing_credentials_fall_back_without_requests(sample_store, remote_stub) -> None:
    orchestrator = EvaluationOrchestrator(sample_store, remote_stub.client(RemoteConfig(base_url="https://grading.test")))
    evaluation = orchestrator.grade("t3")

    assert evaluation.provenance == LOCAL_FALLBACK
    assert "no credentials" in evaluation.fallback_reason
    assert remote_stub.requests == []


def test_remote_timeout_falls_back_to_stored_grade(sample_store) -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    config = RemoteConfig(base_url="https://grading.test", timeout=0.5, service_key="svc-key")
    remote = RemoteEvaluationClient(config, transport=httpx.MockTransport(handler))
    evaluation = EvaluationOrchestrator(sample_store, remote).grade("t1")

    assert evaluation.provenance == LOCAL_FALLBACK
    assert "ReadTimeout" in evaluation.fallback_reason
    assert evaluation.result["grade"] == 82
    assert len(seen) == 1


def test_unencodable_user_token_does_not_raise(sample_store, remote_stub) -> None:
    orchestrator = EvaluationOrchestrator(sample_store, remote_stub.client())
    evaluation = orchestrator.grade("t1", user_token="tokén")

    assert evaluation.provenance == LOCAL_FALLBACK
    assert evaluation.result["grade"] == 82
    assert [request.headers["Authorization"] for request in remote_stub.requests] == ["Bearer svc-key"]
