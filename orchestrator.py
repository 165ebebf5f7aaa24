"""Route evaluation requests to the grading service with a local fallback.

Every request kind is validated locally first, then sent to the remote
service. When the remote answer is not authoritative the matching local
computation runs instead, and the response records which path produced it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import numpy as np

import scenarios
import season
import simulation
from remote_client import Authoritative, RemoteEvaluationClient, RemoteResult, Unavailable
from trades import TradeStore

logger = logging.getLogger(__name__)

AUTHORITATIVE = "authoritative"
LOCAL_FALLBACK = "local_fallback"

GRADE_ENDPOINT = "/api/gm/grade"
SIMULATE_ENDPOINT = "/api/gm/simulate"
SEASON_ENDPOINT = "/api/gm/sim/season"
SCENARIOS_ENDPOINT = "/api/gm/scenarios"


@dataclass(frozen=True)
class Evaluation:
    kind: str
    provenance: str
    result: Dict[str, Any]
    fallback_reason: Optional[str] = None
    auth_strategy: Optional[str] = None

    @property
    def is_authoritative(self) -> bool:
        return self.provenance == AUTHORITATIVE

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.result)
        payload["provenance"] = self.provenance
        if self.fallback_reason is not None:
            payload["fallback_reason"] = self.fallback_reason
        if self.auth_strategy is not None:
            payload["auth_strategy"] = self.auth_strategy
        return payload


class EvaluationOrchestrator:
    """Entry point for grade, outcome simulation, season and what-if requests."""

    def __init__(
        self,
        store: TradeStore,
        remote: RemoteEvaluationClient,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.store = store
        self.remote = remote
        self._rng = rng

    def _authoritative(self, kind: str, outcome: Authoritative) -> Evaluation:
        return Evaluation(kind=kind, provenance=AUTHORITATIVE, result=outcome.payload, auth_strategy=outcome.strategy)

    def _fallback(self, kind: str, outcome: Unavailable, result: Dict[str, Any]) -> Evaluation:
        return Evaluation(kind=kind, provenance=LOCAL_FALLBACK, result=result, fallback_reason=outcome.reason)

    def _call_remote(self, kind: str, endpoint: str, payload: Dict[str, Any], user_token: Optional[str]) -> RemoteResult:
        outcome = self.remote.post(endpoint, payload, user_token=user_token)
        if not isinstance(outcome, Authoritative):
            logger.warning("Remote %s unavailable (%s); using local fallback", kind, outcome.reason)
        return outcome

    def grade(self, trade_id: str, *, user_token: Optional[str] = None) -> Evaluation:
        trade = self.store.get_trade(trade_id)
        if trade is None:
            raise LookupError(f"Trade '{trade_id}' not found")

        outcome = self._call_remote("grade", GRADE_ENDPOINT, {"trade_id": trade_id}, user_token)
        if isinstance(outcome, Authoritative):
            return self._authoritative("grade", outcome)

        result = {
            "trade_id": trade.id,
            "grade": trade.grade,
            "status": trade.status,
            "breakdown": dict(trade.breakdown),
            "reasoning": trade.reasoning,
        }
        return self._fallback("grade", outcome, result)

    def simulate_outcomes(
        self,
        trade_id: str,
        original_grade: int,
        *,
        num_simulations: Optional[int] = None,
        volatility: str = "medium",
        injury_factor: bool = True,
        development_factor: bool = True,
        user_token: Optional[str] = None,
    ) -> Evaluation:
        num_simulations, tier = simulation.validate_request(original_grade, num_simulations, volatility)
        payload = {
            "trade_id": trade_id,
            "original_grade": original_grade,
            "num_simulations": num_simulations,
            "player_volatility": tier,
            "injury_factor": injury_factor,
            "development_factor": development_factor,
        }
        outcome = self._call_remote("simulate_outcomes", SIMULATE_ENDPOINT, payload, user_token)
        if isinstance(outcome, Authoritative):
            return self._authoritative("simulate_outcomes", outcome)

        result = simulation.simulate_outcomes(
            original_grade,
            num_simulations,
            tier,
            injury_factor=injury_factor,
            development_factor=development_factor,
            rng=self._rng,
        )
        return self._fallback("simulate_outcomes", outcome, result.to_dict())

    def simulate_season(
        self,
        session_id: str,
        sport: str,
        team_key: str,
        *,
        season_year: Optional[int] = None,
        depth: Optional[int] = None,
        user_token: Optional[str] = None,
    ) -> Evaluation:
        season.validate_request(sport, team_key, depth)
        payload: Dict[str, Any] = {
            "sessionId": session_id,
            "sport": sport,
            "teamKey": team_key,
            "seasonYear": season_year or season.DEFAULT_SEASON_YEAR,
        }
        if depth is not None:
            payload["depth"] = depth
        outcome = self._call_remote("simulate_season", SEASON_ENDPOINT, payload, user_token)
        if isinstance(outcome, Authoritative):
            return self._authoritative("simulate_season", outcome)

        trades = self.store.list_session_trades(session_id, status="accepted")
        projection = season.project_season(trades, sport, team_key, season_year=season_year, depth=depth)
        return self._fallback("simulate_season", outcome, projection.to_dict())

    def what_if(
        self,
        trade_id: str,
        original_grade: int,
        scenario_type: str,
        parameters: Optional[Mapping[str, Any]] = None,
        *,
        user_token: Optional[str] = None,
    ) -> Evaluation:
        # Pure and cheap, so it doubles as input validation.
        local = scenarios.run_scenario(scenario_type, original_grade, parameters)
        payload = {
            "trade_id": trade_id,
            "original_grade": original_grade,
            "scenario_type": scenario_type,
            "parameters": dict(parameters or {}),
        }
        outcome = self._call_remote("what_if", SCENARIOS_ENDPOINT, payload, user_token)
        if isinstance(outcome, Authoritative):
            return self._authoritative("what_if", outcome)
        return self._fallback("what_if", outcome, local.to_dict())
