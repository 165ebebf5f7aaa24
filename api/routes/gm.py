from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import get_bearer_token, get_orchestrator, require_api_key
from api.models import (
    EvaluationResponse,
    GradeRequest,
    ScenarioRequest,
    SeasonSimulationRequest,
    SimulateRequest,
)
from orchestrator import Evaluation, EvaluationOrchestrator

router = APIRouter(prefix="/gm", tags=["gm"], dependencies=[Depends(require_api_key)])


def _to_response(evaluation: Evaluation) -> EvaluationResponse:
    return EvaluationResponse(
        kind=evaluation.kind,
        provenance=evaluation.provenance,
        fallback_reason=evaluation.fallback_reason,
        auth_strategy=evaluation.auth_strategy,
        result=evaluation.result,
    )


# Handlers are sync so the outbound call runs in the threadpool.
@router.post("/grade", response_model=EvaluationResponse, summary="Grade a stored trade")
def grade_trade(
    payload: GradeRequest,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
    token: Optional[str] = Depends(get_bearer_token),
) -> EvaluationResponse:
    try:
        evaluation = orchestrator.grade(payload.trade_id, user_token=token)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_response(evaluation)


@router.post("/simulate", response_model=EvaluationResponse, summary="Monte Carlo outcome range for a trade")
def simulate_trade(
    payload: SimulateRequest,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
    token: Optional[str] = Depends(get_bearer_token),
) -> EvaluationResponse:
    try:
        evaluation = orchestrator.simulate_outcomes(
            payload.trade_id,
            payload.original_grade,
            num_simulations=payload.num_simulations,
            volatility=payload.player_volatility,
            injury_factor=payload.injury_factor,
            development_factor=payload.development_factor,
            user_token=token,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(evaluation)


@router.post("/sim/season", response_model=EvaluationResponse, summary="Project a season after the session's trades")
def simulate_season(
    payload: SeasonSimulationRequest,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
    token: Optional[str] = Depends(get_bearer_token),
) -> EvaluationResponse:
    try:
        evaluation = orchestrator.simulate_season(
            payload.session_id,
            payload.sport,
            payload.team_key,
            season_year=payload.season_year,
            depth=payload.depth,
            user_token=token,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(evaluation)


@router.post("/scenarios", response_model=EvaluationResponse, summary="Apply a what-if scenario to a trade grade")
def run_scenario(
    payload: ScenarioRequest,
    orchestrator: EvaluationOrchestrator = Depends(get_orchestrator),
    token: Optional[str] = Depends(get_bearer_token),
) -> EvaluationResponse:
    try:
        evaluation = orchestrator.what_if(
            payload.trade_id,
            payload.original_grade,
            payload.scenario_type,
            payload.parameters,
            user_token=token,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(evaluation)
