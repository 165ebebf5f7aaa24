"""Pydantic schemas used by the API endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    knobs: Dict[str, Any]


class ConfigUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    updates: Dict[str, Any] = Field(default_factory=dict)


class GradeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trade_id: str = Field(..., alias="tradeId")


class SimulateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trade_id: str = Field(..., alias="tradeId")
    original_grade: int = Field(..., alias="originalGrade", ge=0, le=100)
    num_simulations: Optional[int] = Field(default=None, alias="numSimulations", ge=1)
    player_volatility: str = Field(default="medium", alias="playerVolatility")
    injury_factor: bool = Field(default=True, alias="injuryFactor")
    development_factor: bool = Field(default=True, alias="developmentFactor")


class SeasonSimulationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    sport: str
    team_key: str = Field(..., alias="teamKey")
    season_year: Optional[int] = Field(default=None, alias="seasonYear")
    depth: Optional[int] = Field(default=None, ge=1)


class ScenarioRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trade_id: str = Field(..., alias="tradeId")
    original_grade: int = Field(..., alias="originalGrade", ge=0, le=100)
    scenario_type: str = Field(..., alias="scenarioType")
    parameters: Dict[str, Any] = Field(default_factory=dict)


class EvaluationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: str
    provenance: str
    fallback_reason: Optional[str] = Field(default=None, alias="fallbackReason")
    auth_strategy: Optional[str] = Field(default=None, alias="authStrategy")
    result: Dict[str, Any]


class LeaderboardUser(BaseModel):
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    total_trades: int
    accepted_trades: int
    rejected_trades: int
    average_grade: float
    total_gm_score: int
    highest_grade: int
    lowest_grade: int
    last_trade_at: Optional[str] = None


class LeaderboardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    users: List[LeaderboardUser]
    total: int
    page: int
    limit: int
    total_pages: int = Field(..., alias="totalPages")


class UserAnalyticsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    total_trades: int = Field(..., alias="totalTrades")
    accepted_trades: int = Field(..., alias="acceptedTrades")
    rejected_trades: int = Field(..., alias="rejectedTrades")
    average_grade: float = Field(..., alias="averageGrade")
    highest_grade: int = Field(..., alias="highestGrade")
    lowest_grade: int = Field(..., alias="lowestGrade")
    total_gm_score: int = Field(..., alias="totalGmScore")
    grade_distribution: List[Dict[str, Any]] = Field(default_factory=list, alias="gradeDistribution")
    trading_partners: List[Dict[str, Any]] = Field(default_factory=list, alias="tradingPartners")
    position_analysis: List[Dict[str, Any]] = Field(default_factory=list, alias="positionAnalysis")
    chicago_teams: List[Dict[str, Any]] = Field(default_factory=list, alias="chicagoTeams")


class DraftPickInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    year: int
    round: int = Field(..., ge=1)
    pick_number: Optional[int] = Field(default=None, alias="pickNumber")
    legacy: Optional[float] = None
    modern: Optional[float] = None
    surplus: Optional[float] = None
    academic: Optional[float] = None
    synthesized: Optional[float] = None
    condition: Optional[str] = None


class DraftPickValue(DraftPickInput):
    label: str


class DraftCapitalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    picks_sent: List[DraftPickInput] = Field(default_factory=list, alias="picksSent")
    picks_received: List[DraftPickInput] = Field(default_factory=list, alias="picksReceived")


class DraftCapitalSide(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    picks: List[DraftPickValue]
    total: float
    valued_picks: int = Field(..., alias="valuedPicks")
    unvalued_picks: int = Field(..., alias="unvaluedPicks")


class DraftCapitalResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sent: DraftCapitalSide
    received: DraftCapitalSide
    net: float
