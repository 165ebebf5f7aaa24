from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from api.dependencies import require_api_key
from api.models import ConfigResponse, ConfigUpdateRequest
from config import GM_SCORE_MODES, SETTINGS_HELP, settings

router = APIRouter(prefix="/config", tags=["config"], dependencies=[Depends(require_api_key)])


def _coerce_knob(name: str, value: Any, current: Any) -> Any:
    if name == "gm_score_mode":
        if value not in GM_SCORE_MODES:
            raise ValueError(f"gm_score_mode must be one of {', '.join(GM_SCORE_MODES)}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Knob '{name}' expects a number")
    if value < 0:
        raise ValueError(f"Knob '{name}' must not be negative")
    return int(value) if isinstance(current, int) else float(value)


def _check_consistency(knobs: dict[str, Any]) -> None:
    """Reject knob combinations the engine cannot run with."""

    weights = [knobs[name] for name in knobs if name.startswith("draft_weight_")]
    if sum(weights) <= 0:
        raise ValueError("Draft chart weights must sum to more than 0")
    if knobs["default_num_simulations"] < 1:
        raise ValueError("default_num_simulations must be at least 1")
    if knobs["default_num_simulations"] > knobs["max_num_simulations"]:
        raise ValueError("default_num_simulations must not exceed max_num_simulations")
    for name in ("injury_probability", "development_center"):
        if knobs[name] > 1:
            raise ValueError(f"Knob '{name}' must be between 0 and 1")


@router.get("/", response_model=ConfigResponse, summary="List current engine knobs")
async def get_config() -> ConfigResponse:
    return ConfigResponse(knobs=settings.snapshot())


@router.patch("/", response_model=ConfigResponse, summary="Update one or more engine knobs")
async def patch_config(payload: ConfigUpdateRequest) -> ConfigResponse:
    if not payload.updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No updates provided")
    snapshot = settings.snapshot()
    staged = {}
    for name, value in payload.updates.items():
        if name not in snapshot:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown knob '{name}'")
        try:
            staged[name] = _coerce_knob(name, value, snapshot[name])
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    try:
        _check_consistency({**snapshot, **staged})
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    for name, value in staged.items():
        settings.set(name, value)
    return ConfigResponse(knobs=settings.snapshot())


@router.get("/help", summary="Describe available configuration knobs")
async def config_help() -> dict[str, str]:
    return SETTINGS_HELP.copy()
