from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from api.dependencies import get_remote_client, get_trade_store
from remote_client import RemoteEvaluationClient, build_strategies
from trades import TradeStore

router = APIRouter(tags=["health"])


@router.get("/healthz", summary="Application health check")
async def healthcheck(
    store: TradeStore = Depends(get_trade_store),
    remote: RemoteEvaluationClient = Depends(get_remote_client),
) -> dict[str, Any]:
    return {
        "status": "ok",
        "trades": len(store.list_trades()),
        "remoteStrategies": [strategy.name for strategy in build_strategies(None, remote.config)],
    }
